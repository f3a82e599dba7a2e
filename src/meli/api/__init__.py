"""
Mercado Libre API client module.

- MeliClient: Authenticated HTTP client with automatic token refresh
- TokenRefreshPolicy: One-refresh, one-retry recovery from expired tokens
- RequestBuilder / PendingRequest: Per-attempt request construction
- HttpParams: Ordered, multi-valued query parameters
- Models: ErrorResponse, Site, Item, Picture, ItemResponse
"""

from .client import MeliClient
from .decoding import decode_response
from .exceptions import (
    DecodeError,
    MeliAPIError,
    MeliAuthenticationError,
    RequestCancelledError,
    TransportError,
)
from .models import ErrorResponse, Item, ItemResponse, Picture, Site
from .params import HttpParams
from .refresh_policy import TokenRefreshPolicy
from .request_builder import PendingRequest, RequestBuilder

__all__ = [
    "MeliClient",
    "TokenRefreshPolicy",
    "RequestBuilder",
    "PendingRequest",
    "HttpParams",
    "decode_response",
    "ErrorResponse",
    "Site",
    "Item",
    "Picture",
    "ItemResponse",
    "MeliAPIError",
    "MeliAuthenticationError",
    "TransportError",
    "DecodeError",
    "RequestCancelledError",
]
