"""
Mercado Libre SDK.

Client library for the Mercado Libre REST API with OAuth 2.0
authorization code and refresh token support.

Example:
    from meli import MeliClient, MeliCredentials, MeliSite

    credentials = MeliCredentials(MeliSite.MEXICO, 123456, "secret")
    client = MeliClient(credentials)
    url = client.get_auth_url(123456, MeliSite.MEXICO, "https://example.com/callback")
    # ... user authorizes, Mercado Libre redirects with ?code=...
    client.authorize(code, "https://example.com/callback")
    me = client.get("/users/me").json()
"""

from .__version__ import __version__
from .api import (
    DecodeError,
    HttpParams,
    MeliAPIError,
    MeliAuthenticationError,
    MeliClient,
    RequestCancelledError,
    TransportError,
)
from .oauth import (
    ConfigurationError,
    ExpiryDetection,
    MeliCredentials,
    MeliOAuthConfig,
    MeliSDKError,
    TokenExchangeError,
    TokenRefreshError,
    TokenResponse,
    TokensChangedEvent,
    TokenStorage,
)
from .sites import MeliSite

__all__ = [
    "__version__",
    "MeliClient",
    "MeliCredentials",
    "MeliOAuthConfig",
    "MeliSite",
    "ExpiryDetection",
    "HttpParams",
    "TokenResponse",
    "TokensChangedEvent",
    "TokenStorage",
    "MeliSDKError",
    "ConfigurationError",
    "TokenExchangeError",
    "TokenRefreshError",
    "MeliAPIError",
    "MeliAuthenticationError",
    "TransportError",
    "DecodeError",
    "RequestCancelledError",
]
