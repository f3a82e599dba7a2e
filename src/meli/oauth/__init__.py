"""
OAuth 2.0 support for the Mercado Libre API.

This module implements the authorization code and refresh token grants
used by Mercado Libre applications.

Public API:
    MeliCredentials: Application identity and shared token pair
    TokenResponse: Result of a token exchange
    TokenExchange: Authorization-code and refresh-token exchanges
    TokenStorage: File-based token persistence
    MeliOAuthConfig: Configuration management
    build_authorization_url: User authorization URL

Exceptions:
    MeliSDKError: Base exception
    ConfigurationError: Configuration error
    TokenExchangeError: Authorization code exchange failed
    TokenRefreshError: Token refresh failed
    TokenStorageError: Storage operation failed
"""

from .authorization import build_authorization_url
from .config import ExpiryDetection, MeliOAuthConfig
from .credentials import MeliCredentials, TokenPair, TokensChangedEvent
from .exceptions import (
    ConfigurationError,
    MeliSDKError,
    TokenExchangeError,
    TokenRefreshError,
    TokenStorageError,
)
from .token_exchange import TokenExchange
from .token_response import TokenResponse
from .token_storage import TokenStorage

__all__ = [
    # Configuration
    "MeliOAuthConfig",
    "ExpiryDetection",
    # Credential state
    "MeliCredentials",
    "TokenPair",
    "TokensChangedEvent",
    "TokenResponse",
    # Token exchange
    "TokenExchange",
    "build_authorization_url",
    # Token Storage
    "TokenStorage",
    # Exceptions
    "MeliSDKError",
    "ConfigurationError",
    "TokenExchangeError",
    "TokenRefreshError",
    "TokenStorageError",
]
