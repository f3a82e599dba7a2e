"""
OAuth exception classes for the Mercado Libre SDK.

This module defines the root of the SDK exception hierarchy and the
errors raised while obtaining, refreshing and persisting OAuth tokens.
"""


class MeliSDKError(Exception):
    """Base exception for all Mercado Libre SDK errors."""

    pass


class ConfigurationError(MeliSDKError):
    """SDK misconfiguration (missing credentials, invalid settings)."""

    pass


class TokenExchangeError(MeliSDKError):
    """Failed to exchange an authorization code for tokens."""

    pass


class TokenRefreshError(MeliSDKError):
    """Failed to obtain a new access token using the refresh token."""

    pass


class TokenStorageError(MeliSDKError):
    """Token storage operation failed (file I/O error)."""

    pass
