"""Exceptions for the Mercado Libre API client."""

from typing import Optional

from ..oauth.exceptions import MeliSDKError


class MeliAPIError(MeliSDKError):
    """
    Base exception for Mercado Libre API errors.

    Attributes:
        status_code: HTTP status of the failed response, if any
        error_response: Parsed error payload, if the body had the error shape
    """

    def __init__(self, message: str, status_code: Optional[int] = None, error_response=None):
        super().__init__(message)
        self.status_code = status_code
        self.error_response = error_response


class MeliAuthenticationError(MeliAPIError):
    """
    The API rejected the request's credentials (401/403).

    Raised after the single refresh attempt, if any, has been spent. If it
    persists, the user has to authorize the application again.
    """

    pass


class TransportError(MeliAPIError):
    """Network or connection failure. Never retried by the SDK."""

    pass


class DecodeError(MeliAPIError):
    """A successful response body did not match the requested model."""

    pass


class RequestCancelledError(MeliSDKError):
    """The caller cancelled the call before it completed."""

    pass
