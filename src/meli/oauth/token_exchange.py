"""
Token exchange against the Mercado Libre OAuth token endpoint.

Both grants handled here are sent as plain, unauthenticated requests on
the shared session. They never pass through the refresh-and-retry policy,
so a failing refresh cannot trigger another refresh.
"""

import logging
from typing import Dict, Optional

import requests

from .config import TOKEN_PATH, USER_AGENT
from .credentials import MeliCredentials, mask_token
from .exceptions import TokenExchangeError, TokenRefreshError
from .token_response import TokenResponse

logger = logging.getLogger(__name__)

# None drops any Authorization default the caller set on the shared session
EXCHANGE_HEADERS: Dict[str, Optional[str]] = {
    "Accept": "application/json",
    "User-Agent": USER_AGENT,
    "Authorization": None,
}


class TokenExchange:
    """
    Performs the authorization-code and refresh-token exchanges.

    The credential is passed per call and is never modified here; applying
    the returned TokenResponse is left to the caller.
    """

    def __init__(self, session: requests.Session, base_url: str, timeout: float = 30):
        """
        Initialize token exchange.

        Args:
            session: HTTP session used for the token calls
            base_url: API base URL (the token endpoint is ``/oauth/token`` under it)
            timeout: Default request timeout in seconds
        """
        self.session = session
        self.token_url = f"{base_url.rstrip('/')}{TOKEN_PATH}"
        self.timeout = timeout

    def exchange_authorization_code(
        self,
        credentials: MeliCredentials,
        code: str,
        redirect_uri: str,
        timeout: Optional[float] = None,
    ) -> TokenResponse:
        """
        Exchange an authorization code for access and refresh tokens.

        The grant parameters travel in the query string of the POST.

        Args:
            credentials: Application identity
            code: Code received on the redirect URI
            redirect_uri: Redirect URI used to obtain the code

        Returns:
            TokenResponse

        Raises:
            TokenExchangeError: On a non-success status, network error or
                                malformed response
        """
        logger.info(f"Exchanging authorization code for tokens (client {credentials.client_id})")

        params = [
            ("grant_type", "authorization_code"),
            ("client_id", str(credentials.client_id)),
            ("client_secret", credentials.client_secret),
            ("code", code),
            ("redirect_uri", redirect_uri),
        ]

        try:
            response = self.session.post(
                self.token_url,
                params=params,
                headers=EXCHANGE_HEADERS,
                timeout=timeout or self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"Network error during token exchange: {e}")
            raise TokenExchangeError(f"Network error during token exchange: {e}") from e

        if not response.ok:
            logger.error(f"Token exchange failed: {response.status_code} - {response.text}")
            raise TokenExchangeError(
                f"Token exchange failed with status {response.status_code}. "
                f"Check the code, redirect URI, client_id and client_secret."
            )

        tokens = self._parse(response, TokenExchangeError)
        logger.info(f"Obtained tokens for user {tokens.user_id}")
        return tokens

    def exchange_refresh_token(
        self,
        credentials: MeliCredentials,
        refresh_token: str,
        timeout: Optional[float] = None,
    ) -> TokenResponse:
        """
        Obtain a new access token using a refresh token.

        The grant parameters travel form-encoded in the request body. No
        retry is attempted here.

        Args:
            credentials: Application identity
            refresh_token: Refresh token to redeem

        Returns:
            TokenResponse (refresh_token is None if the endpoint kept the old one)

        Raises:
            TokenRefreshError: On a non-success status, network error or
                               malformed response
        """
        if not refresh_token:
            raise TokenRefreshError("No refresh token available")

        logger.info(f"Refreshing access token with refresh token {mask_token(refresh_token)}")

        data: Dict[str, str] = {
            "grant_type": "refresh_token",
            "client_id": str(credentials.client_id),
            "client_secret": credentials.client_secret,
            "refresh_token": refresh_token,
        }

        try:
            response = self.session.post(
                self.token_url,
                data=data,
                headers=EXCHANGE_HEADERS,
                timeout=timeout or self.timeout,
            )
        except requests.RequestException as e:
            logger.warning(f"Network error during token refresh: {e}")
            raise TokenRefreshError(f"Network error during token refresh: {e}") from e

        if not response.ok:
            logger.warning(f"Token refresh failed: {response.status_code} - {response.text}")
            raise TokenRefreshError(
                f"Token refresh failed with status {response.status_code}. "
                f"The refresh token may have expired or been revoked."
            )

        tokens = self._parse(response, TokenRefreshError)
        logger.info(f"Refreshed access token: {mask_token(tokens.access_token)}")
        return tokens

    @staticmethod
    def _parse(response: requests.Response, error_class: type) -> TokenResponse:
        try:
            return TokenResponse.from_dict(response.json())
        except (KeyError, TypeError, ValueError) as e:
            logger.error(f"Invalid response from token endpoint: {e}")
            raise error_class(f"Invalid response from token endpoint: {e}") from e
