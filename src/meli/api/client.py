"""
Mercado Libre API client with OAuth authentication.

This module provides the client applications use to call the Mercado
Libre REST API. It handles:

- Bearer token attachment from the shared credential
- Transparent recovery from expired access tokens (one refresh, one retry)
- Authorization URL construction and authorization code exchange
- Optional decoding of responses into pydantic models
"""

import logging
import threading
from typing import Any, Optional, Type, Union

import requests

from ..oauth.authorization import build_authorization_url
from ..oauth.config import DEFAULT_API_URL, ExpiryDetection, MeliOAuthConfig
from ..oauth.credentials import MeliCredentials
from ..oauth.exceptions import ConfigurationError, TokenExchangeError
from ..oauth.token_exchange import TokenExchange
from ..oauth.token_storage import TokenStorage
from ..sites import MeliSite
from .decoding import decode_response
from .params import ParamsLike, normalize_params
from .refresh_policy import TokenRefreshPolicy
from .request_builder import PendingRequest, RequestBuilder

logger = logging.getLogger(__name__)


class MeliClient:
    """
    Authenticated HTTP client for the Mercado Libre API.

    Example:
        credentials = MeliCredentials(MeliSite.ARGENTINA, 123456, "secret",
                                      "APP_USR-access", "TG-refresh")
        with MeliClient(credentials) as client:
            sites = client.get("/sites", model=List[Site])
            response = client.post("/items", body={"title": "..."})
    """

    def __init__(
        self,
        credentials: Optional[MeliCredentials] = None,
        session: Optional[requests.Session] = None,
        base_url: str = DEFAULT_API_URL,
        timeout: float = 30,
        expiry_detection: Union[ExpiryDetection, str] = ExpiryDetection.STATUS,
    ):
        """
        Initialize the client.

        Args:
            credentials: Shared credential (anonymous calls only if None)
            session: HTTP session to use (creates one if not provided)
            base_url: API base URL
            timeout: Default request timeout in seconds
            expiry_detection: How a 401 is recognised as an expired access token
        """
        self.credentials = credentials
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

        self.builder = RequestBuilder(self.session, self.base_url)
        self.token_exchange = TokenExchange(self.session, self.base_url, timeout)
        self.policy = TokenRefreshPolicy(
            self.session,
            self.builder,
            self.token_exchange,
            expiry_detection=ExpiryDetection(expiry_detection),
            timeout=timeout,
        )

        logger.info(f"MeliClient initialized for {self.base_url}")

    @classmethod
    def from_config(
        cls, config: MeliOAuthConfig, session: Optional[requests.Session] = None
    ) -> "MeliClient":
        """
        Build a client from configuration.

        When ``config.token_file`` is set, tokens are seeded from it and every
        later token change is written back to it.
        """
        storage = TokenStorage(config.token_file) if config.token_file else None
        credentials = config.build_credentials(storage)
        if storage is not None:
            credentials.add_listener(storage.on_tokens_changed)

        return cls(
            credentials=credentials,
            session=session,
            base_url=config.api_url,
            timeout=config.timeout,
            expiry_detection=config.expiry_detection,
        )

    @staticmethod
    def get_auth_url(
        client_id: Union[int, str], site: Union[MeliSite, str], redirect_uri: str
    ) -> str:
        """
        Generate the URL a user visits to authorize the application.

        Args:
            client_id: Mercado Libre application id
            site: Site the user belongs to
            redirect_uri: Callback URL (Mercado Libre appends ?code=... to it)

        Returns:
            Authorization URL
        """
        return build_authorization_url(client_id, site, redirect_uri)

    def authorize(self, code: str, redirect_uri: str, timeout: Optional[float] = None) -> bool:
        """
        Exchange the code received on the redirect URI for tokens.

        On success the tokens are applied to the credential, which notifies
        its listeners.

        Args:
            code: Authorization code
            redirect_uri: Redirect URI the code was issued for

        Returns:
            True if tokens were obtained, False otherwise

        Raises:
            ConfigurationError: If no credentials are set
        """
        credentials = self._require_credentials()

        try:
            tokens = self.token_exchange.exchange_authorization_code(
                credentials, code, redirect_uri, timeout=timeout
            )
        except TokenExchangeError as e:
            logger.error(f"Authorization failed: {e}")
            return False

        credentials.set_tokens(tokens)
        logger.info("Authorization complete")
        return True

    def request(
        self,
        method: str,
        path: str,
        params: ParamsLike = None,
        body: Any = None,
        *,
        model: Optional[Type[Any]] = None,
        access_token: Optional[str] = None,
        timeout: Optional[float] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> Any:
        """
        Make an API request through the refresh-and-retry policy.

        Args:
            method: HTTP method
            path: Resource path relative to the API base (e.g. "/users/me")
            params: Query parameters (HttpParams, mapping or sequence of pairs)
            body: Object sent as JSON
            model: If given, decode the response into this type
            access_token: Token to use instead of the credential's (never refreshed)
            timeout: Per-send timeout in seconds
            cancel_event: Set to abandon the call

        Returns:
            The raw response when ``model`` is None, the decoded value otherwise

        Raises:
            TransportError: On network failure
            RequestCancelledError: If cancelled
            MeliAuthenticationError, MeliAPIError, DecodeError: Typed calls only
        """
        pending = PendingRequest(
            method=method.upper(),
            path=path,
            params=normalize_params(params),
            body=body,
            access_token=access_token,
        )

        response = self.policy.execute(
            pending, self.credentials, timeout=timeout or self.timeout, cancel_event=cancel_event
        )

        if model is None:
            return response
        return decode_response(response, model)

    def get(self, path: str, params: ParamsLike = None, **kwargs: Any) -> Any:
        """Send a GET request. See request() for keyword arguments."""
        return self.request("GET", path, params, **kwargs)

    def post(self, path: str, params: ParamsLike = None, body: Any = None, **kwargs: Any) -> Any:
        """Send a POST request with an optional JSON body."""
        return self.request("POST", path, params, body, **kwargs)

    def put(self, path: str, params: ParamsLike = None, body: Any = None, **kwargs: Any) -> Any:
        """Send a PUT request with an optional JSON body."""
        return self.request("PUT", path, params, body, **kwargs)

    def delete(self, path: str, params: ParamsLike = None, **kwargs: Any) -> Any:
        """Send a DELETE request."""
        return self.request("DELETE", path, params, **kwargs)

    def _require_credentials(self) -> MeliCredentials:
        if self.credentials is None:
            raise ConfigurationError(
                "Credentials not initialized. Set client.credentials before authorizing."
            )
        return self.credentials

    def close(self) -> None:
        """Close the HTTP session."""
        self.session.close()
        logger.info("MeliClient closed")

    def __enter__(self) -> "MeliClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
