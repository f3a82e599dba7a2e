"""
Credential state for the Mercado Libre SDK.

MeliCredentials holds the application identity (client id and secret) and
the current access/refresh token pair. The pair is kept as a single
immutable value which is swapped atomically, so concurrent readers never
observe an access token from one exchange next to a refresh token from
another.

Applications that need to persist refreshed tokens register a listener:

    credentials = MeliCredentials(MeliSite.ARGENTINA, 123456, "secret")
    credentials.add_listener(lambda event: vault.save(event.refresh_token))
"""

import logging
import threading
from dataclasses import dataclass, replace
from typing import Callable, List, Optional, Union

from ..sites import MeliSite
from .exceptions import ConfigurationError
from .token_response import TokenResponse

logger = logging.getLogger(__name__)


def mask_token(token: Optional[str]) -> str:
    """Render a token for log output without leaking it."""
    if not token:
        return "<none>"
    if len(token) <= 8:
        return "***"
    return f"{token[:4]}...{token[-4:]}"


@dataclass(frozen=True)
class TokenPair:
    """Access and refresh token, replaced together."""

    access_token: Optional[str] = None
    refresh_token: Optional[str] = None


@dataclass(frozen=True)
class TokensChangedEvent:
    """
    Notification emitted after new tokens were applied to a credential.

    Attributes:
        previous_access_token: Access token held before the change
        access_token: New access token
        refresh_token: Refresh token held after the change
        info: The token response that was applied
    """

    previous_access_token: Optional[str]
    access_token: str
    refresh_token: Optional[str]
    info: TokenResponse


TokensChangedListener = Callable[[TokensChangedEvent], None]


class MeliCredentials:
    """
    Application identity plus the mutable token pair.

    A single instance is shared by reference between the caller and every
    client using it; refreshes performed by one holder are visible to all.
    """

    def __init__(
        self,
        site: Union[MeliSite, str],
        client_id: Union[int, str],
        client_secret: str,
        access_token: Optional[str] = None,
        refresh_token: Optional[str] = None,
    ):
        """
        Initialize credentials.

        Args:
            site: Site the application operates on (used for authorization URLs)
            client_id: Mercado Libre application id
            client_secret: Mercado Libre application secret
            access_token: Current access token, if already authorized
            refresh_token: Current refresh token, if the app has offline access

        Raises:
            ConfigurationError: If a refresh token is given without an access token
        """
        if refresh_token and not access_token:
            raise ConfigurationError(
                "A refresh token requires an access token; "
                "authorize first or provide both tokens"
            )

        self.site = MeliSite.from_value(site)
        self.client_id = client_id
        self.client_secret = client_secret
        self._tokens = TokenPair(access_token or None, refresh_token or None)
        self._write_lock = threading.Lock()
        self._listeners: List[TokensChangedListener] = []
        self.refresh_lock = threading.Lock()

    def __repr__(self) -> str:
        return (
            f"MeliCredentials(site={self.site.site_id}, client_id={self.client_id}, "
            f"access_token={mask_token(self.access_token)})"
        )

    @property
    def tokens(self) -> TokenPair:
        """Snapshot of the current token pair."""
        return self._tokens

    @property
    def access_token(self) -> Optional[str]:
        return self._tokens.access_token

    @property
    def refresh_token(self) -> Optional[str]:
        return self._tokens.refresh_token

    @property
    def is_authorized(self) -> bool:
        return self._tokens.access_token is not None

    def get_authorization_header_value(self) -> Optional[str]:
        """
        Value for the Authorization header.

        Returns:
            "Bearer <access_token>", or None when no access token is set
        """
        token = self._tokens.access_token
        if not token:
            return None
        return f"Bearer {token}"

    def add_listener(self, listener: TokensChangedListener) -> None:
        """Register a callable invoked with a TokensChangedEvent after each token change."""
        with self._write_lock:
            self._listeners.append(listener)

    def remove_listener(self, listener: TokensChangedListener) -> None:
        with self._write_lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def set_tokens(self, token_response: TokenResponse) -> TokensChangedEvent:
        """
        Atomically replace the token pair and notify listeners.

        If the response carries no refresh token, the current one is kept.

        Args:
            token_response: Result of a successful token exchange

        Returns:
            The event that was delivered to listeners
        """
        event = self.swap_tokens(token_response)
        self.notify_listeners(event)
        return event

    def swap_tokens(self, token_response: TokenResponse) -> TokensChangedEvent:
        """
        Atomically replace the token pair without notifying listeners.

        The caller is responsible for passing the returned event to
        notify_listeners() once it holds no locks a listener might need.
        """
        with self._write_lock:
            previous = self._tokens
            refresh_token = token_response.refresh_token or previous.refresh_token
            self._tokens = TokenPair(token_response.access_token, refresh_token)

        info = replace(
            token_response,
            refresh_token=refresh_token,
            previous_access_token=previous.access_token,
        )

        logger.info(
            f"Tokens changed for client {self.client_id}: "
            f"{mask_token(previous.access_token)} -> {mask_token(token_response.access_token)}"
        )

        return TokensChangedEvent(
            previous_access_token=previous.access_token,
            access_token=token_response.access_token,
            refresh_token=refresh_token,
            info=info,
        )

    def notify_listeners(self, event: TokensChangedEvent) -> None:
        """Deliver a token change to every listener; a failing listener is logged and skipped."""
        with self._write_lock:
            listeners = list(self._listeners)

        for listener in listeners:
            try:
                listener(event)
            except Exception:
                logger.exception(f"Tokens changed listener {listener!r} failed")

    def clear_tokens(self) -> None:
        """Drop both tokens (local sign-out). Listeners are not notified."""
        with self._write_lock:
            self._tokens = TokenPair()
