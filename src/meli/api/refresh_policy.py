"""
Refresh-and-retry policy for authenticated API calls.

Every call made by MeliClient passes through TokenRefreshPolicy.execute:

1. The request is built and sent with the current access token.
2. If the response is classified as an expired access token (401, a
   refresh token is available, no refresh attempted yet for this call,
   and optionally an "invalid_token" error body), the refresh token is
   exchanged once and the new tokens are applied to the credential.
3. The request is rebuilt with the new token and sent exactly one more
   time. That second response is returned whatever its status.

A failed refresh returns the original 401 response untouched.
"""

import logging
import re
import threading
from typing import Optional

import requests

from ..oauth.config import ExpiryDetection
from ..oauth.credentials import MeliCredentials, mask_token
from ..oauth.exceptions import TokenRefreshError
from ..oauth.token_exchange import TokenExchange
from .exceptions import RequestCancelledError, TransportError
from .models import ErrorResponse
from .request_builder import PendingRequest, RequestBuilder

logger = logging.getLogger(__name__)

UNAUTHORIZED = 401

INVALID_TOKEN_PATTERN = re.compile(r"invalid[ _](access[ _])?token", re.IGNORECASE)


def has_invalid_token_message(response: requests.Response) -> bool:
    """
    Check whether an error response says the access token is invalid.

    Returns False for any body that is not a JSON error payload.
    """
    try:
        error = ErrorResponse.model_validate(response.json())
    except (TypeError, ValueError):
        return False
    return bool(INVALID_TOKEN_PATTERN.search(error.message))


class TokenRefreshPolicy:
    """
    Sends requests and transparently recovers from expired access tokens.

    The refresh attempt counter lives in each execute() call, so concurrent
    calls sharing one credential never consume each other's retry.
    """

    MAX_REFRESH_ATTEMPTS = 1

    def __init__(
        self,
        session: requests.Session,
        builder: RequestBuilder,
        token_exchange: TokenExchange,
        expiry_detection: ExpiryDetection = ExpiryDetection.STATUS,
        timeout: float = 30,
    ):
        """
        Initialize the policy.

        Args:
            session: Session used to send API requests
            builder: Builds a fresh transport request per attempt
            token_exchange: Used for the refresh-token grant
            expiry_detection: How a 401 is recognised as an expired token
            timeout: Default per-send timeout in seconds
        """
        self.session = session
        self.builder = builder
        self.token_exchange = token_exchange
        self.expiry_detection = ExpiryDetection(expiry_detection)
        self.timeout = timeout

    def execute(
        self,
        pending: PendingRequest,
        credentials: Optional[MeliCredentials],
        timeout: Optional[float] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> requests.Response:
        """
        Run one logical call, refreshing the access token at most once.

        Args:
            pending: Logical call description
            credentials: Credential to authenticate with (None for anonymous calls)
            timeout: Per-send timeout in seconds (defaults to the policy's)
            cancel_event: Set by the caller to abandon the call

        Returns:
            The last response received (never more than two sends)

        Raises:
            TransportError: If a send fails at the network level
            RequestCancelledError: If cancel_event is set before the first
                                   send or while the token was refreshed
        """
        attempts = 0
        timeout = timeout or self.timeout

        self._check_cancelled(cancel_event, pending)

        sent_token = pending.access_token
        if sent_token is None and credentials is not None:
            sent_token = credentials.access_token

        response = self._send(pending, sent_token, timeout)

        if not self.is_expiry_failure(response, pending, credentials, attempts):
            return response

        attempts += 1
        logger.warning(
            f"Access token {mask_token(sent_token)} rejected on {pending.method} {pending.path}, "
            f"refreshing (attempt {attempts}/{self.MAX_REFRESH_ATTEMPTS})"
        )

        try:
            new_token = self._refresh(credentials, sent_token, timeout)
        except TokenRefreshError as e:
            logger.warning(f"Token refresh failed, returning original response: {e}")
            return response

        self._check_cancelled(cancel_event, pending)

        retry = pending.with_token(sent_token, new_token)
        logger.info(f"Retrying {pending.method} {pending.path} with refreshed access token")
        return self._send(retry, new_token, timeout)

    def is_expiry_failure(
        self,
        response: requests.Response,
        pending: PendingRequest,
        credentials: Optional[MeliCredentials],
        attempts: int,
    ) -> bool:
        """
        Classify a response as an expired-access-token failure.

        Calls made with an explicit access token are never refreshed, since
        the credential's refresh token belongs to a different identity.
        """
        if response.status_code != UNAUTHORIZED:
            return False
        if attempts >= self.MAX_REFRESH_ATTEMPTS:
            return False
        if credentials is None or not credentials.refresh_token:
            return False
        if pending.access_token is not None:
            return False
        if self.expiry_detection is ExpiryDetection.INVALID_TOKEN_MESSAGE:
            return has_invalid_token_message(response)
        return True

    def _refresh(
        self, credentials: MeliCredentials, sent_token: Optional[str], timeout: float
    ) -> str:
        """
        Obtain a usable access token after sent_token was rejected.

        Refreshes on one credential are serialized; if another call already
        replaced the rejected token, its result is reused without a new
        exchange. Listeners run after refresh_lock is released so they may
        call the API on the same credential.
        """
        with credentials.refresh_lock:
            current = credentials.tokens
            if current.access_token and current.access_token != sent_token:
                logger.info("Access token already refreshed by a concurrent call")
                return current.access_token

            tokens = self.token_exchange.exchange_refresh_token(
                credentials, current.refresh_token, timeout=timeout
            )
            event = credentials.swap_tokens(tokens)

        credentials.notify_listeners(event)
        return event.access_token

    def _send(
        self, pending: PendingRequest, access_token: Optional[str], timeout: float
    ) -> requests.Response:
        prepared = self.builder.build(pending, access_token)
        settings = self.session.merge_environment_settings(prepared.url, {}, None, None, None)

        try:
            response = self.session.send(prepared, timeout=timeout, **settings)
        except requests.RequestException as e:
            logger.error(f"Network error on {pending.method} {pending.path}: {e}")
            raise TransportError(f"Network error on {pending.method} {pending.path}: {e}") from e

        logger.debug(f"{pending.method} {pending.path} -> {response.status_code}")
        return response

    @staticmethod
    def _check_cancelled(cancel_event: Optional[threading.Event], pending: PendingRequest) -> None:
        if cancel_event is not None and cancel_event.is_set():
            logger.info(f"{pending.method} {pending.path} cancelled")
            raise RequestCancelledError(f"{pending.method} {pending.path} was cancelled")
