"""
Request construction for the Mercado Libre API client.

A PendingRequest describes one logical call. Every send attempt turns it
into a brand new PreparedRequest, so nothing (headers, serialized body) is
carried over from an attempt that already went out.
"""

import dataclasses
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional
from urllib.parse import quote, unquote

import requests
from pydantic import BaseModel

from ..oauth.config import USER_AGENT
from .params import ParamPairs

logger = logging.getLogger(__name__)

ACCESS_TOKEN_PARAM = "access_token"


def _replace_in_query(query: str, old_token: str, new_token: str) -> str:
    """Rewrite access_token=<old_token> segments of a raw query string, leaving others untouched."""
    segments = query.split("&")
    for index, segment in enumerate(segments):
        key, sep, value = segment.partition("=")
        if sep and unquote(key) == ACCESS_TOKEN_PARAM and unquote(value) == old_token:
            segments[index] = f"{key}={quote(new_token, safe='')}"
    return "&".join(segments)


@dataclass(frozen=True)
class PendingRequest:
    """
    Immutable description of one logical API call.

    Attributes:
        method: HTTP method ("GET", "POST", ...)
        path: Resource path relative to the API base, may carry a query string
        params: Ordered query parameters (duplicate keys allowed)
        body: Object serialized to JSON on every attempt (None for no body)
        access_token: Explicit token overriding the credential's one
    """

    method: str
    path: str
    params: ParamPairs = ()
    body: Any = None
    access_token: Optional[str] = field(default=None, repr=False)

    def with_token(self, old_token: Optional[str], new_token: str) -> "PendingRequest":
        """
        Return a copy with an embedded ``access_token=<old_token>`` parameter
        rewritten to ``new_token``.

        Only matching access_token parameters change, in ``params`` and in a
        query string embedded in ``path``; order and every other parameter
        are preserved.
        """
        if not old_token or old_token == new_token:
            return self

        params = tuple(
            (key, new_token) if key == ACCESS_TOKEN_PARAM and value == old_token else (key, value)
            for key, value in self.params
        )

        path = self.path
        base, sep, query = path.partition("?")
        if sep:
            path = f"{base}?{_replace_in_query(query, old_token, new_token)}"

        return dataclasses.replace(self, path=path, params=params)


def to_json_payload(body: Any) -> Any:
    """Convert pydantic models and dataclasses into JSON-compatible data."""
    if isinstance(body, BaseModel):
        return body.model_dump(mode="json", by_alias=True, exclude_none=True)
    if dataclasses.is_dataclass(body) and not isinstance(body, type):
        return dataclasses.asdict(body)
    if isinstance(body, (list, tuple)):
        return [to_json_payload(item) for item in body]
    if isinstance(body, dict):
        return {key: to_json_payload(value) for key, value in body.items()}
    return body


class RequestBuilder:
    """Turns PendingRequests into fresh transport requests."""

    def __init__(self, session: requests.Session, base_url: str):
        """
        Initialize request builder.

        Args:
            session: Session whose default headers are merged into each request
            base_url: API base URL
        """
        self.session = session
        self.base_url = base_url.rstrip("/")

    def get_full_url(self, path: str) -> str:
        """
        Construct full API URL from a resource path.

        Args:
            path: Resource path (e.g., "/users/me" or "users/me")

        Returns:
            Full URL with base URL
        """
        if path.startswith(("http://", "https://")):
            return path
        if not path.startswith("/"):
            path = f"/{path}"
        return f"{self.base_url}{path}"

    def build(self, pending: PendingRequest, access_token: Optional[str]) -> requests.PreparedRequest:
        """
        Build a new transport request for one send attempt.

        Args:
            pending: Logical call description
            access_token: Bearer token to attach (None for an anonymous call)

        Returns:
            PreparedRequest ready to be sent on the session
        """
        headers: Dict[str, str] = {"Accept": "application/json", "User-Agent": USER_AGENT}
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"

        json_body = None
        if pending.body is not None:
            json_body = to_json_payload(pending.body)

        request = requests.Request(
            method=pending.method.upper(),
            url=self.get_full_url(pending.path),
            params=list(pending.params),
            json=json_body,
            headers=headers,
        )
        prepared = self.session.prepare_request(request)
        logger.debug(f"Built {prepared.method} {pending.path} ({len(pending.params)} params)")
        return prepared
