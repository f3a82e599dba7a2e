"""Shared fixtures for Mercado Libre SDK tests."""

import json
from typing import Any, Callable, Dict, List, Optional, Tuple, Union
from urllib.parse import parse_qsl, urlsplit

import pytest
import requests

from meli.api.client import MeliClient
from meli.oauth.credentials import MeliCredentials
from meli.sites import MeliSite

API_URL = "https://api.mercadolibre.com"


def make_response(
    status_code: int = 200,
    payload: Any = None,
    text: Optional[str] = None,
    reason: str = "",
) -> requests.Response:
    """Build a real requests.Response with the given status and body."""
    response = requests.Response()
    response.status_code = status_code
    response.reason = reason
    if payload is not None:
        response._content = json.dumps(payload).encode()
        response.headers["Content-Type"] = "application/json"
    else:
        response._content = (text or "").encode()
    return response


Reply = Union[requests.Response, Exception, Callable[[requests.PreparedRequest], requests.Response]]


class FakeTransport:
    """
    Stand-in for Session.send that answers by (method, path).

    Each route holds a queue of replies; the last reply repeats forever,
    which models a server that keeps answering 401.
    """

    def __init__(self):
        self.routes: Dict[Tuple[str, str], List[Reply]] = {}
        self.requests: List[requests.PreparedRequest] = []
        self.kwargs: List[Dict[str, Any]] = []

    def add(self, method: str, path: str, *replies: Reply) -> "FakeTransport":
        self.routes.setdefault((method, path), []).extend(replies)
        return self

    def __call__(self, prepared: requests.PreparedRequest, **kwargs: Any) -> requests.Response:
        self.requests.append(prepared)
        self.kwargs.append(kwargs)
        key = (prepared.method, urlsplit(prepared.url).path)
        queue = self.routes.get(key)
        if not queue:
            raise AssertionError(f"Unexpected request {key}")
        reply = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(reply, Exception):
            raise reply
        if callable(reply):
            return reply(prepared)
        return reply

    def sent(self, method: str, path: str) -> List[requests.PreparedRequest]:
        return [
            r for r in self.requests if r.method == method and urlsplit(r.url).path == path
        ]


def query_pairs(prepared: requests.PreparedRequest) -> List[Tuple[str, str]]:
    return parse_qsl(urlsplit(prepared.url).query, keep_blank_values=True)


def form_pairs(prepared: requests.PreparedRequest) -> Dict[str, str]:
    body = prepared.body
    if isinstance(body, bytes):
        body = body.decode()
    return dict(parse_qsl(body or ""))


@pytest.fixture
def credentials() -> MeliCredentials:
    """Credentials holding an access and refresh token."""
    return MeliCredentials(MeliSite.ARGENTINA, 123456, "secret", "AT-old", "TG-old")


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def client(credentials, transport, monkeypatch) -> MeliClient:
    """Client whose session sends through the fake transport."""
    meli_client = MeliClient(credentials)
    monkeypatch.setattr(meli_client.session, "send", transport)
    yield meli_client
    meli_client.close()


@pytest.fixture
def respond():
    """Factory fixture for requests.Response objects."""
    return make_response


@pytest.fixture
def query_of():
    """Extract the ordered query parameters of a sent request."""
    return query_pairs


@pytest.fixture
def form_of():
    """Extract the form-encoded body of a sent request."""
    return form_pairs
