"""Tests for the token endpoint exchanges."""

import pytest
import requests

from meli.oauth.exceptions import TokenExchangeError, TokenRefreshError
from meli.oauth.token_exchange import TokenExchange


@pytest.fixture
def exchange(transport, monkeypatch):
    session = requests.Session()
    monkeypatch.setattr(session, "send", transport)
    return TokenExchange(session, "https://api.mercadolibre.com", timeout=15)


class TestAuthorizationCodeExchange:
    def test_success(self, exchange, transport, respond, credentials, query_of):
        transport.add(
            "POST",
            "/oauth/token",
            respond(200, {"access_token": "AT", "refresh_token": "TG", "expires_in": 21600, "user_id": 5}),
        )

        tokens = exchange.exchange_authorization_code(credentials, "CODE", "https://cb")

        assert tokens.access_token == "AT"
        assert tokens.refresh_token == "TG"
        assert tokens.user_id == 5
        sent = transport.requests[0]
        assert sent.url.startswith("https://api.mercadolibre.com/oauth/token?")
        assert query_of(sent) == [
            ("grant_type", "authorization_code"),
            ("client_id", "123456"),
            ("client_secret", "secret"),
            ("code", "CODE"),
            ("redirect_uri", "https://cb"),
        ]
        assert transport.kwargs[0]["timeout"] == 15

    def test_does_not_modify_credentials(self, exchange, transport, respond, credentials):
        transport.add("POST", "/oauth/token", respond(200, {"access_token": "AT-x"}))

        exchange.exchange_authorization_code(credentials, "CODE", "https://cb")

        assert credentials.access_token == "AT-old"

    def test_unauthorized(self, exchange, transport, respond, credentials):
        transport.add("POST", "/oauth/token", respond(401))

        with pytest.raises(TokenExchangeError, match="status 401"):
            exchange.exchange_authorization_code(credentials, "bad", "https://cb")

    def test_network_error(self, exchange, transport, credentials):
        transport.add("POST", "/oauth/token", requests.ConnectionError("refused"))

        with pytest.raises(TokenExchangeError, match="Network error"):
            exchange.exchange_authorization_code(credentials, "CODE", "https://cb")

    def test_malformed_response(self, exchange, transport, respond, credentials):
        transport.add("POST", "/oauth/token", respond(200, {"token": "nope"}))

        with pytest.raises(TokenExchangeError, match="Invalid response"):
            exchange.exchange_authorization_code(credentials, "CODE", "https://cb")


class TestRefreshTokenExchange:
    def test_success(self, exchange, transport, respond, credentials, form_of):
        """Refresh grant example: client 123456 redeems TG-old."""
        transport.add("POST", "/oauth/token", respond(200, {"access_token": "AT-new", "refresh_token": "TG-new"}))

        tokens = exchange.exchange_refresh_token(credentials, "TG-old")

        assert (tokens.access_token, tokens.refresh_token) == ("AT-new", "TG-new")
        sent = transport.requests[0]
        assert form_of(sent) == {
            "grant_type": "refresh_token",
            "client_id": "123456",
            "client_secret": "secret",
            "refresh_token": "TG-old",
        }
        assert sent.headers["Content-Type"] == "application/x-www-form-urlencoded"
        assert "Authorization" not in sent.headers

    def test_missing_refresh_token(self, exchange, transport, credentials):
        with pytest.raises(TokenRefreshError, match="No refresh token"):
            exchange.exchange_refresh_token(credentials, None)

        assert transport.requests == []

    @pytest.mark.parametrize("status", [400, 401, 500])
    def test_rejected(self, exchange, transport, respond, credentials, status):
        transport.add("POST", "/oauth/token", respond(status, {"message": "invalid_grant"}))

        with pytest.raises(TokenRefreshError, match=f"status {status}"):
            exchange.exchange_refresh_token(credentials, "TG-old")

        assert len(transport.requests) == 1

    def test_network_error(self, exchange, transport, credentials):
        transport.add("POST", "/oauth/token", requests.Timeout("slow"))

        with pytest.raises(TokenRefreshError, match="Network error"):
            exchange.exchange_refresh_token(credentials, "TG-old")

    def test_non_json_response(self, exchange, transport, respond, credentials):
        transport.add("POST", "/oauth/token", respond(200, text="<html>"))

        with pytest.raises(TokenRefreshError, match="Invalid response"):
            exchange.exchange_refresh_token(credentials, "TG-old")
