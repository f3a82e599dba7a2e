"""Tests for authorization URL construction."""

import pytest

from meli.oauth.authorization import build_authorization_url
from meli.sites import MeliSite


class TestBuildAuthorizationUrl:
    def test_mexico_url(self):
        url = build_authorization_url(123456, MeliSite.MEXICO, "http://someurl.com")

        assert url == (
            "https://auth.mercadolibre.com.mx/authorization"
            "?response_type=code&client_id=123456&redirect_uri=http%3A%2F%2Fsomeurl.com"
        )

    @pytest.mark.parametrize(
        "site, host",
        [
            (MeliSite.ARGENTINA, "auth.mercadolibre.com.ar"),
            (MeliSite.BRAZIL, "auth.mercadolivre.com.br"),
            ("MLC", "auth.mercadolibre.cl"),
        ],
    )
    def test_uses_site_auth_domain(self, site, host):
        url = build_authorization_url("1", site, "https://cb")

        assert url.startswith(f"https://{host}/authorization?")

    def test_is_pure_and_ordered(self):
        first = build_authorization_url(42, MeliSite.PERU, "https://example.com/cb?x=1")
        second = build_authorization_url(42, MeliSite.PERU, "https://example.com/cb?x=1")

        assert first == second
        query = first.split("?", 1)[1]
        assert [pair.split("=")[0] for pair in query.split("&")] == [
            "response_type",
            "client_id",
            "redirect_uri",
        ]
