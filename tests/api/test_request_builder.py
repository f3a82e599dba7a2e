"""Tests for request construction and ordered parameters."""

from dataclasses import dataclass
from urllib.parse import urlsplit

import pytest
import requests

from meli.api.models import Picture
from meli.api.params import HttpParams, normalize_params
from meli.api.request_builder import PendingRequest, RequestBuilder, to_json_payload
from meli.oauth.config import USER_AGENT


@pytest.fixture
def builder():
    return RequestBuilder(requests.Session(), "https://api.mercadolibre.com/")


class TestHttpParams:
    def test_preserves_order_and_duplicates(self):
        params = HttpParams().add("ids", "MLA1").add("attributes", "id").add("ids", "MLA2")

        assert params.items() == (("ids", "MLA1"), ("attributes", "id"), ("ids", "MLA2"))
        assert str(params) == "ids=MLA1&attributes=id&ids=MLA2"

    def test_skips_none_and_renders_booleans(self):
        params = HttpParams().add("a", None).add("b", True).add("c", 3)

        assert params.items() == (("b", "true"), ("c", "3"))

    def test_normalize_mapping_expands_lists(self):
        assert normalize_params({"ids": ["MLA1", "MLA2"], "limit": 5}) == (
            ("ids", "MLA1"),
            ("ids", "MLA2"),
            ("limit", "5"),
        )

    def test_normalize_pairs_and_none(self):
        assert normalize_params([("b", 1), ("a", 2)]) == (("b", "1"), ("a", "2"))
        assert normalize_params(None) == ()


class TestPendingRequest:
    def test_is_immutable(self):
        pending = PendingRequest("GET", "/users/me")

        with pytest.raises(AttributeError):
            pending.path = "/other"

    def test_with_token_rewrites_only_matching_param(self):
        pending = PendingRequest(
            "GET",
            "/orders",
            params=(("a", "1"), ("access_token", "AT-old"), ("access_token", "AT-foreign"), ("z", "AT-old")),
        )

        rewritten = pending.with_token("AT-old", "AT-new")

        assert rewritten.params == (
            ("a", "1"),
            ("access_token", "AT-new"),
            ("access_token", "AT-foreign"),
            ("z", "AT-old"),
        )
        assert pending.params[1] == ("access_token", "AT-old")

    def test_with_token_rewrites_path_query_verbatim(self):
        pending = PendingRequest("GET", "/orders/search?q=a%20b&access_token=AT-old&x=")

        rewritten = pending.with_token("AT-old", "AT/new")

        assert rewritten.path == "/orders/search?q=a%20b&access_token=AT%2Fnew&x="

    def test_with_token_without_embedded_token_is_identity(self):
        pending = PendingRequest("GET", "/users/me", params=(("a", "1"),))

        assert pending.with_token("AT-old", "AT-new") == pending
        assert pending.with_token(None, "AT-new") is pending


class TestRequestBuilder:
    def test_full_url(self, builder):
        assert builder.get_full_url("/sites") == "https://api.mercadolibre.com/sites"
        assert builder.get_full_url("sites") == "https://api.mercadolibre.com/sites"

    def test_build_attaches_bearer_and_sdk_headers(self, builder):
        prepared = builder.build(PendingRequest("get", "/users/me"), "AT-1")

        assert prepared.method == "GET"
        assert prepared.headers["Authorization"] == "Bearer AT-1"
        assert prepared.headers["Accept"] == "application/json"
        assert prepared.headers["User-Agent"] == USER_AGENT
        assert prepared.body is None

    def test_build_without_token_has_no_authorization(self, builder):
        prepared = builder.build(PendingRequest("GET", "/sites"), None)

        assert "Authorization" not in prepared.headers

    def test_build_keeps_parameter_order(self, builder):
        pending = PendingRequest("GET", "/items", params=(("ids", "B"), ("ids", "A"), ("x", "1")))

        prepared = builder.build(pending, None)

        assert urlsplit(prepared.url).query == "ids=B&ids=A&x=1"

    def test_each_build_is_a_fresh_request(self, builder):
        pending = PendingRequest("POST", "/items", body={"title": "Phone"})

        first = builder.build(pending, "AT-1")
        second = builder.build(pending, "AT-2")

        assert first is not second
        assert first.body == second.body == b'{"title": "Phone"}'
        assert first.headers["Authorization"] == "Bearer AT-1"
        assert second.headers["Authorization"] == "Bearer AT-2"

    def test_build_serializes_models(self, builder):
        pending = PendingRequest("POST", "/pictures", body=Picture(url="http://img"))

        prepared = builder.build(pending, None)

        assert prepared.body == b'{"url": "http://img"}'


def test_to_json_payload_handles_dataclasses_and_nesting():
    @dataclass
    class Variation:
        price: float

    assert to_json_payload({"variations": [Variation(price=1.5)], "pic": Picture(url="u")}) == {
        "variations": [{"price": 1.5}],
        "pic": {"url": "u"},
    }
