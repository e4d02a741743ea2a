# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import httpx
import pytest

from httpbridge.http.headers import HeaderStore, normalize_headers
from httpbridge.http.models import ContentType, HttpMethod, Response
from httpbridge.http.url import resolve_url


def test_header_store_is_case_insensitive_and_keeps_last_casing():
    store = HeaderStore({"User-Agent": "a"})
    store["user-agent"] = "b"
    assert len(store) == 1
    assert store["USER-AGENT"] == "b"
    assert "User-agent" in store
    assert store.to_dict() == {"user-agent": "b"}


def test_header_store_merge_overwrites_and_copy_is_independent():
    defaults = HeaderStore({"User-Agent": "ua", "Accept": "*/*"})
    merged = defaults.copy().merge({"accept": "text/plain", "X-Key": "1"})
    assert merged["Accept"] == "text/plain"
    assert merged["x-key"] == "1"
    assert defaults["Accept"] == "*/*"
    assert "X-Key" not in defaults


def test_header_store_accepts_httpx_headers_and_pairs():
    assert HeaderStore(httpx.Headers({"Answer": "42"}))["answer"] == "42"
    assert HeaderStore([("a", "1"), ("b", "2")]).to_dict() == {"a": "1", "b": "2"}
    assert HeaderStore({"X": "1"}) == {"x": "1"}


def test_header_store_rejects_empty_names():
    with pytest.raises(ValueError):
        HeaderStore()[" "] = "x"


def test_normalize_headers_drops_empty_names():
    assert normalize_headers({"X-Test": None, None: "skip", "": "empty"}) == {"x-test": ""}


def test_resolve_url_substitutes_and_partitions():
    url, remaining = resolve_url("/api/{id}", {"id": "7", "x": "9"})
    assert url == "/api/7"
    assert remaining == {"x": "9"}


def test_resolve_url_replaces_every_occurrence_exact_match_only():
    url, remaining = resolve_url("/{name}/x/{name}/{Name}", {"name": "omega"})
    assert url == "/omega/x/omega/{Name}"
    assert remaining == {}


def test_resolve_url_does_not_escape_values():
    url, _ = resolve_url("/search/{q}", {"q": "a b&c"})
    assert url == "/search/a b&c"


def test_resolve_url_without_params_returns_template():
    assert resolve_url("/api/{id}", None) == ("/api/{id}", {})
    assert resolve_url("/api/{id}", {}) == ("/api/{id}", {})


def test_resolve_url_leaves_unmatched_keys_for_query():
    url, remaining = resolve_url("http://host/test/{name}/", {"name": "omega", "lastname": "alpha"})
    assert url == "http://host/test/omega/"
    assert remaining == {"lastname": "alpha"}


@pytest.mark.parametrize("status_code", range(100, 600))
def test_response_is_error_matches_status_range(status_code):
    assert Response(status_code=status_code).is_error() is (400 <= status_code <= 599)


def test_response_json_and_defaults():
    response = Response(status_code=200, body='{"id": 3}')
    assert response.json() == {"id": 3}
    assert response.remote_address == "0.0.0.0"


def test_http_method_parse_is_case_insensitive():
    assert HttpMethod.parse("get") is HttpMethod.GET
    assert HttpMethod.parse("Get") is HttpMethod.GET
    assert HttpMethod.parse("PATCH") is HttpMethod.PATCH
    assert HttpMethod.parse("OPTIONS") is None
    assert ContentType.TEXT.mime_type == "application/text"
