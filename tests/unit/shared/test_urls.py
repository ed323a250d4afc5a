"""Tests for API base normalization and websocket URL mapping"""

import pytest

from galynx.shared.urls import normalize_api_base, websocket_url


@pytest.mark.unit
@pytest.mark.parametrize(
    "raw, expected",
    [
        ("http://localhost:3000", "http://localhost:3000/api/v1"),
        ("http://localhost:3000/", "http://localhost:3000/api/v1"),
        ("https://galynx.example/api", "https://galynx.example/api/v1"),
        ("https://galynx.example/api/", "https://galynx.example/api/v1"),
        ("https://galynx.example/api/v1", "https://galynx.example/api/v1"),
        ("  https://galynx.example/api/v1//  ", "https://galynx.example/api/v1"),
    ],
)
def test_normalize_api_base(raw, expected):
    assert normalize_api_base(raw) == expected


@pytest.mark.unit
@pytest.mark.parametrize(
    "raw", ["localhost:3000", "ftp://galynx.example", "", "   ", "/api/v1"]
)
def test_normalize_rejects_values_without_http_scheme(raw):
    assert normalize_api_base(raw) is None


@pytest.mark.unit
def test_normalize_is_idempotent():
    once = normalize_api_base("http://10.0.0.5:8080/api")
    assert normalize_api_base(once) == once


@pytest.mark.unit
def test_websocket_url_maps_scheme_and_appends_ws_path():
    assert websocket_url("http://localhost:3000/api/v1") == "ws://localhost:3000/api/v1/ws"
    assert websocket_url("https://galynx.example/api/v1/") == "wss://galynx.example/api/v1/ws"
