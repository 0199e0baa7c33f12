"""Tests for the Nominatim address lookup proxy."""

from unittest.mock import patch

import httpx
import pytest

NOMINATIM_RESULT = [
    {
        "display_name": "12 Church Street, Parramatta, NSW 2150, Australia",
        "address": {"road": "Church Street", "suburb": "Parramatta", "postcode": "2150"},
    }
]


@pytest.fixture
def nominatim():
    """Route Nominatim calls to a handler the test controls."""
    state = {"requests": [], "response": httpx.Response(200, json=NOMINATIM_RESULT)}

    def handler(request: httpx.Request) -> httpx.Response:
        state["requests"].append(request)
        response = state["response"]
        if isinstance(response, Exception):
            raise response
        return response

    with patch("academy.routes.address_search.transport", httpx.MockTransport(handler)):
        yield state


def test_passes_results_through(client, nominatim):
    response = client.get("/api/address-search", params={"q": "  12 Church St  "})

    assert response.status_code == 200
    assert response.json() == NOMINATIM_RESULT

    request = nominatim["requests"][0]
    assert request.url.path == "/search"
    assert request.url.params["q"] == "12 Church St"
    assert request.url.params["format"] == "json"
    assert request.url.params["addressdetails"] == "1"
    assert request.url.params["countrycodes"] == "au"
    assert request.url.params["limit"] == "10"
    assert request.headers["Accept-Language"] == "en-AU"
    assert request.headers["User-Agent"].startswith("vigyanit-academy/1.0")


def test_short_query_rejected_without_lookup(client, nominatim):
    response = client.get("/api/address-search", params={"q": " ab "})

    assert response.status_code == 400
    assert response.json()["error"] == "Query too short"
    assert nominatim["requests"] == []


def test_upstream_status_is_forwarded(client, nominatim):
    nominatim["response"] = httpx.Response(503, text="busy")

    response = client.get("/api/address-search", params={"q": "Church St"})

    assert response.status_code == 503
    assert response.json()["error"] == "Lookup failed"


def test_transport_error_is_lookup_error(client, nominatim):
    nominatim["response"] = httpx.ConnectError("connection refused")

    response = client.get("/api/address-search", params={"q": "Church St"})

    assert response.status_code == 500
    assert response.json()["error"] == "Lookup error"
