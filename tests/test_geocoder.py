"""
Tests for the Nominatim geocoder and the wizard's city resolution.
"""

import httpx
import pytest

from models.schema import Coordinate
from models.defaults import DEFAULT_COORDINATES
from search import NominatimGeocoder, resolve_city


def _make_geocoder(handler, **kwargs):
    calls = []

    def record(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return handler(request)

    geocoder = NominatimGeocoder(
        user_agent="quester-tests",
        transport=httpx.MockTransport(record),
        rate_limit=0,
        **kwargs,
    )
    return geocoder, calls


def _found(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, json=[{"lat": "57.7089", "lon": "11.9746", "display_name": "Göteborg"}])


class TestNominatimGeocoder:

    def test_geocode(self):
        geocoder, calls = _make_geocoder(_found)
        coord = geocoder.geocode("Göteborg")
        assert coord == Coordinate(lat=57.7089, lng=11.9746)
        request = calls[0]
        assert request.url.params["q"] == "Göteborg"
        assert request.url.params["format"] == "json"
        assert request.headers["User-Agent"] == "quester-tests"

    def test_cached_per_normalized_city(self):
        geocoder, calls = _make_geocoder(_found)
        geocoder.geocode("Göteborg")
        geocoder.geocode("  göteborg ")
        assert len(calls) == 1

    def test_expired_entries_are_dropped(self):
        geocoder, calls = _make_geocoder(_found, cache_ttl=0)
        geocoder.geocode("Göteborg")
        geocoder.geocode("Malmö")
        geocoder.geocode("Göteborg")
        assert len(calls) == 3
        assert list(geocoder._cache) == ["göteborg"]

    def test_cache_size_is_capped(self):
        geocoder, calls = _make_geocoder(_found, max_cache_size=2)
        for city in ("Göteborg", "Malmö", "Lund"):
            geocoder.geocode(city)
        assert list(geocoder._cache) == ["malmö", "lund"]
        geocoder.geocode("Lund")
        assert len(calls) == 3
        geocoder.geocode("Göteborg")
        assert len(calls) == 4

    def test_no_match(self):
        geocoder, _ = _make_geocoder(lambda request: httpx.Response(200, json=[]))
        assert geocoder.geocode("Atlantis") is None

    def test_blank_city_skips_request(self):
        geocoder, calls = _make_geocoder(_found)
        assert geocoder.geocode("   ") is None
        assert calls == []

    def test_http_error_raises(self):
        geocoder, _ = _make_geocoder(lambda request: httpx.Response(500))
        with pytest.raises(httpx.HTTPStatusError):
            geocoder.geocode("Göteborg")


class TestResolveCity:

    def test_match(self):
        geocoder, _ = _make_geocoder(_found)
        assert resolve_city(geocoder, "Göteborg").lat == 57.7089

    def test_no_match_uses_fallback(self):
        geocoder, _ = _make_geocoder(lambda request: httpx.Response(200, json=[]))
        fallback = Coordinate(lat=1.0, lng=2.0)
        assert resolve_city(geocoder, "Atlantis", fallback) == fallback

    def test_server_error_uses_default(self):
        geocoder, _ = _make_geocoder(lambda request: httpx.Response(500))
        assert resolve_city(geocoder, "Göteborg") == DEFAULT_COORDINATES

    def test_malformed_payload_uses_default(self):
        geocoder, _ = _make_geocoder(lambda request: httpx.Response(200, json=[{"name": "x"}]))
        assert resolve_city(geocoder, "Göteborg") == DEFAULT_COORDINATES
