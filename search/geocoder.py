"""
Geocoder ABC and the Nominatim (OpenStreetMap) implementation.

Used by the creation wizard to turn a free-text start/finish city into a
coordinate. Lookups are cached and rate limited; Nominatim's usage policy
allows at most one request per second and requires an identifying
User-Agent (GEOCODER_USER_AGENT).
"""

from __future__ import annotations

import logging
import os
import time
from abc import ABC, abstractmethod
from typing import Dict, Optional

import httpx

from models.schema import Coordinate
from models.defaults import DEFAULT_COORDINATES

logger = logging.getLogger(__name__)


class Geocoder(ABC):
    """Abstract city-name to coordinate lookup."""

    def __init__(self, rate_limit: float = 1.0, cache_ttl: float = 3600, max_cache_size: int = 512):
        self._last_request: float = 0
        self._rate_limit = rate_limit  # seconds between calls
        self._cache: Dict[str, Optional[Coordinate]] = {}
        self._cache_ttl = cache_ttl
        self._cache_ts: Dict[str, float] = {}
        self._max_cache_size = max_cache_size

    @abstractmethod
    def _do_geocode(self, city: str) -> Optional[Coordinate]:
        """Provider-specific lookup. May raise httpx.HTTPError."""
        ...

    def geocode(self, city: str) -> Optional[Coordinate]:
        """
        Best-match coordinate for ``city``, or None when there is no match.

        Raises:
            httpx.HTTPError: On transport or HTTP status errors
        """
        cache_key = city.strip().lower()
        if not cache_key:
            return None
        if cache_key in self._cache:
            if time.time() - self._cache_ts[cache_key] < self._cache_ttl:
                return self._cache[cache_key]
            self._evict(cache_key)

        # rate limit
        elapsed = time.time() - self._last_request
        if elapsed < self._rate_limit:
            time.sleep(self._rate_limit - elapsed)
        self._last_request = time.time()

        result = self._do_geocode(city.strip())
        self._store(cache_key, result)
        return result

    def _evict(self, key: str) -> None:
        self._cache.pop(key, None)
        self._cache_ts.pop(key, None)

    def _store(self, key: str, result: Optional[Coordinate]) -> None:
        now = time.time()
        for stale in [k for k, ts in self._cache_ts.items() if now - ts >= self._cache_ttl]:
            self._evict(stale)
        # Oldest first: dicts keep insertion order
        while self._cache and len(self._cache) >= self._max_cache_size:
            self._evict(next(iter(self._cache_ts)))
        self._cache[key] = result
        self._cache_ts[key] = now

    @property
    @abstractmethod
    def provider_name(self) -> str:
        ...


class NominatimGeocoder(Geocoder):
    """Geocoding via the public Nominatim search API."""

    API_URL = "https://nominatim.openstreetmap.org/search"

    def __init__(
        self,
        user_agent: Optional[str] = None,
        transport: Optional[httpx.BaseTransport] = None,
        **kwargs,
    ):
        super().__init__(**kwargs)
        self._user_agent = user_agent or os.environ.get("GEOCODER_USER_AGENT", "quester/0.1")
        self._transport = transport

    @property
    def provider_name(self) -> str:
        return "nominatim"

    def _do_geocode(self, city: str) -> Optional[Coordinate]:
        params = {"q": city, "format": "json", "limit": 1}
        headers = {"User-Agent": self._user_agent}

        with httpx.Client(timeout=10, transport=self._transport) as client:
            resp = client.get(self.API_URL, params=params, headers=headers)
            resp.raise_for_status()
            data = resp.json()

        if not data:
            return None
        best = data[0]
        return Coordinate(lat=float(best["lat"]), lng=float(best["lon"]))


def resolve_city(
    geocoder: Geocoder,
    city: str,
    fallback: Optional[Coordinate] = None,
) -> Coordinate:
    """
    Geocode ``city``, degrading to ``fallback`` (or the default coordinate).

    Never raises: lookup failures and empty results are logged and the
    fallback is returned.
    """
    fallback = fallback or DEFAULT_COORDINATES
    try:
        found = geocoder.geocode(city)
    except (httpx.HTTPError, KeyError, IndexError, TypeError, ValueError) as e:
        logger.warning("Geocoding '%s' via %s failed: %s", city, geocoder.provider_name, e)
        return fallback
    if found is None:
        logger.info("No geocoding match for '%s', using fallback", city)
        return fallback
    return found
