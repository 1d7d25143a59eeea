"""Nominatim geocoder adapter.

Free-text place search against OpenStreetMap's Nominatim with:
- Rate limiting and retries via geopy's RateLimiter
- Caching of results per normalized query via CachePort
- Blocking HTTP moved off the event loop with asyncio.to_thread
- geopy failures converted to GeocodingError
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

from geopy.exc import GeocoderRateLimited, GeopyError
from geopy.extra.rate_limiter import RateLimiter
from geopy.geocoders import Nominatim

from ...config import GeocodingConfig, get_config
from ...domain.errors import GeocodingError
from ...domain.models import GeocodedItem, GeoLocation
from ...ports.cache import CachePort
from ..cache import InMemoryCache, NullCache


@dataclass
class NominatimGeocoderAdapter:
    """Nominatim geocoder adapter with caching and rate limiting.

    This adapter implements GeocoderPort.

    Attributes:
        config: Geocoding configuration
        cache: Cache for search results, keyed by normalized query
    """

    config: GeocodingConfig = field(default_factory=lambda: get_config().geocoding)
    cache: Optional[CachePort[tuple[GeocodedItem, ...]]] = None

    _geolocator: Optional[Nominatim] = field(default=None, repr=False)
    _geocode_fn: Optional[Any] = field(default=None, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)
        if self.cache is None and self.config.cache_ttl_seconds == 0:
            self.cache = NullCache(name="geocode")
        elif self.cache is None:
            self.cache = InMemoryCache(
                name="geocode",
                default_ttl_seconds=self.config.cache_ttl_seconds,
                max_size=256,
            )

    def _get_geocoder(self) -> Any:
        """Get or initialize the geocoder with rate limiting."""
        if self._geocode_fn is not None:
            return self._geocode_fn

        self._logger.debug(
            "Initializing Nominatim geocoder",
            extra={
                "user_agent": self.config.user_agent,
                "timeout": self.config.timeout_seconds,
            },
        )

        self._geolocator = Nominatim(
            user_agent=self.config.user_agent,
            timeout=self.config.timeout_seconds,
        )

        # Errors must reach the caller: the search controller shows them.
        self._geocode_fn = RateLimiter(
            self._geolocator.geocode,
            min_delay_seconds=self.config.rate_limit_delay,
            max_retries=self.config.max_retries,
            error_wait_seconds=self.config.error_wait_seconds,
            swallow_exceptions=False,
        )

        return self._geocode_fn

    async def search(self, text: str) -> Sequence[GeocodedItem]:
        """Search Nominatim for places matching the query.

        Args:
            text: The query text (e.g., "Rome, Italy").

        Returns:
            Matches in Nominatim relevance order.

        Raises:
            GeocodingError: If Nominatim fails or rate-limits the request.
        """
        query = text.strip()
        if not query:
            return ()

        cache_key = f"{query.lower()}:{self.config.language}"
        cached = self.cache.get(cache_key)
        if cached is not None:
            self._logger.debug("Geocode cache hit", extra={"query": query})
            return cached

        items = await asyncio.to_thread(self._search_blocking, query)
        self.cache.set(cache_key, items)
        return items

    def _search_blocking(self, query: str) -> tuple[GeocodedItem, ...]:
        try:
            geocode_fn = self._get_geocoder()
            locations = geocode_fn(
                query,
                exactly_one=False,
                limit=self.config.results_limit,
                language=self.config.language,
            )
        except GeocoderRateLimited as e:
            self._logger.warning(
                "Geocode rate limited",
                extra={"query": query, "retry_after": e.retry_after},
            )
            raise GeocodingError(
                "The search service is busy, try again shortly",
                query=query,
                is_rate_limited=True,
                cause=e,
            )
        except GeopyError as e:
            self._logger.warning(
                "Geocode service error",
                extra={"query": query, "error": str(e)},
            )
            raise GeocodingError(
                "The search service is unavailable",
                query=query,
                cause=e,
            )

        if not locations:
            self._logger.debug("Geocode returned no result", extra={"query": query})
            return ()

        items = tuple(self._to_item(location) for location in locations)
        self._logger.debug(
            "Geocode success",
            extra={"query": query, "results": len(items)},
        )
        return items

    @staticmethod
    def _to_item(location: Any) -> GeocodedItem:
        raw = getattr(location, "raw", None) or {}
        name = raw.get("name") or getattr(location, "address", None) or None
        return GeocodedItem(
            location=GeoLocation(
                latitude=float(location.latitude),
                longitude=float(location.longitude),
            ),
            name=name,
        )
