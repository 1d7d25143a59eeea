"""Cache port - Injectable caching abstraction.

The geocoder caches results per normalized query so that retyping a
query already searched in this session does not hit the network again.
"""

from __future__ import annotations

from typing import Optional, Protocol, TypeVar

T = TypeVar("T")


class CachePort(Protocol[T]):
    """Port for caching.

    Implementations:
    - adapters/cache/memory_cache.py (InMemoryCache) - Production
    - adapters/cache/null_cache.py (NullCache) - caching disabled
      (WIT_GEO_CACHE_TTL_SECONDS=0) and tests
    """

    def get(self, key: str) -> Optional[T]:
        """Return the cached value, or None if missing or expired."""
        ...

    def set(self, key: str, value: T) -> None:
        """Store a value under a key."""
        ...
