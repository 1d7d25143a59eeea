"""Cache that stores nothing.

Used when WIT_GEO_CACHE_TTL_SECONDS=0, so every geocoding search reaches
the provider, and in tests that count provider calls.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass
class NullCache(Generic[T]):
    """CachePort implementation with permanent misses."""

    name: str = "null"

    def get(self, key: str) -> Optional[T]:
        return None

    def set(self, key: str, value: T, ttl: Optional[float] = None) -> None:
        pass
