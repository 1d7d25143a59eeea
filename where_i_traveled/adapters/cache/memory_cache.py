"""In-memory geocoding result cache with expiry and LRU eviction.

The geocoder reads and writes it from worker threads (its blocking calls
run via asyncio.to_thread), hence the lock.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Generic, Optional, TypeVar

T = TypeVar("T")

_NEVER = float("inf")


@dataclass
class InMemoryCache(Generic[T]):
    """CachePort implementation backed by an ordered dict.

    Attributes:
        default_ttl_seconds: Entry lifetime; None keeps entries until evicted
        max_size: Entry limit; None means unbounded
        name: Label used in log records

    Example:
        cache = InMemoryCache[tuple](name="geocode", default_ttl_seconds=3600)
        cache.set("rome, italy:en", items)
    """

    default_ttl_seconds: Optional[float] = None
    max_size: Optional[int] = None
    name: str = "cache"

    _entries: "OrderedDict[str, tuple[T, float]]" = field(
        default_factory=OrderedDict, repr=False
    )
    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def get(self, key: str) -> Optional[T]:
        now = time.monotonic()
        with self._lock:
            if key not in self._entries:
                return None
            value, deadline = self._entries[key]
            if now >= deadline:
                del self._entries[key]
                return None
            # Most recently read entries are evicted last.
            self._entries.move_to_end(key)
            return value

    def set(self, key: str, value: T, ttl: Optional[float] = None) -> None:
        lifetime = self.default_ttl_seconds if ttl is None else ttl
        deadline = _NEVER if lifetime is None else time.monotonic() + lifetime
        with self._lock:
            self._entries[key] = (value, deadline)
            self._entries.move_to_end(key)
            self._evict_overflow()

    def _evict_overflow(self) -> None:
        if self.max_size is None:
            return
        while len(self._entries) > self.max_size:
            oldest, _ = self._entries.popitem(last=False)
            self._logger.debug(
                "Cache %s evicted %s",
                self.name,
                oldest,
                extra={"cache": self.name},
            )
