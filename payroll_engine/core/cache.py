"""
In-memory TTL cache for payroll reference data
Countries, salary components and statutory components change rarely; each
service instance keeps its own short-lived copy keyed by country id.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Generic, Optional, TypeVar

from payroll_engine.core.logging_config import log_cache_operation

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class CacheEntry(Generic[T]):
    value: T
    expires_at: float


class TTLCache(Generic[T]):
    """Read-through cache with expiry checked on read

    There is no background eviction and no locking: concurrent misses on the
    same key each fetch and the last write wins.
    """

    def __init__(self, name: str, ttl_seconds: float, clock: Callable[[], float] = time.time):
        self.name = name
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._entries: Dict[str, CacheEntry[T]] = {}

    def get(self, key: str) -> Optional[T]:
        entry = self._entries.get(key)
        if entry is None or self.clock() >= entry.expires_at:
            log_cache_operation(self.name, key, hit=False, logger=logger)
            return None
        log_cache_operation(self.name, key, hit=True, logger=logger)
        return entry.value

    def set(self, key: str, value: T) -> None:
        self._entries[key] = CacheEntry(value=value, expires_at=self.clock() + self.ttl_seconds)

    async def get_or_fetch(
        self,
        key: str,
        fetch: Callable[[], Awaitable[Optional[T]]],
        cache_none: bool = False
    ) -> Optional[T]:
        """Return the cached value or fetch, store and return a fresh one."""
        cached = self.get(key)
        if cached is not None:
            return cached

        value = await fetch()
        if value is not None or cache_none:
            self.set(key, value)
        return value

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


class ReferenceDataCache:
    """The three reference-data caches used by the payroll service"""

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.time):
        self.countries: TTLCache[Any] = TTLCache("countries", ttl_seconds, clock)
        self.salary_components: TTLCache[Any] = TTLCache("salary_components", ttl_seconds, clock)
        self.statutory_components: TTLCache[Any] = TTLCache("statutory_components", ttl_seconds, clock)

    def clear(self) -> None:
        self.countries.clear()
        self.salary_components.clear()
        self.statutory_components.clear()
        logger.info("All reference data caches cleared")

    def get_stats(self) -> Dict[str, int]:
        return {
            "countries": len(self.countries),
            "salary_components": len(self.salary_components),
            "statutory_components": len(self.statutory_components),
        }
