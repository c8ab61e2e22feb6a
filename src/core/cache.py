"""In-process TTL cache for catalog reads.

Any write to products, taxonomy or stock clears the whole cache.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, TypeVar

from src.core.config import get_settings
from src.core.logging import get_logger

logger = get_logger("cache")

T = TypeVar("T")


@dataclass
class CatalogCache:
    ttl_seconds: float = 300.0

    _entries: dict[str, tuple[float, Any]] = field(init=False, default_factory=dict)
    _lock: asyncio.Lock = field(init=False, default_factory=asyncio.Lock)
    _generation: int = field(init=False, default=0)
    hits: int = field(init=False, default=0)
    misses: int = field(init=False, default=0)

    async def get_or_load(self, key: str, loader: Callable[[], Awaitable[T]]) -> T:
        """Return the cached value for ``key`` or await ``loader`` and store it."""
        async with self._lock:
            entry = self._entries.get(key)
            if entry is not None and entry[0] > time.monotonic():
                self.hits += 1
                return entry[1]
            generation = self._generation
        self.misses += 1
        value = await loader()
        async with self._lock:
            # An invalidation while loading means the value may already be stale
            if generation == self._generation:
                self._entries[key] = (time.monotonic() + self.ttl_seconds, value)
        return value

    def invalidate(self) -> None:
        if self._entries:
            logger.debug("catalog_cache_cleared", entries=len(self._entries))
        self._generation += 1
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


# Module-level singleton (initialised lazily via get_catalog_cache)
_cache: CatalogCache | None = None


def get_catalog_cache() -> CatalogCache:
    global _cache
    if _cache is None:
        _cache = CatalogCache(ttl_seconds=get_settings().catalog_cache_ttl_seconds)
    return _cache
