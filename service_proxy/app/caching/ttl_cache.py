"""
In-memory TTL cache for upstream lookups.
"""

import asyncio
import math
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from cachetools import TLRUCache

from shared.logging import get_logger


@dataclass(frozen=True)
class CacheEntry:
    """A remembered lookup: either a found value or a recorded absence."""

    found: bool
    value: Any = None

    @classmethod
    def of(cls, value: Any) -> "CacheEntry":
        return cls(found=True, value=value)

    @classmethod
    def not_found(cls) -> "CacheEntry":
        return cls(found=False)


class TTLCache:
    """
    Key/value store whose entries expire ``ttl`` seconds after being set.

    Expiry is fixed at write time; reads do not extend it. Expired entries
    are rejected on read and reclaimed by a background sweep every
    ``checkperiod`` seconds. A ``ttl`` of 0 keeps entries until overwritten
    or deleted, and a ``checkperiod`` of 0 disables the sweep.

    All mutations are single synchronous steps, so the cache is safe to
    share between coroutines on one event loop without locking.
    """

    def __init__(
        self,
        ttl: int,
        checkperiod: int,
        *,
        clock: Callable[[], float] = time.monotonic,
        on_change: Optional[Callable[[int], None]] = None,
    ):
        if ttl < 0 or checkperiod < 0:
            raise ValueError("ttl and checkperiod must be >= 0")

        self.ttl = ttl
        self.checkperiod = checkperiod
        self.logger = get_logger("mojang_proxy.cache")

        self._on_change = on_change
        self._data = TLRUCache(maxsize=math.inf, ttu=self._expires_at, timer=clock)
        self._hits = 0
        self._misses = 0

        self._sweep_task: Optional[asyncio.Task] = None
        self.running = False

    def __len__(self) -> int:
        self._expire()
        return len(self._data)

    def _expires_at(self, key: str, entry: CacheEntry, now: float) -> float:
        if self.ttl <= 0:
            return math.inf
        # Live while now <= set time + ttl; cachetools drops items once now >= expiry
        return math.nextafter(now + self.ttl, math.inf)

    def get(self, key: str) -> Optional[CacheEntry]:
        """Return the live entry for ``key``, or None when absent or expired."""
        self._expire()
        entry = self._data.get(key)
        if entry is None:
            self._misses += 1
            return None

        self._hits += 1
        return entry

    def has(self, key: str) -> bool:
        """Return True when ``key`` holds a live entry."""
        self._expire()
        return key in self._data

    def set(self, key: str, entry: CacheEntry) -> None:
        """Store ``entry`` under ``key``, replacing any previous entry."""
        if not isinstance(entry, CacheEntry):
            raise TypeError("cache values must be CacheEntry instances")

        self._data[key] = entry
        self.logger.debug("Cached entry", key=key, found=entry.found, ttl=self.ttl)
        self._notify()

    def delete(self, key: str) -> bool:
        """Remove ``key``; returns whether it was present."""
        self._expire()
        if key not in self._data:
            return False
        del self._data[key]
        self._notify()
        return True

    def keys(self) -> List[str]:
        """Keys of all live entries."""
        self._expire()
        return list(self._data)

    def flush(self) -> None:
        """Drop every entry and reset statistics."""
        self._data.clear()
        self._hits = 0
        self._misses = 0
        self._notify()

    def sweep(self) -> int:
        """Evict expired entries; returns how many were removed."""
        evicted = self._expire()
        if evicted:
            self.logger.debug("Swept expired entries", evicted=evicted, remaining=len(self._data))
        return evicted

    def stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        return {
            "entries": len(self),
            "hits": self._hits,
            "misses": self._misses,
            "ttl": self.ttl,
            "checkperiod": self.checkperiod,
        }

    async def start(self):
        """Start the periodic sweep."""
        if self.checkperiod <= 0 or self._sweep_task is not None:
            return
        self.running = True
        self._sweep_task = asyncio.create_task(self._sweep_loop())
        self.logger.info("Cache sweep started", checkperiod=self.checkperiod, ttl=self.ttl)

    async def stop(self):
        """Stop the periodic sweep."""
        self.running = False
        if self._sweep_task:
            self._sweep_task.cancel()
            try:
                await self._sweep_task
            except asyncio.CancelledError:
                pass
            self._sweep_task = None

        self.logger.info("Cache sweep stopped")

    async def _sweep_loop(self):
        while self.running:
            try:
                await asyncio.sleep(self.checkperiod)
                self.sweep()
            except asyncio.CancelledError:
                break
            except Exception as e:
                self.logger.error("Error in cache sweep loop", error=str(e))

    def _expire(self) -> int:
        expired = self._data.expire()
        if expired:
            self._notify()
        return len(expired)

    def _notify(self) -> None:
        if self._on_change is not None:
            self._on_change(len(self._data))
