"""
Per-source, per-query response cache with a time-to-live.

Entries are keyed by source name plus the normalized query parameters. A
stale entry is evicted by the `get` that finds it, and every `put` sweeps
out whatever else has expired.
"""
import asyncio
import json
import logging
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, AsyncIterator, Callable, Dict, Optional

from scorecard.config.settings import Settings

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    payload: Any
    inserted_at: float


class ResponseCache:
    """
    TTL cache for raw source payloads.

    With `enabled=False` lookups always miss and writes are dropped;
    everything else behaves the same.
    """

    def __init__(
        self,
        ttl_seconds: float,
        enabled: bool = True,
        clock: Callable[[], float] = time.time,
    ):
        self.ttl_seconds = ttl_seconds
        self.enabled = enabled
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._locks: Dict[str, asyncio.Lock] = {}
        self._lock_users: Dict[str, int] = {}
        self.hits = 0
        self.misses = 0
        self.evictions = 0

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs) -> "ResponseCache":
        return cls(ttl_seconds=settings.cache_ttl_seconds, enabled=settings.CACHE_ENABLED, **kwargs)

    @staticmethod
    def make_key(source: str, params: Dict[str, Any]) -> str:
        """Stable key: parameter order does not matter."""
        return f"{source}|{json.dumps(params, sort_keys=True, default=str)}"

    @asynccontextmanager
    async def locked(self, key: str) -> AsyncIterator[None]:
        """
        Hold the lock for one cache key. Holding it across lookup, fetch and
        store makes concurrent identical queries share one network call.

        The lock only exists while someone holds or waits for it.
        """
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        self._lock_users[key] = self._lock_users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[key] -= 1
            if not self._lock_users[key]:
                del self._lock_users[key]
                del self._locks[key]

    def get(self, key: str) -> Optional[Any]:
        if not self.enabled:
            return None

        entry = self._entries.get(key)
        if entry is not None:
            if self._clock() - entry.inserted_at < self.ttl_seconds:
                self.hits += 1
                return entry.payload
            del self._entries[key]
            self.evictions += 1
            logger.debug(f"Evicted stale cache entry {key}")

        self.misses += 1
        return None

    def put(self, key: str, payload: Any) -> None:
        if not self.enabled:
            return
        now = self._clock()
        self._sweep(now)
        self._entries[key] = CacheEntry(payload=payload, inserted_at=now)

    def _sweep(self, now: float) -> None:
        expired = [k for k, entry in self._entries.items() if now - entry.inserted_at >= self.ttl_seconds]
        for k in expired:
            del self._entries[k]
        if expired:
            self.evictions += len(expired)
            logger.debug(f"Swept {len(expired)} stale cache entries")

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def stats(self) -> dict:
        return {
            "enabled": self.enabled,
            "size": len(self._entries),
            "hits": self.hits,
            "misses": self.misses,
            "evictions": self.evictions,
            "active_locks": len(self._locks),
            "ttl_seconds": self.ttl_seconds,
        }
