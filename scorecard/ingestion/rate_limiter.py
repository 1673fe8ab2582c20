"""
Per-source request admission control.

Each source gets a sliding window: at most `limit` requests are admitted in
any rolling window (one hour by default). Callers that find the window full
sleep until the oldest admitted request ages out, up to a bounded wait, and
then fail with RateLimited.

Example usage:
    limiter = RateLimiter({"congress.gov": 1000}, wait_timeout=30)
    await limiter.acquire("congress.gov")
"""
import asyncio
import logging
import time
from collections import deque
from typing import Awaitable, Callable, Deque, Dict, Optional

from scorecard.config.settings import Settings
from scorecard.errors import RateLimited

logger = logging.getLogger(__name__)


class RateLimiter:
    """
    Sliding-window rate limiter shared by all evaluations in the process.

    Bookkeeping for each source is guarded by its own asyncio.Lock, so
    sources never contend with each other. Admission is recorded before the
    request is sent; a request abandoned mid-flight still counts.
    """

    def __init__(
        self,
        limits: Dict[str, int],
        window_seconds: float = 3600.0,
        wait_timeout: float = 30.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.limits = dict(limits)
        self.window_seconds = window_seconds
        self.wait_timeout = wait_timeout
        self._clock = clock
        self._sleep = sleep
        self._windows: Dict[str, Deque[float]] = {}
        self._locks: Dict[str, asyncio.Lock] = {}
        self._stats: Dict[str, Dict[str, int]] = {}

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs) -> "RateLimiter":
        return cls(
            limits=settings.rate_limits_by_source,
            window_seconds=settings.RATE_LIMIT_WINDOW_SECONDS,
            wait_timeout=settings.RATE_LIMIT_WAIT_TIMEOUT_SECONDS,
            **kwargs,
        )

    def _state(self, source: str):
        if source not in self._locks:
            self._locks[source] = asyncio.Lock()
            self._windows[source] = deque()
            self._stats[source] = {"admitted": 0, "rejected": 0, "waits": 0}
        return self._locks[source], self._windows[source], self._stats[source]

    def _prune(self, window: Deque[float], now: float) -> None:
        cutoff = now - self.window_seconds
        while window and window[0] <= cutoff:
            window.popleft()

    async def acquire(self, source: str) -> None:
        """
        Wait for a free slot for `source` and claim it.

        Raises:
            RateLimited: If no slot frees up within the wait timeout
        """
        lock, window, stats = self._state(source)
        limit: Optional[int] = self.limits.get(source)
        started = self._clock()
        deadline = started + self.wait_timeout

        while True:
            async with lock:
                now = self._clock()
                self._prune(window, now)
                if limit is None or len(window) < limit:
                    window.append(now)
                    stats["admitted"] += 1
                    return
                wait = window[0] + self.window_seconds - now

            remaining = deadline - self._clock()
            if wait > remaining:
                # Admitted requests are never dropped, so no slot can free up
                # before the oldest one ages out.
                stats["rejected"] += 1
                waited = self._clock() - started
                logger.warning(
                    f"Rate limit reached for {source} ({limit}/window), "
                    f"next slot in {wait:.1f}s exceeds remaining wait budget"
                )
                raise RateLimited(source, waited)

            stats["waits"] += 1
            logger.warning(f"Rate limit reached for {source} ({limit}/window). Sleeping {wait:.1f}s")
            await self._sleep(wait)

    def in_window(self, source: str) -> int:
        """Requests admitted for `source` inside the current window."""
        if source not in self._windows:
            return 0
        window = self._windows[source]
        self._prune(window, self._clock())
        return len(window)

    def stats(self) -> Dict[str, dict]:
        sources = sorted(set(self.limits) | set(self._stats))
        result = {}
        for source in sources:
            counters = self._stats.get(source, {"admitted": 0, "rejected": 0, "waits": 0})
            result[source] = {
                "limit": self.limits.get(source),
                "in_window": self.in_window(source),
                **counters,
            }
        return result
