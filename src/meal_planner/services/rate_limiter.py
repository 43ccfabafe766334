"""Sliding-window admission control for outbound model calls."""

import asyncio
import logging
import time
from collections import deque
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

_logger = logging.getLogger(__name__)


@dataclass
class SlidingWindowRateLimiter:
    """Delays callers so at most ``limit_per_minute`` calls start per window.

    Requests are never rejected. When the trailing window is full the caller
    sleeps until the oldest recorded call ages out, then records its own
    timestamp. The read-modify-write of the window is serialized with a lock
    so concurrent callers cannot under-count.
    """

    limit_per_minute: int = 10
    window_seconds: float = 60.0
    clock: Callable[[], float] = time.monotonic
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    _timestamps: deque[float] = field(default_factory=deque, init=False, repr=False)
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False, repr=False)

    async def acquire(self) -> float:
        """Wait for an admission slot and return the seconds spent waiting."""
        async with self._lock:
            now = self.clock()
            self._prune(now)
            waited = 0.0
            if len(self._timestamps) >= self.limit_per_minute:
                waited = self.window_seconds - (now - self._timestamps[0])
                if waited > 0:
                    _logger.info(
                        "Rate limit reached, waiting %.2fs before next request",
                        waited,
                    )
                    await self.sleep(waited)
                    self._prune(self.clock())
                else:
                    waited = 0.0
            self._timestamps.append(self.clock())
            return waited

    @property
    def in_window(self) -> int:
        """Number of calls recorded in the trailing window."""
        self._prune(self.clock())
        return len(self._timestamps)

    def _prune(self, now: float) -> None:
        cutoff = now - self.window_seconds
        while self._timestamps and self._timestamps[0] <= cutoff:
            self._timestamps.popleft()
