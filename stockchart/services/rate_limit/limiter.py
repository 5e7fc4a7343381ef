"""
Sliding-Window Rate Limiter

Admits at most `max_requests` calls in any `window_seconds` window across
every endpoint of a provider. Callers over quota are suspended until the
oldest admitted call leaves the window, then re-checked.

A call is counted only when it is admitted; a caller cancelled while
waiting leaves no trace.
"""

import asyncio
import logging
import threading
import time
from collections import deque
from typing import Awaitable, Callable, Optional

logger = logging.getLogger(__name__)


class SlidingWindowRateLimiter:
    """Request-timestamp queue with atomic check-and-record."""

    def __init__(
        self,
        max_requests: int = 5,
        window_seconds: float = 60.0,
        safety_margin: float = 0.1,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if max_requests <= 0:
            raise ValueError("max_requests must be positive")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")

        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.safety_margin = safety_margin
        self._clock = clock
        self._sleep = sleep
        self._timestamps: deque[float] = deque()
        self._lock = threading.Lock()

    def _prune(self, now: float) -> None:
        while self._timestamps and now - self._timestamps[0] >= self.window_seconds:
            self._timestamps.popleft()

    def _reserve(self) -> Optional[float]:
        """Record a call if admissible, else return how long to wait."""
        with self._lock:
            now = self._clock()
            self._prune(now)

            if len(self._timestamps) < self.max_requests:
                self._timestamps.append(now)
                return None

            oldest = self._timestamps[0]
            return max(self.window_seconds - (now - oldest) + self.safety_margin, 0.0)

    def can_admit(self) -> bool:
        """True if a call made now would be admitted without waiting."""
        with self._lock:
            self._prune(self._clock())
            return len(self._timestamps) < self.max_requests

    def try_acquire(self) -> bool:
        """Admit and record a call without waiting; False if over quota."""
        return self._reserve() is None

    def wait_time(self) -> float:
        """Seconds until a call would be admitted (0 if admissible now)."""
        with self._lock:
            now = self._clock()
            self._prune(now)
            if len(self._timestamps) < self.max_requests:
                return 0.0
            return max(self.window_seconds - (now - self._timestamps[0]) + self.safety_margin, 0.0)

    async def acquire(self) -> float:
        """
        Wait until a call is admitted and record it.

        Returns:
            Total seconds spent waiting
        """
        waited = 0.0
        while True:
            delay = self._reserve()
            if delay is None:
                return waited

            logger.debug(f"Rate limit reached ({self.max_requests}/{self.window_seconds}s), waiting {delay:.2f}s")
            await self._sleep(delay)
            waited += delay

    @property
    def remaining(self) -> int:
        """Calls admissible right now."""
        with self._lock:
            self._prune(self._clock())
            return self.max_requests - len(self._timestamps)

    def reset(self) -> None:
        with self._lock:
            self._timestamps.clear()

    def __len__(self) -> int:
        """Calls currently counted in the window."""
        with self._lock:
            self._prune(self._clock())
            return len(self._timestamps)
