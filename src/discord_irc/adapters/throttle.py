"""IRC flood protection: token bucket pacing outbound lines."""

from __future__ import annotations

import asyncio
import time


class TokenBucket:
    """Allow ``burst`` lines at once, then one line every ``interval`` seconds."""

    def __init__(self, interval: float, burst: int = 1) -> None:
        if interval < 0:
            raise ValueError("interval must be >= 0")
        self._interval = interval
        self._burst = max(1, burst)
        self._tokens = float(self._burst)
        self._last_refill = time.monotonic()

    def delay(self) -> float:
        """Seconds until a token is available. 0 if one is available now."""
        self._refill()
        if self._tokens >= 1 or self._interval == 0:
            return 0.0
        return (1 - self._tokens) * self._interval

    def take(self) -> bool:
        """Consume a token. Returns False if none was available."""
        self._refill()
        if self._interval == 0:
            return True
        if self._tokens >= 1:
            self._tokens -= 1
            return True
        return False

    async def wait(self) -> None:
        """Sleep until a token is available, then consume it."""
        while not self.take():
            await asyncio.sleep(self.delay())

    def _refill(self) -> None:
        now = time.monotonic()
        if self._interval > 0:
            elapsed = now - self._last_refill
            self._tokens = min(float(self._burst), self._tokens + elapsed / self._interval)
        self._last_refill = now
