"""
Client-side pacing for outgoing API calls.
"""

import asyncio
import time
from typing import Optional


class RateLimiter:
    """
    Enforces a minimum interval between the starts of successive calls.

    One instance is shared by every request going through a Transport.
    The lock is held across the wait, so concurrent callers are let
    through one at a time; the order they get the lock in is not
    guaranteed.
    """

    def __init__(self, rate_per_second: float):
        self.rate_per_second = rate_per_second
        self.interval = 1.0 / rate_per_second if rate_per_second > 0 else 0.0
        self._last: Optional[float] = None
        self._lock = asyncio.Lock()

    @property
    def enabled(self) -> bool:
        return self.interval > 0

    async def acquire(self) -> None:
        """
        Wait until the next call may start.

        Raises:
            asyncio.CancelledError: If the waiting task is cancelled
        """
        if not self.enabled:
            return

        async with self._lock:
            now = time.monotonic()
            if self._last is None:
                self._last = now
                return

            earliest = self._last + self.interval
            if earliest <= now:
                self._last = now
                return

            await asyncio.sleep(earliest - now)
            self._last = time.monotonic()
