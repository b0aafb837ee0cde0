"""Fixed-window operation meter.

Caps enacted operations to ``limit`` per window. When the cap is hit the
caller is suspended until the window that started at ``window_start`` has
fully elapsed, then the meter starts a fresh window at the resumption
instant. Because windows are fixed rather than sliding, up to twice the
limit can land inside any 60 seconds that straddle a reset.
"""

import asyncio
import time
from collections.abc import Awaitable, Callable

from src.core.purge.constants import DEFAULT_WINDOW_SECONDS

Clock = Callable[[], float]
Sleeper = Callable[[float], Awaitable[None]]


class RateMeter:
    """Per-phase operation counter.

    Owned by a single deletion phase and discarded when the phase ends.
    ``clock`` must be monotonic; ``sleep`` is awaited with a delay in
    seconds. Both are injectable so tests can fast-forward time.
    """

    def __init__(
        self,
        limit: int,
        window_seconds: float = DEFAULT_WINDOW_SECONDS,
        *,
        clock: Clock = time.monotonic,
        sleep: Sleeper = asyncio.sleep,
    ):
        if limit < 1:
            raise ValueError("limit must be at least 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        self.limit = limit
        self.window_seconds = window_seconds
        self._clock = clock
        self._sleep = sleep
        self.count = 0
        self.window_start = clock()
        self.pauses = 0

    @property
    def window_end(self) -> float:
        return self.window_start + self.window_seconds

    def reset(self) -> None:
        """Start a new window now."""
        self.count = 0
        self.window_start = self._clock()

    async def record_operation(self) -> bool:
        """Count one enacted operation, waiting out the window if it is full.

        Returns:
            True if the call suspended for the rest of the window.
        """
        self.count += 1
        if self.count < self.limit:
            return False

        remaining = self.window_end - self._clock()
        if remaining > 0:
            await self._sleep(remaining)
        self.reset()
        self.pauses += 1
        return True
