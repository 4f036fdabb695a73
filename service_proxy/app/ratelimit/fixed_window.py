"""
Fixed-window request governor for upstream profile lookups.
"""

import asyncio
import math
import time
from typing import Any, Callable, Dict, Optional

from shared.logging import get_logger


DEFAULT_WINDOW_SECONDS = 60


class RequestGovernor:
    """
    Counter-based limiter reset to zero on a fixed cadence.

    The reset is driven by a background timer, not by traffic, so a burst
    just before a reset and another just after it are both admitted.
    """

    def __init__(
        self,
        limit: int,
        window_seconds: float = DEFAULT_WINDOW_SECONDS,
        *,
        clock: Callable[[], float] = time.monotonic,
        on_change: Optional[Callable[[int], None]] = None,
    ):
        if limit < 0:
            raise ValueError("limit must be >= 0")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be > 0")

        self.limit = limit
        self.window_seconds = window_seconds
        self.logger = get_logger("mojang_proxy.governor")

        self._clock = clock
        self._on_change = on_change
        self._count = 0
        self._last_reset = clock()

        self._reset_task: Optional[asyncio.Task] = None
        self.running = False

    @property
    def count(self) -> int:
        return self._count

    def try_acquire(self) -> bool:
        """Take one slot from the current window if any is left."""
        if self._count >= self.limit:
            return False
        self._count += 1
        self._notify()
        return True

    def reset(self) -> None:
        """Start a new window with an empty counter."""
        previous = self._count
        self._count = 0
        self._last_reset = self._clock()
        if previous:
            self.logger.debug("Request window reset", previous_count=previous)
        self._notify()

    def seconds_until_reset(self) -> int:
        """Whole seconds until the next scheduled reset, at least 1."""
        remaining = self.window_seconds - (self._clock() - self._last_reset)
        return max(1, math.ceil(remaining))

    def status(self) -> Dict[str, Any]:
        return {
            "count": self._count,
            "limit": self.limit,
            "window_seconds": self.window_seconds,
            "reset_in_seconds": self.seconds_until_reset(),
        }

    async def start(self):
        """Start the periodic reset timer."""
        if self._reset_task is not None:
            return
        self.running = True
        self._last_reset = self._clock()
        self._reset_task = asyncio.create_task(self._reset_loop())
        self.logger.info("Request governor started", limit=self.limit, window_seconds=self.window_seconds)

    async def stop(self):
        """Stop the periodic reset timer."""
        self.running = False
        if self._reset_task:
            self._reset_task.cancel()
            try:
                await self._reset_task
            except asyncio.CancelledError:
                pass
            self._reset_task = None

        self.logger.info("Request governor stopped")

    async def _reset_loop(self):
        while self.running:
            try:
                await asyncio.sleep(self.window_seconds)
                self.reset()
            except asyncio.CancelledError:
                break
            except Exception as e:
                self.logger.error("Error in governor reset loop", error=str(e))

    def _notify(self) -> None:
        if self._on_change is not None:
            self._on_change(self._count)
