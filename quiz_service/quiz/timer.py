"""
Countdown Timer - Drives quiz duration and auto-submit

The timer schedules its own ticks on the event loop and reports through
callbacks; it never touches session state directly.
"""

import asyncio
import logging
from typing import Any, Callable, Optional

from ..config import settings

logger = logging.getLogger(__name__)


class CountdownTimer:
    """
    Cancellable one-second countdown with a single expiry event.

    Each tick decrements the remaining counter and calls ``on_tick``.
    When the counter reaches zero ``on_expire`` fires exactly once and
    no further ticks are scheduled.
    """

    def __init__(
        self,
        on_tick: Optional[Callable[[int], None]] = None,
        on_expire: Optional[Callable[[], None]] = None,
        interval: Optional[float] = None,
        loop: Any = None
    ):
        """
        Args:
            on_tick: Called with the remaining seconds after every tick
            on_expire: Called once when the countdown reaches zero
            interval: Real seconds per tick (defaults to TIMER_TICK_SECONDS)
            loop: Scheduler with ``call_later``; the running asyncio loop if None
        """
        self.on_tick = on_tick
        self.on_expire = on_expire
        self.interval = settings.TIMER_TICK_SECONDS if interval is None else interval
        self._loop = loop
        self._handle = None
        self._remaining = 0
        self._running = False
        self._expired = False
        self._stop_count = 0

    @property
    def remaining(self) -> int:
        return self._remaining

    @property
    def running(self) -> bool:
        return self._running

    @property
    def expired(self) -> bool:
        return self._expired

    @property
    def stop_count(self) -> int:
        """Number of stop() calls that actually cancelled a running countdown"""
        return self._stop_count

    def start(self, duration_seconds: int) -> int:
        """
        Begin the countdown.

        Args:
            duration_seconds: Countdown length; values below the minimum are clamped

        Returns:
            The effective duration in seconds
        """
        if self._running:
            self._cancel_handle()

        duration = max(int(duration_seconds), settings.MIN_DURATION_SECONDS, 1)
        if duration != duration_seconds:
            logger.debug(f"Timer duration {duration_seconds} clamped to {duration}")

        if self._loop is None:
            self._loop = asyncio.get_running_loop()

        self._remaining = duration
        self._expired = False
        self._running = True
        self._schedule()
        return duration

    def stop(self) -> None:
        """Cancel future ticks. Safe to call repeatedly or after expiry."""
        if not self._running:
            return
        self._running = False
        self._cancel_handle()
        self._stop_count += 1

    def _schedule(self) -> None:
        self._handle = self._loop.call_later(self.interval, self._tick)

    def _cancel_handle(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _tick(self) -> None:
        self._handle = None
        if not self._running:
            return

        self._remaining = max(self._remaining - 1, 0)

        if self.on_tick is not None:
            self.on_tick(self._remaining)

        # on_tick may have stopped us
        if not self._running:
            return

        if self._remaining == 0:
            self._running = False
            self._expired = True
            logger.debug("Countdown expired")
            if self.on_expire is not None:
                self.on_expire()
        else:
            self._schedule()
