from __future__ import annotations

import logging
import time
from datetime import timedelta
from typing import Callable

from diffusionsim.config import DEFAULT_MIN_TICK_TIME, RATE_WINDOW
from diffusionsim.utils import to_seconds

logger = logging.getLogger(__name__)


class TickGovernor:
    """
    Pads every unit of work to a minimum duration and measures throughput.

    Usage per tick::

        governor.start()
        ...work...
        governor.end()

    The published rate is the number of ticks completed during the last full
    measurement window (one second); it is stale in between.
    """

    def __init__(
        self,
        min_tick_duration: float | timedelta = DEFAULT_MIN_TICK_TIME,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
        window: float = RATE_WINDOW,
    ) -> None:
        """
        Args:
            min_tick_duration: Lower bound of one tick, seconds or timedelta.
            clock: Monotonic time source in seconds.
            sleep: Blocking sleep used to pad short ticks.
            window: Length of the rate measurement window in seconds.
        """
        self.min_tick_duration = to_seconds(min_tick_duration)
        # Bound of the tick in progress, fixed by start()
        self._tick_minimum = self.min_tick_duration
        self.window = window
        self._clock = clock
        self._sleep = sleep

        now = self._clock()
        self.tick_started_at: float = now
        self.window_started_at: float = now
        self.rolling_tick_count: int = 0
        self.measured_rate: int = 0

    def start(self) -> None:
        """Mark the beginning of a tick."""
        self.tick_started_at = self._clock()
        self._tick_minimum = self.min_tick_duration

    def end(self) -> None:
        """Sleep out the rest of the minimum duration, then account for the tick."""
        elapsed = self._clock() - self.tick_started_at
        if elapsed < self._tick_minimum:
            self._sleep(self._tick_minimum - elapsed)

        self.rolling_tick_count += 1
        now = self._clock()
        if now - self.window_started_at >= self.window:
            self.measured_rate = self.rolling_tick_count
            self.rolling_tick_count = 0
            self.window_started_at = now

    def set_min_tick_time(self, duration: float | timedelta) -> None:
        """Change the lower bound; the tick in progress keeps the old one."""
        self.min_tick_duration = to_seconds(duration)
        logger.debug(f"Minimum tick time set to {self.min_tick_duration * 1000:.1f} ms.")

    def get_rate(self) -> int:
        """Ticks completed during the last full window."""
        return self.measured_rate
