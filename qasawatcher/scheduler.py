"""Tick source for the steady-state polling loop."""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Iterator

logger = logging.getLogger(__name__)


class IntervalTicker:
    """Yield an increasing tick number every ``interval`` seconds.

    Iteration ends once ``stop_event`` is set. Ticks that fall due while the
    consumer is still busy with a previous tick are dropped, not queued.
    """

    def __init__(self,
                 interval: float,
                 stop_event: threading.Event | None = None,
                 clock: Callable[[], float] = time.monotonic):
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        self.interval = interval
        self.stop_event = stop_event or threading.Event()
        self._clock = clock

    def stop(self) -> None:
        self.stop_event.set()

    def __iter__(self) -> Iterator[int]:
        tick = 0
        deadline = self._clock() + self.interval
        while not self.stop_event.is_set():
            remaining = deadline - self._clock()
            if remaining > 0 and self.stop_event.wait(remaining):
                break
            tick += 1
            yield tick

            deadline += self.interval
            now = self._clock()
            if deadline < now:
                missed = int((now - deadline) // self.interval) + 1
                logger.debug("Dropping %d overdue tick(s)", missed)
                deadline += missed * self.interval
