from __future__ import annotations

"""
Request pacing for the upstream indexer.

The indexer bans clients that call it too often, so every request from one
client instance (searches and token refreshes alike) goes through a single
gate that keeps them apart.
"""

import logging
import threading
import time
from contextlib import contextmanager
from typing import Callable, Iterator, Optional

DEFAULT_MIN_INTERVAL = 2.0

LOGGER = logging.getLogger(__name__)


class RateLimiter:
    """Lock plus a "next allowed" timestamp. One request at a time, spaced out."""

    def __init__(
        self,
        min_interval: float = DEFAULT_MIN_INTERVAL,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Parameters
        ----------
        min_interval : float, optional
            Minimum number of seconds between two requests.
        clock : callable, optional
            Monotonic time source, swapped out in tests.
        sleep : callable, optional
            Blocking sleep, swapped out in tests.
        """

        self.min_interval = min_interval
        self._clock = clock
        self._sleep = sleep
        self._lock = threading.Lock()
        self._next_allowed: Optional[float] = None

    def wait_time(self) -> float:
        """Seconds left before the next request may start, never negative."""

        if self._next_allowed is None:
            return 0.0
        return max(0.0, self._next_allowed - self._clock())

    @contextmanager
    def slot(self) -> Iterator[None]:
        """
        Hold the gate for the duration of one upstream request.

        Blocks until the gate is free, then sleeps off whatever is left of the
        spacing. The next slot opens ``min_interval`` seconds after this one is
        left, however the request went.
        """

        with self._lock:
            delay = self.wait_time()
            if delay > 0:
                LOGGER.debug("Rate limit: sleeping %.2fs before next request", delay)
                self._sleep(delay)
            try:
                yield
            finally:
                self._next_allowed = self._clock() + self.min_interval
