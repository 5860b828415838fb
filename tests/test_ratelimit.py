from __future__ import annotations

"""Tests for the request gate."""

import threading
import time

from magnet_finder.ratelimit import RateLimiter


def test_first_request_does_not_wait(clock) -> None:
    limiter = RateLimiter(min_interval=2.0, clock=clock, sleep=clock.sleep)
    with limiter.slot():
        pass
    assert clock.sleeps == []


def test_consecutive_requests_are_spaced(clock) -> None:
    limiter = RateLimiter(min_interval=2.0, clock=clock, sleep=clock.sleep)
    starts = []
    for _ in range(4):
        with limiter.slot():
            starts.append(clock())
            clock.advance(0.3)  # the request itself

    deltas = [b - a for a, b in zip(starts, starts[1:])]
    assert min(deltas) >= 2.0


def test_no_wait_once_interval_has_passed(clock) -> None:
    limiter = RateLimiter(min_interval=2.0, clock=clock, sleep=clock.sleep)
    with limiter.slot():
        pass
    clock.advance(5)
    assert limiter.wait_time() == 0.0
    with limiter.slot():
        pass
    assert clock.sleeps == []


def test_failed_request_still_counts(clock) -> None:
    limiter = RateLimiter(min_interval=2.0, clock=clock, sleep=clock.sleep)
    try:
        with limiter.slot():
            raise RuntimeError("boom")
    except RuntimeError:
        pass
    assert limiter.wait_time() == 2.0


def test_threads_never_overlap() -> None:
    limiter = RateLimiter(min_interval=0.05)
    active = []
    overlaps = []
    starts = []
    guard = threading.Lock()

    def worker() -> None:
        with limiter.slot():
            with guard:
                if active:
                    overlaps.append(True)
                active.append(1)
                starts.append(time.monotonic())
            time.sleep(0.01)
            with guard:
                active.pop()

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    starts.sort()
    assert not overlaps
    assert all(b - a >= 0.05 for a, b in zip(starts, starts[1:]))
