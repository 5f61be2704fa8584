from __future__ import annotations

"""
FIFO Concurrency Limiter.

Counting semaphore that admits at most N holders at once and wakes blocked
callers strictly in arrival order. Released permits are handed directly to
the oldest waiter, so a newly arriving thread can never overtake a queued
one.
"""

import logging
import threading
from collections import deque
from typing import Deque

from filescope.domain.errors import SetupError

logger = logging.getLogger(__name__)


class ConcurrencyLimiter:
    """
    Thread-safe FIFO counting semaphore.

    Also records the in-flight count and its high-water mark so runs can
    report the peak concurrency they actually reached.
    """

    def __init__(self, permits: int) -> None:
        """
        Initialize the limiter.

        Args:
            permits: Maximum number of simultaneous holders (>= 1).

        Raises:
            SetupError: If permits is lower than 1.
        """
        if isinstance(permits, bool) or not isinstance(permits, int) or permits < 1:
            raise SetupError(f"Concurrency limiter requires at least 1 permit, got {permits!r}.")

        self._permits = permits
        self._available = permits
        self._lock = threading.Lock()
        self._waiters: Deque[threading.Event] = deque()
        self._in_flight = 0
        self._high_water_mark = 0

    # -------------------------------------------------------------------------
    # Permit lifecycle
    # -------------------------------------------------------------------------

    def acquire(self) -> None:
        """Block until a permit is granted."""
        with self._lock:
            if self._available > 0 and not self._waiters:
                self._available -= 1
                self._admit()
                return
            waiter = threading.Event()
            self._waiters.append(waiter)

        # The releasing thread performs the accounting before setting the event
        waiter.wait()

    def release(self) -> None:
        """
        Return a permit, handing it to the oldest waiter if there is one.

        Raises:
            RuntimeError: If called more times than acquire().
        """
        with self._lock:
            if self._in_flight <= 0:
                raise RuntimeError("ConcurrencyLimiter.release() called without a matching acquire().")
            self._in_flight -= 1

            if self._waiters:
                waiter = self._waiters.popleft()
                self._admit()
                waiter.set()
            else:
                self._available += 1

    def __enter__(self) -> "ConcurrencyLimiter":
        self.acquire()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()

    # -------------------------------------------------------------------------
    # Introspection
    # -------------------------------------------------------------------------

    @property
    def permits(self) -> int:
        return self._permits

    @property
    def in_flight(self) -> int:
        with self._lock:
            return self._in_flight

    @property
    def waiting(self) -> int:
        with self._lock:
            return len(self._waiters)

    @property
    def high_water_mark(self) -> int:
        with self._lock:
            return self._high_water_mark

    def reset_high_water_mark(self) -> None:
        with self._lock:
            self._high_water_mark = self._in_flight

    def _admit(self) -> None:
        # Caller holds self._lock
        self._in_flight += 1
        if self._in_flight > self._high_water_mark:
            self._high_water_mark = self._in_flight
