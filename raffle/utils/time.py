"""
raffle.utils.time
=================

Clock sources for the raffle. The state machine never reads wall-clock time
directly; it asks an injected clock, so block-time hosts, simulations and
tests all drive the same code.

- ``SystemClock``  — integer UNIX seconds from ``time.time()``
- ``ManualClock``  — caller-advanced clock for simulations and tests

Any zero-argument callable returning integer seconds is accepted where a
``Clock`` is expected.
"""

from __future__ import annotations

import time
from typing import Callable

Clock = Callable[[], int]

__all__ = ["Clock", "SystemClock", "ManualClock"]


class SystemClock:
    """Wall-clock seconds since the UNIX epoch."""

    def __call__(self) -> int:
        return int(time.time())


class ManualClock:
    """
    A clock that only moves when told to.

    Attributes
    ----------
    now : int
        Current epoch seconds.
    """

    def __init__(self, start: int = 1_700_000_000) -> None:
        if start < 0:
            raise ValueError("start must be non-negative")
        self.now = int(start)

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> int:
        """Move forward by `seconds`; the clock never goes backwards."""
        if seconds < 0:
            raise ValueError("cannot move a clock backwards")
        self.now += int(seconds)
        return self.now

    def set(self, ts: int) -> int:
        if ts < self.now:
            raise ValueError("cannot move a clock backwards")
        self.now = int(ts)
        return self.now
