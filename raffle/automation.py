"""
Automation agent for time-gated draws.

The keeper polls the pure `check_upkeep` predicate and only then invokes the
mutating `perform_upkeep`, which re-validates the same predicate. If the
inputs changed between the two calls, the act fails with `UpkeepNotNeeded`;
the keeper treats that as "not needed this time" and polls again later.

    keeper = Keeper(raffle)
    keeper.poll_once()                         # single check-then-act
    keeper.run(stop_event, period_s=5.0)       # loop until stop_event is set
"""

from __future__ import annotations

import logging
import threading
from typing import Optional, Protocol, Tuple

from .errors import UpkeepNotNeeded
from .types.core import RequestId

logger = logging.getLogger(__name__)


class Upkeep(Protocol):
    def check_upkeep(self, extra_data: bytes = b"") -> Tuple[bool, bytes]: ...

    def perform_upkeep(self, perform_data: bytes = b"") -> RequestId: ...


class Keeper:
    __slots__ = ("_target", "_check_data", "polls", "performed")

    def __init__(self, target: Upkeep, check_data: bytes = b"") -> None:
        self._target = target
        self._check_data = check_data
        self.polls = 0
        self.performed = 0

    def poll_once(self) -> Optional[RequestId]:
        """Return the new request id if a draw was started, else None."""
        self.polls += 1
        needed, perform_data = self._target.check_upkeep(self._check_data)
        if not needed:
            return None
        try:
            request_id = self._target.perform_upkeep(perform_data)
        except UpkeepNotNeeded as e:
            logger.debug("upkeep raced and is no longer needed: %s", e)
            return None
        self.performed += 1
        return request_id

    def run(self, stop: threading.Event, period_s: float = 5.0) -> None:
        if period_s <= 0:
            raise ValueError("period_s must be > 0")
        logger.info("keeper started (period=%.2fs)", period_s)
        while not stop.is_set():
            self.poll_once()
            stop.wait(period_s)
        logger.info("keeper stopped after %d polls, %d draws", self.polls, self.performed)


__all__ = ["Keeper", "Upkeep"]
