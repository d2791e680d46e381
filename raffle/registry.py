"""
Participant registry for the current round.

Append-only until the round is reset. Insertion order is significant: the
index of an entrant is what the delivered random word selects.
"""

from __future__ import annotations

import logging
from typing import List

from .constants import EV_ENTERED
from .errors import IndexOutOfRange, InsufficientPayment, RegistryClosed
from .events import EventLog
from .types.core import Address, Entrant
from .types.state import Round

logger = logging.getLogger(__name__)


class ParticipantRegistry:
    """
    View over ``Round.participants`` that enforces the entry rules.

    The registry reads the round's state and fee but never changes them; only
    the state machine transitions the round.
    """

    __slots__ = ("_round", "_events")

    def __init__(self, round_: Round, events: EventLog) -> None:
        self._round = round_
        self._events = events

    def check_entry(self, paid_amount: int) -> None:
        """Raise if an entry paying `paid_amount` would be rejected right now."""
        required = self._round.params.entrance_fee
        if paid_amount < required:
            raise InsufficientPayment(paid=paid_amount, required=required)
        if not self._round.is_open:
            raise RegistryClosed(state=self._round.state)

    def enter(self, identity: Address, paid_amount: int) -> Entrant:
        self.check_entry(paid_amount)
        entrant = Entrant(identity=identity, paid=paid_amount)
        self._round.participants.append(entrant)
        self._events.emit(EV_ENTERED, {"player": identity})
        logger.debug("entered player=%s paid=%d count=%d", identity, paid_amount, self.count())
        return entrant

    def clear(self) -> None:
        self._round.participants.clear()

    def count(self) -> int:
        return len(self._round.participants)

    def get(self, index: int) -> Address:
        n = self.count()
        if index < 0 or index >= n:
            raise IndexOutOfRange(index=index, count=n)
        return self._round.participants[index].identity

    def identities(self) -> List[Address]:
        return [e.identity for e in self._round.participants]

    def __len__(self) -> int:
        return self.count()


__all__ = ["ParticipantRegistry"]
