"""
Prize payout.

Moves the whole prize pool from the raffle's address to the winner. Any
ledger-level rejection surfaces as `TransferFailed` so the state machine can
keep the round in CALCULATING instead of resetting it.
"""

from __future__ import annotations

import logging

from .errors import LedgerError, TransferFailed
from .ledger import Ledger

logger = logging.getLogger(__name__)


class PayoutExecutor:
    __slots__ = ("_ledger", "_source")

    def __init__(self, ledger: Ledger, source: str) -> None:
        self._ledger = ledger
        self._source = source

    def transfer(self, identity: str, amount: int) -> None:
        try:
            self._ledger.transfer(self._source, identity, amount)
        except LedgerError as e:
            logger.warning("payout of %d to %s failed: %s", amount, identity, e)
            raise TransferFailed(recipient=identity, amount=amount, reason=e.reason) from e
        logger.info("paid %d to %s", amount, identity)


__all__ = ["PayoutExecutor"]
