"""
raffle.ledger — minimal in-memory native-currency ledger.

The raffle only needs single-asset balance transfers: entrants pay the
entrance fee into the raffle's address and the prize pool is later moved to
the winner. This ledger provides exactly that, plus a switch to make an
address refuse incoming funds (the failure mode the payout path must survive).

Notes
-----
* Simulation-grade: real settlement belongs to the host chain. Embedders can
  pass any object with the same ``balance``/``transfer`` surface.
* Transfers are atomic: every check runs before the first mutation.
* Addresses are normalized to lowercase 0x-hex on every call.
* Guarded by an ``RLock`` so several raffles in one process can share it.
"""

from __future__ import annotations

import threading
from typing import Dict, Iterable, Set

from .errors import InsufficientFunds, LedgerError, TransferRejected
from .types.core import Address, to_address

MAX_BALANCE_BITS = 256


def _check_amount(amount: int) -> None:
    if not isinstance(amount, int) or isinstance(amount, bool):
        raise LedgerError("amount must be int")
    if amount < 0:
        raise LedgerError("amount must be non-negative")
    if amount.bit_length() > MAX_BALANCE_BITS:
        raise LedgerError(f"amount exceeds {MAX_BALANCE_BITS}-bit limit")


def _addr(addr: str) -> Address:
    try:
        return to_address(addr)
    except (TypeError, ValueError) as e:
        raise LedgerError(f"bad address: {addr!r}") from e


def _add_checked(a: int, b: int) -> int:
    c = a + b
    if c.bit_length() > MAX_BALANCE_BITS:
        raise LedgerError("balance overflow")
    return c


class Ledger:
    def __init__(self, balances: Dict[str, int] | None = None) -> None:
        self._lock = threading.RLock()
        self._balances: Dict[str, int] = {}
        self._refusing: Set[str] = set()
        for addr, amount in (balances or {}).items():
            self.credit(addr, amount)

    # --- reads --------------------------------------------------------------

    def balance(self, addr: str) -> int:
        addr = _addr(addr)
        with self._lock:
            return self._balances.get(addr, 0)

    def total_supply(self) -> int:
        with self._lock:
            return sum(self._balances.values())

    # --- host helpers -------------------------------------------------------

    def credit(self, addr: str, amount: int) -> None:
        _check_amount(amount)
        addr = _addr(addr)
        with self._lock:
            self._balances[addr] = _add_checked(self._balances.get(addr, 0), amount)

    def debit(self, addr: str, amount: int) -> None:
        _check_amount(amount)
        addr = _addr(addr)
        with self._lock:
            cur = self._balances.get(addr, 0)
            if amount > cur:
                raise InsufficientFunds(address=addr, balance=cur, amount=amount)
            self._balances[addr] = cur - amount

    def refuse(self, *addrs: str) -> None:
        """Make `addrs` reject every incoming transfer."""
        normalized = [_addr(a) for a in addrs]
        with self._lock:
            self._refusing.update(normalized)

    def accept(self, *addrs: str) -> None:
        normalized = [_addr(a) for a in addrs]
        with self._lock:
            self._refusing.difference_update(normalized)

    def refusing(self) -> Iterable[str]:
        with self._lock:
            return sorted(self._refusing)

    # --- transfers ----------------------------------------------------------

    def transfer(self, src: str, dst: str, amount: int) -> None:
        """Debit `src` and credit `dst` by `amount`, or change nothing."""
        _check_amount(amount)
        src, dst = _addr(src), _addr(dst)
        with self._lock:
            if dst in self._refusing:
                raise TransferRejected(address=dst)
            cur_from = self._balances.get(src, 0)
            if amount > cur_from:
                raise InsufficientFunds(address=src, balance=cur_from, amount=amount)
            if amount == 0:
                return
            new_to = _add_checked(self._balances.get(dst, 0), amount) if src != dst else cur_from
            self._balances[src] = cur_from - amount
            self._balances[dst] = new_to


__all__ = ["Ledger", "MAX_BALANCE_BITS"]
