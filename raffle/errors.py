"""
Raffle errors.

A small, typed hierarchy of exceptions raised by the raffle state machine and
its collaborators. Callers can catch the base `RaffleError` to handle every
raffle failure, or one of the category bases for coarser handling:

- `EntryError`     — validation errors on entry (no state change)
- `UpkeepError`    — draw preconditions not met (no state change, retry later)
- `OracleError`    — protocol errors on the oracle callback path (rejected)
- `PayoutError`    — fatal round errors (round stays CALCULATING)
- `LedgerError`    — funds movement rejected by the ledger

Each concrete error is a dataclass carrying its diagnostic fields and a
stable short `code` suitable for RPC envelopes and logs.
"""

from __future__ import annotations

from dataclasses import dataclass, fields, is_dataclass
from typing import Any, ClassVar, Dict, Optional


def _state_name(state: Any) -> str:
    return str(getattr(state, "value", state))


class RaffleError(Exception):
    """Base class for all raffle errors."""

    code: ClassVar[str] = "raffle_error"

    def to_dict(self) -> Dict[str, Any]:
        declared = fields(self) if is_dataclass(self) else ()
        data = {f.name: getattr(self, f.name) for f in declared}
        for k, v in data.items():
            if hasattr(v, "value"):
                data[k] = v.value
        return {"code": self.code, "message": str(self), "data": data}


class EntryError(RaffleError):
    code: ClassVar[str] = "entry_error"


class UpkeepError(RaffleError):
    code: ClassVar[str] = "upkeep_error"


class OracleError(RaffleError):
    code: ClassVar[str] = "oracle_error"


class PayoutError(RaffleError):
    code: ClassVar[str] = "payout_error"


class LedgerError(RaffleError):
    """Raised by the ledger for malformed amounts or addresses."""

    code: ClassVar[str] = "ledger_error"

    def __init__(self, reason: str = "ledger error") -> None:
        super().__init__(reason)
        self.reason = reason


class ConfigError(ValueError):
    """Invalid raffle configuration."""


# --- entry -------------------------------------------------------------------


@dataclass(eq=False)
class InsufficientPayment(EntryError):
    """
    Raised when an entrant pays less than the entrance fee.

    Attributes:
        paid: Amount attached to the entry.
        required: The raffle's entrance fee.
    """
    paid: int
    required: int

    code: ClassVar[str] = "insufficient_payment"

    def __str__(self) -> str:  # pragma: no cover - trivial formatting
        return f"InsufficientPayment: paid={self.paid} < required={self.required}"


@dataclass(eq=False)
class RegistryClosed(EntryError):
    """
    Raised when an entry arrives while the raffle is not OPEN.

    Attributes:
        state: The raffle state at the time of the call.
    """
    state: Any

    code: ClassVar[str] = "registry_closed"

    def __str__(self) -> str:  # pragma: no cover - trivial formatting
        return f"RegistryClosed: state={_state_name(self.state)}"


@dataclass(eq=False)
class IndexOutOfRange(EntryError):
    index: int
    count: int

    code: ClassVar[str] = "index_out_of_range"

    def __str__(self) -> str:  # pragma: no cover - trivial formatting
        return f"IndexOutOfRange: index={self.index} count={self.count}"


# --- upkeep ------------------------------------------------------------------


@dataclass(eq=False)
class UpkeepNotNeeded(UpkeepError):
    """
    Raised when a draw is triggered while the upkeep predicate does not hold.

    Attributes:
        balance: Prize pool balance at the time of the call.
        participant_count: Number of entrants in the current round.
        state: The raffle state at the time of the call.
    """
    balance: int
    participant_count: int
    state: Any

    code: ClassVar[str] = "upkeep_not_needed"

    def __str__(self) -> str:  # pragma: no cover - trivial formatting
        return (
            f"UpkeepNotNeeded: balance={self.balance} "
            f"participants={self.participant_count} state={_state_name(self.state)}"
        )


# --- oracle ------------------------------------------------------------------


@dataclass(eq=False)
class UnknownRequest(OracleError):
    """
    Raised when a fulfillment does not match the pending randomness request
    (stale, replayed or forged callback).

    Attributes:
        request_id: The id carried by the fulfillment.
        pending_id: The id currently tracked, or None if nothing is pending.
    """
    request_id: int
    pending_id: Optional[int] = None

    code: ClassVar[str] = "unknown_request"

    def __str__(self) -> str:  # pragma: no cover - trivial formatting
        return f"UnknownRequest: request_id={self.request_id} pending={self.pending_id}"


@dataclass(eq=False)
class Unauthorized(OracleError):
    """
    Raised when anyone other than the designated coordinator delivers randomness.
    """
    caller: str
    expected: str

    code: ClassVar[str] = "unauthorized"

    def __str__(self) -> str:  # pragma: no cover - trivial formatting
        return f"Unauthorized: caller={self.caller} expected={self.expected}"


@dataclass(eq=False)
class BadFulfillment(OracleError):
    """
    Raised when a matching fulfillment carries no usable random value.

    Attributes:
        request_id: The matching request id.
        reason: Optional explanation (e.g., 'no-words', 'bad-word').
    """
    request_id: int
    reason: Optional[str] = None

    code: ClassVar[str] = "bad_fulfillment"

    def __str__(self) -> str:  # pragma: no cover - trivial formatting
        return (
            f"BadFulfillment: request_id={self.request_id}"
            + (f" reason={self.reason}" if self.reason else "")
        )


# --- payout ------------------------------------------------------------------


@dataclass(eq=False)
class TransferFailed(PayoutError):
    """
    Raised when the prize cannot be moved to the winner. The round stays in
    CALCULATING with its participants intact until an operator intervenes.
    """
    recipient: str
    amount: int
    reason: Optional[str] = None

    code: ClassVar[str] = "transfer_failed"

    def __str__(self) -> str:  # pragma: no cover - trivial formatting
        base = f"TransferFailed: recipient={self.recipient} amount={self.amount}"
        return f"{base} reason={self.reason}" if self.reason else base


# --- ledger ------------------------------------------------------------------


@dataclass(eq=False)
class InsufficientFunds(LedgerError):
    address: str
    balance: int
    amount: int

    code: ClassVar[str] = "insufficient_funds"

    def __post_init__(self) -> None:
        self.reason = "insufficient balance"

    def __str__(self) -> str:  # pragma: no cover - trivial formatting
        return f"InsufficientFunds: address={self.address} balance={self.balance} < amount={self.amount}"


@dataclass(eq=False)
class TransferRejected(LedgerError):
    """Raised when a recipient refuses incoming funds."""
    address: str

    code: ClassVar[str] = "transfer_rejected"

    def __post_init__(self) -> None:
        self.reason = "recipient refuses funds"

    def __str__(self) -> str:  # pragma: no cover - trivial formatting
        return f"TransferRejected: address={self.address}"


__all__ = [
    "RaffleError",
    "EntryError",
    "UpkeepError",
    "OracleError",
    "PayoutError",
    "LedgerError",
    "ConfigError",
    "InsufficientPayment",
    "RegistryClosed",
    "IndexOutOfRange",
    "UpkeepNotNeeded",
    "UnknownRequest",
    "Unauthorized",
    "BadFulfillment",
    "TransferFailed",
    "InsufficientFunds",
    "TransferRejected",
]
