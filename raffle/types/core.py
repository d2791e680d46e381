from __future__ import annotations

from dataclasses import dataclass
from typing import NewType, Sequence

from ..constants import (
    ADDRESS_LEN,
    KEY_HASH_LEN,
    NATIVE_PAYMENT,
    NUM_WORDS,
    REQUEST_CONFIRMATIONS,
)

"""
Core typed primitives for the raffle.

These are intentionally minimal and free of heavy dependencies so they can be
shared across submodules (registry, oracle client, payout, RPC surface and
tests).

Types provided:
  • Address              — lowercase 0x-hex account identity (20 bytes)
  • RequestId            — integer-typed oracle request identifier
  • Entrant              — identity plus the amount it paid
  • OracleRequestConfig  — the per-raffle part of a randomness request
  • RandomWordsRequest   — the full payload sent to the coordinator
  • RandomnessRequest    — a pending request as tracked by the client
  • WinnerResolution     — value → index → identity mapping for one draw
"""

# ---- Simple newtypes ---------------------------------------------------------

Address = NewType("Address", str)
RequestId = NewType("RequestId", int)

_HEX = frozenset("0123456789abcdef")


def _require_nonneg(name: str, v: int) -> None:
    if v < 0:
        raise ValueError(f"{name} must be non-negative (got {v})")


def _strip_0x(s: str) -> str:
    return s[2:] if s.startswith(("0x", "0X")) else s


def to_address(value: str | bytes) -> Address:
    """
    Normalize an identity to a lowercase 0x-prefixed 20-byte hex string.

    Accepts raw bytes of the right length or a hex string with or without prefix.
    """
    if isinstance(value, (bytes, bytearray)):
        if len(value) != ADDRESS_LEN:
            raise ValueError(f"address must be exactly {ADDRESS_LEN} bytes (got {len(value)})")
        return Address("0x" + bytes(value).hex())
    if not isinstance(value, str):
        raise TypeError("address must be str or bytes")
    body = _strip_0x(value).lower()
    if len(body) != ADDRESS_LEN * 2 or not set(body) <= _HEX:
        raise ValueError(f"invalid address: {value!r}")
    return Address("0x" + body)


def key_hash_bytes(value: str | bytes) -> bytes:
    """Parse a 32-byte key hash (gas lane selector) from hex or bytes."""
    if isinstance(value, (bytes, bytearray)):
        raw = bytes(value)
    elif isinstance(value, str):
        raw = bytes.fromhex(_strip_0x(value))
    else:
        raise TypeError("key_hash must be hex str or bytes")
    if len(raw) != KEY_HASH_LEN:
        raise ValueError(f"key_hash must be exactly {KEY_HASH_LEN} bytes (got {len(raw)})")
    return raw


# ---- Records -----------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Entrant:
    """
    One paid entry in the current round.

    Fields:
      identity — the entrant's address
      paid     — amount attached to the entry (>= entrance fee)
    """

    identity: Address
    paid: int

    def __post_init__(self) -> None:  # type: ignore[override]
        _require_nonneg("paid", int(self.paid))


@dataclass(frozen=True, slots=True)
class OracleRequestConfig:
    """
    Raffle-specific request parameters. The remaining fields of the request
    (confirmations, word count, payment mode) are protocol constants.
    """

    key_hash: bytes
    subscription_id: int
    callback_gas_limit: int

    def __post_init__(self) -> None:  # type: ignore[override]
        if len(self.key_hash) != KEY_HASH_LEN:
            raise ValueError(f"key_hash must be exactly {KEY_HASH_LEN} bytes")
        _require_nonneg("subscription_id", int(self.subscription_id))
        if self.callback_gas_limit <= 0:
            raise ValueError("callback_gas_limit must be > 0")


@dataclass(frozen=True, slots=True)
class RandomWordsRequest:
    """Outbound payload handed to the coordinator."""

    key_hash: bytes
    subscription_id: int
    request_confirmations: int
    callback_gas_limit: int
    num_words: int
    native_payment: bool

    @classmethod
    def from_config(cls, cfg: OracleRequestConfig) -> "RandomWordsRequest":
        return cls(
            key_hash=cfg.key_hash,
            subscription_id=cfg.subscription_id,
            request_confirmations=REQUEST_CONFIRMATIONS,
            callback_gas_limit=cfg.callback_gas_limit,
            num_words=NUM_WORDS,
            native_payment=NATIVE_PAYMENT,
        )

    def to_dict(self) -> dict:
        return {
            "keyHash": "0x" + self.key_hash.hex(),
            "subId": self.subscription_id,
            "requestConfirmations": self.request_confirmations,
            "callbackGasLimit": self.callback_gas_limit,
            "numWords": self.num_words,
            "extraArgs": {"nativePayment": self.native_payment},
        }


@dataclass(frozen=True, slots=True)
class RandomnessRequest:
    """A request issued to the coordinator and not yet fulfilled."""

    request_id: RequestId
    issued_at: int


@dataclass(frozen=True, slots=True)
class WinnerResolution:
    """
    Deterministic mapping from a delivered random value to a participant.

    Fields:
      random_value — the first delivered word
      winner_index — random_value mod participant count
      winner       — participants[winner_index]
    """

    random_value: int
    winner_index: int
    winner: Address


def resolve_winner(random_value: int, participants: Sequence[Address]) -> WinnerResolution:
    """
    Pick the winner for `random_value`.

    Plain modulo selection: slightly biased towards low indices when the word
    range is not a multiple of the participant count.
    """
    if not participants:
        raise ValueError("cannot resolve a winner without participants")
    _require_nonneg("random_value", int(random_value))
    idx = int(random_value) % len(participants)
    return WinnerResolution(random_value=int(random_value), winner_index=idx, winner=participants[idx])


__all__ = [
    "Address",
    "RequestId",
    "to_address",
    "key_hash_bytes",
    "Entrant",
    "OracleRequestConfig",
    "RandomWordsRequest",
    "RandomnessRequest",
    "WinnerResolution",
    "resolve_winner",
]
