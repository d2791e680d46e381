"""
Typed primitives and round state for the raffle.

Re-exports the most commonly used names so callers can write
``from raffle.types import Round, RaffleState, Address``.
"""

from __future__ import annotations

from .core import (
    Address,
    Entrant,
    OracleRequestConfig,
    RandomnessRequest,
    RandomWordsRequest,
    RequestId,
    WinnerResolution,
    key_hash_bytes,
    resolve_winner,
    to_address,
)
from .state import RaffleParams, RaffleState, Round

__all__ = [
    "Address",
    "Entrant",
    "OracleRequestConfig",
    "RandomnessRequest",
    "RandomWordsRequest",
    "RequestId",
    "WinnerResolution",
    "key_hash_bytes",
    "resolve_winner",
    "to_address",
    "RaffleParams",
    "RaffleState",
    "Round",
]
