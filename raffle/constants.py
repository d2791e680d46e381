"""
Fixed protocol values for the raffle and its randomness requests.

These are not configurable: the oracle request shape is part of the wire
contract with the coordinator.
"""

from __future__ import annotations

from typing import Final

# --- oracle request shape ----------------------------------------------------

REQUEST_CONFIRMATIONS: Final[int] = 3   # blocks the coordinator waits before answering
NUM_WORDS: Final[int] = 1               # a single random word per draw
NATIVE_PAYMENT: Final[bool] = False     # requests are billed to the subscription

# --- identities --------------------------------------------------------------

ADDRESS_LEN: Final[int] = 20            # bytes; rendered as 0x + 40 hex chars
KEY_HASH_LEN: Final[int] = 32           # gas lane selector

# --- defaults used by config and the local tooling ---------------------------

DEFAULT_ENTRANCE_FEE: Final[int] = 10**16
DEFAULT_INTERVAL_S: Final[int] = 30
DEFAULT_CALLBACK_GAS_LIMIT: Final[int] = 500_000
DEFAULT_SUBSCRIPTION_ID: Final[int] = 0
DEFAULT_KEY_HASH: Final[str] = "0x" + "00" * KEY_HASH_LEN

# --- event names (bytes for deterministic encoding) --------------------------

EV_ENTERED: Final[bytes] = b"RaffleEntered"
EV_DRAW_REQUESTED: Final[bytes] = b"RequestedRaffleWinner"
EV_WINNER_PICKED: Final[bytes] = b"WinnerPicked"

__all__ = [
    "REQUEST_CONFIRMATIONS",
    "NUM_WORDS",
    "NATIVE_PAYMENT",
    "ADDRESS_LEN",
    "KEY_HASH_LEN",
    "DEFAULT_ENTRANCE_FEE",
    "DEFAULT_INTERVAL_S",
    "DEFAULT_CALLBACK_GAS_LIMIT",
    "DEFAULT_SUBSCRIPTION_ID",
    "DEFAULT_KEY_HASH",
    "EV_ENTERED",
    "EV_DRAW_REQUESTED",
    "EV_WINNER_PICKED",
]
