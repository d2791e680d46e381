from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from .core import Address, Entrant, RequestId


class RaffleState(str, Enum):
    """Lifecycle states of a raffle round."""

    OPEN = "open"                # entries accepted
    CALCULATING = "calculating"  # draw pending; entries and new draws rejected


@dataclass(frozen=True, slots=True)
class RaffleParams:
    """
    Immutable policy fixed at construction.

    Fields:
      entrance_fee — minimum amount an entrant must attach (> 0)
      interval     — minimum seconds between draws (>= 0)
    """

    entrance_fee: int
    interval: int

    def __post_init__(self) -> None:  # type: ignore[override]
        for name in ("entrance_fee", "interval"):
            v = getattr(self, name)
            if not isinstance(v, int) or isinstance(v, bool):
                raise TypeError(f"{name} must be int")
        if self.entrance_fee <= 0:
            raise ValueError("entrance_fee must be positive")
        if self.interval < 0:
            raise ValueError("interval must be non-negative")


@dataclass(slots=True)
class Round:
    """
    Live state of one raffle cycle.

    Tracks:
      • params              — immutable fee/interval policy
      • state               — OPEN or CALCULATING
      • last_draw_timestamp — set at construction and on every reset
      • participants        — entrants in insertion order (defines selection index)
      • pending_request_id  — mirror of the oracle client's pending request
      • recent_winner       — most recent paid winner, survives resets
    """

    params: RaffleParams
    last_draw_timestamp: int
    state: RaffleState = RaffleState.OPEN
    participants: List[Entrant] = field(default_factory=list)
    pending_request_id: Optional[RequestId] = None
    recent_winner: Optional[Address] = None

    @property
    def is_open(self) -> bool:
        return self.state is RaffleState.OPEN

    def elapsed(self, now_s: int) -> int:
        """Seconds since the last draw (0 if the clock is behind)."""
        return max(0, int(now_s) - self.last_draw_timestamp)

    def interval_elapsed(self, now_s: int) -> bool:
        return self.elapsed(now_s) >= self.params.interval

    def reset(self, now_s: int, winner: Address) -> None:
        """Close out a paid round: clear entrants, advance the timer, reopen."""
        self.participants.clear()
        self.last_draw_timestamp = max(self.last_draw_timestamp, int(now_s))
        self.pending_request_id = None
        self.recent_winner = winner
        self.state = RaffleState.OPEN


__all__ = ["RaffleState", "RaffleParams", "Round"]
