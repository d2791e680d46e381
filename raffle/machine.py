"""
Raffle state machine.

Owns the live `Round` and orchestrates a full cycle:

    OPEN ──perform_upkeep()──▶ CALCULATING ──fulfill_random_words()──▶ OPEN
      ▲  enter() accepted          enter()/perform_upkeep() rejected        │
      └────────────── payout + reset (participants cleared) ◀──────────────┘

Entry points
------------
- enter(sender, value)                       — pay the fee and join the round
- check_upkeep(extra_data)                   — pure "is it time to draw?" predicate
- perform_upkeep(perform_data)               — re-validates, then requests randomness
- fulfill_random_words(caller, rid, values)  — coordinator callback; pays and resets

Guarantees
----------
- Entries and draw triggers are rejected while a draw is pending; CALCULATING
  is the single-slot lock.
- A fulfillment is honoured only for the currently pending request and only
  from the designated coordinator.
- Payout and reset are one step: if the transfer fails, nothing changes (the
  round stays CALCULATING with its participants and pending request) and the
  error propagates. There is no cancellation path for a request the
  coordinator never answers.

All calls are expected to be serialized by the host; the machine holds no lock.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple, Type

from .config import RaffleConfig
from .constants import EV_DRAW_REQUESTED, EV_WINNER_PICKED, NUM_WORDS, REQUEST_CONFIRMATIONS
from .errors import (
    BadFulfillment,
    InsufficientFunds,
    InsufficientPayment,
    OracleError,
    RaffleError,
    RegistryClosed,
    TransferFailed,
    Unauthorized,
    UnknownRequest,
    UpkeepNotNeeded,
)
from .events import EventLog
from .ledger import Ledger
from .metrics import METRICS, Metrics
from .oracle import Coordinator
from .oracle.client import RandomnessClient
from .payout import PayoutExecutor
from .registry import ParticipantRegistry
from .types.core import Address, OracleRequestConfig, RequestId, WinnerResolution, resolve_winner, to_address
from .types.state import RaffleParams, RaffleState, Round
from .utils.time import Clock, SystemClock

logger = logging.getLogger(__name__)

_ENTRY_OUTCOMES: Dict[Type[RaffleError], str] = {
    InsufficientPayment: "insufficient_payment",
    RegistryClosed: "closed",
    InsufficientFunds: "insufficient_funds",
}

_FULFILL_OUTCOMES: Dict[Type[RaffleError], str] = {
    UnknownRequest: "unknown_request",
    BadFulfillment: "bad_fulfillment",
}


class RaffleStateMachine:
    def __init__(
        self,
        params: RaffleParams,
        request_config: OracleRequestConfig,
        *,
        coordinator: Coordinator,
        ledger: Ledger,
        address: str,
        oracle_address: str,
        clock: Optional[Clock] = None,
        events: Optional[EventLog] = None,
        metrics: Optional[Metrics] = None,
    ) -> None:
        self._clock = clock or SystemClock()
        self.address = to_address(address)
        self.oracle_address = to_address(oracle_address)
        self._request_config = request_config
        self._round = Round(params=params, last_draw_timestamp=int(self._clock()))
        self._events = events if events is not None else EventLog()
        self._registry = ParticipantRegistry(self._round, self._events)
        self._client = RandomnessClient(coordinator, self._clock)
        self._ledger = ledger
        self._payout = PayoutExecutor(ledger, self.address)
        self._metrics = metrics or METRICS
        self._refresh_gauges()

    @classmethod
    def from_config(
        cls,
        cfg: RaffleConfig,
        *,
        coordinator: Coordinator,
        ledger: Ledger,
        clock: Optional[Clock] = None,
        events: Optional[EventLog] = None,
        metrics: Optional[Metrics] = None,
    ) -> "RaffleStateMachine":
        cfg.validate()
        return cls(
            cfg.params(),
            cfg.request_config(),
            coordinator=coordinator,
            ledger=ledger,
            address=cfg.raffle_address,
            oracle_address=cfg.oracle_address,
            clock=clock,
            events=events,
            metrics=metrics,
        )

    # ---- Entry ----

    def enter(self, sender: str, value: int) -> None:
        """
        Join the current round by paying `value` (>= entrance fee) from `sender`.

        Raises InsufficientPayment, RegistryClosed or InsufficientFunds; none of
        them change the round or move funds.
        """
        player = to_address(sender)
        try:
            self._registry.check_entry(value)
            self._ledger.transfer(player, self.address, value)
        except RaffleError as e:
            self._metrics.record_entry(_ENTRY_OUTCOMES.get(type(e), "invalid"))
            logger.debug("entry rejected player=%s: %s", player, e)
            raise
        self._registry.enter(player, value)
        self._metrics.record_entry("accepted")
        self._refresh_gauges()

    # ---- Upkeep (check-then-act) ----

    def upkeep_diagnostics(self) -> Tuple[int, int, RaffleState]:
        return self.balance, self._registry.count(), self._round.state

    def _upkeep_needed(self) -> bool:
        r = self._round
        return (
            r.is_open
            and r.interval_elapsed(self._clock())
            and self._registry.count() > 0
            and self.balance > 0
        )

    def check_upkeep(self, extra_data: bytes = b"") -> Tuple[bool, bytes]:
        """Pure predicate polled by the automation agent. Never mutates."""
        return self._upkeep_needed(), b""

    def perform_upkeep(self, perform_data: bytes = b"") -> RequestId:
        """
        Start a draw: re-check the upkeep predicate, request one random word and
        move to CALCULATING.

        Raises UpkeepNotNeeded (with balance, participant count and state) if the
        predicate does not hold at call time. A coordinator failure propagates
        with the round still OPEN.
        """
        if not self._upkeep_needed():
            balance, count, state = self.upkeep_diagnostics()
            logger.debug("upkeep not needed balance=%d players=%d state=%s", balance, count, state.value)
            raise UpkeepNotNeeded(balance=balance, participant_count=count, state=state)

        request_id = self._client.request_randomness(self._request_config)
        self._round.pending_request_id = request_id
        self._round.state = RaffleState.CALCULATING
        self._events.emit(EV_DRAW_REQUESTED, {"request_id": int(request_id)})
        self._metrics.record_draw_requested()
        logger.info("draw requested id=%s players=%d pool=%d", request_id, self.player_count, self.balance)
        return request_id

    def try_draw(self) -> RequestId:
        return self.perform_upkeep(b"")

    # ---- Oracle callback ----

    def fulfill_random_words(self, caller: str, request_id: int, values: Sequence[int]) -> WinnerResolution:
        """
        Coordinator callback: resolve the winner, pay the whole pool and reopen.

        Raises:
            Unauthorized: `caller` is not the designated coordinator.
            UnknownRequest: `request_id` is not the pending request.
            BadFulfillment: no usable word was delivered.
            TransferFailed: the payout was rejected; the round is left as it was.
        """
        if str(caller).lower() != self.oracle_address:
            self._metrics.record_fulfillment("unauthorized")
            logger.warning("rejected fulfillment from %s (expected %s)", caller, self.oracle_address)
            raise Unauthorized(caller=str(caller), expected=self.oracle_address)

        pending = self._client.pending
        try:
            word = self._client.on_fulfilled(request_id, values)
        except OracleError as e:
            self._metrics.record_fulfillment(_FULFILL_OUTCOMES.get(type(e), "invalid"))
            logger.warning("rejected fulfillment id=%s: %s", request_id, e)
            raise

        # The pending slot is consumed above; any failure below must put it back.
        try:
            resolution = resolve_winner(word, self._registry.identities())
            prize = self.balance
            self._payout.transfer(resolution.winner, prize)
        except TransferFailed as e:
            self._client.restore(pending)
            self._metrics.record_payout("failed")
            self._metrics.record_fulfillment("payout_failed")
            logger.error(
                "round stuck in CALCULATING: payout of %d to %s failed (request %s)",
                e.amount,
                e.recipient,
                request_id,
            )
            raise
        except BaseException:
            self._client.restore(pending)
            self._metrics.record_payout("failed")
            self._metrics.record_fulfillment("invalid")
            logger.exception("fulfillment id=%s aborted; request left pending", request_id)
            raise

        self._round.reset(self._clock(), resolution.winner)
        self._events.emit(EV_WINNER_PICKED, {"winner": resolution.winner})
        self._metrics.record_payout("paid")
        self._metrics.record_fulfillment("resolved")
        self._refresh_gauges()
        logger.info(
            "winner picked %s index=%d prize=%d",
            resolution.winner,
            resolution.winner_index,
            prize,
        )
        return resolution

    # ---- Read-only accessors ----

    @property
    def entrance_fee(self) -> int:
        return self._round.params.entrance_fee

    @property
    def interval(self) -> int:
        return self._round.params.interval

    @property
    def state(self) -> RaffleState:
        return self._round.state

    @property
    def player_count(self) -> int:
        return self._registry.count()

    def player(self, index: int) -> Address:
        return self._registry.get(index)

    def players(self) -> List[Address]:
        return self._registry.identities()

    @property
    def last_draw_timestamp(self) -> int:
        return self._round.last_draw_timestamp

    @property
    def recent_winner(self) -> Optional[Address]:
        return self._round.recent_winner

    @property
    def pending_request_id(self) -> Optional[RequestId]:
        return self._round.pending_request_id

    @property
    def balance(self) -> int:
        return self._ledger.balance(self.address)

    @property
    def request_confirmations(self) -> int:
        return REQUEST_CONFIRMATIONS

    @property
    def num_words(self) -> int:
        return NUM_WORDS

    @property
    def events(self) -> EventLog:
        return self._events

    def snapshot(self) -> Dict[str, Any]:
        """Plain-dict view of the round for RPC responses and CLI output."""
        return {
            "address": self.address,
            "state": self.state.value,
            "entrance_fee": self.entrance_fee,
            "interval": self.interval,
            "last_draw_timestamp": self.last_draw_timestamp,
            "players": self.players(),
            "balance": self.balance,
            "pending_request_id": self.pending_request_id,
            "recent_winner": self.recent_winner,
        }

    def _refresh_gauges(self) -> None:
        self._metrics.set_pool(self.balance, self._registry.count())


__all__ = ["RaffleStateMachine"]
