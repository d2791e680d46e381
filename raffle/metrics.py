"""
Prometheus metrics for the raffle.

Instruments:
  • entries_total{outcome}       — entry attempts per outcome
  • draws_requested_total        — randomness requests issued
  • fulfillments_total{outcome}  — oracle callbacks per outcome
  • payouts_total{outcome}       — prize transfers per outcome
  • prize_pool                   — current pool balance (gauge)
  • players                      — entrants in the current round (gauge)

Label cardinality is kept low: only a small, finite `outcome` vocabulary.

Usage
-----
    from raffle.metrics import METRICS

    METRICS.record_entry("accepted")
    METRICS.set_pool(balance, players)

Construct your own `Metrics` with a fresh `CollectorRegistry` when several
raffles must report separately (or in tests).
"""

from __future__ import annotations

from prometheus_client import REGISTRY, Counter, Gauge


# --------- Vocabularies (kept small for bounded cardinality) ---------

_ENTRY_OUTCOMES = (
    "accepted",
    "insufficient_payment",
    "closed",
    "insufficient_funds",
    "invalid",
)

_FULFILL_OUTCOMES = (
    "resolved",
    "unauthorized",
    "unknown_request",
    "bad_fulfillment",
    "payout_failed",
    "invalid",
)

_PAYOUT_OUTCOMES = (
    "paid",
    "failed",
)


class Metrics:
    """
    Container for all raffle Prometheus instruments.

    Args:
        namespace: Prometheus metric namespace (prefix).
        subsystem: Prometheus metric subsystem.
        registry:  Prometheus registry to register the metrics with.
    """

    def __init__(
        self,
        *,
        namespace: str = "raffle",
        subsystem: str = "core",
        registry=REGISTRY,
    ) -> None:
        self.entries_total = Counter(
            "entries_total",
            "Entry attempts processed, labeled by outcome.",
            labelnames=("outcome",),
            namespace=namespace,
            subsystem=subsystem,
            registry=registry,
        )
        self.draws_requested_total = Counter(
            "draws_requested_total",
            "Randomness requests issued for a draw.",
            namespace=namespace,
            subsystem=subsystem,
            registry=registry,
        )
        self.fulfillments_total = Counter(
            "fulfillments_total",
            "Oracle fulfillments processed, labeled by outcome.",
            labelnames=("outcome",),
            namespace=namespace,
            subsystem=subsystem,
            registry=registry,
        )
        self.payouts_total = Counter(
            "payouts_total",
            "Prize transfers attempted, labeled by outcome.",
            labelnames=("outcome",),
            namespace=namespace,
            subsystem=subsystem,
            registry=registry,
        )
        self.prize_pool = Gauge(
            "prize_pool",
            "Current prize pool balance (smallest currency unit).",
            namespace=namespace,
            subsystem=subsystem,
            registry=registry,
        )
        self.players = Gauge(
            "players",
            "Entrants in the current round.",
            namespace=namespace,
            subsystem=subsystem,
            registry=registry,
        )

    # ----- Recording helpers -------------------------------------------------

    def record_entry(self, outcome: str) -> None:
        if outcome not in _ENTRY_OUTCOMES:
            outcome = "invalid"
        self.entries_total.labels(outcome=outcome).inc()

    def record_draw_requested(self) -> None:
        self.draws_requested_total.inc()

    def record_fulfillment(self, outcome: str) -> None:
        if outcome not in _FULFILL_OUTCOMES:
            outcome = "invalid"
        self.fulfillments_total.labels(outcome=outcome).inc()

    def record_payout(self, outcome: str) -> None:
        if outcome not in _PAYOUT_OUTCOMES:
            outcome = "failed"
        self.payouts_total.labels(outcome=outcome).inc()

    def set_pool(self, balance: int, players: int) -> None:
        self.prize_pool.set(float(balance))
        self.players.set(float(players))


# Singleton used by most components
METRICS = Metrics()

__all__ = [
    "Metrics",
    "METRICS",
    "_ENTRY_OUTCOMES",
    "_FULFILL_OUTCOMES",
    "_PAYOUT_OUTCOMES",
]
