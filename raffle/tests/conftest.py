from __future__ import annotations

import hashlib
from typing import Callable, List

import pytest
from prometheus_client import CollectorRegistry

from raffle.config import RaffleConfig
from raffle.events import EventLog
from raffle.ledger import Ledger
from raffle.machine import RaffleStateMachine
from raffle.metrics import Metrics
from raffle.oracle.local import LocalCoordinator
from raffle.utils.time import ManualClock

FEE = 10**16
INTERVAL = 30
START_BALANCE = 10**18


def det_address(label: str) -> str:
    """Deterministic 20-byte hex address from a label."""
    return "0x" + hashlib.sha3_256(label.encode("utf-8")).hexdigest()[:40]


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock(start=1_700_000_000)


@pytest.fixture
def players() -> List[str]:
    return [det_address(f"player-{i}") for i in range(8)]


@pytest.fixture
def ledger(players: List[str]) -> Ledger:
    return Ledger({p: START_BALANCE for p in players})


@pytest.fixture
def coordinator() -> LocalCoordinator:
    return LocalCoordinator()


@pytest.fixture
def registry() -> CollectorRegistry:
    return CollectorRegistry()


@pytest.fixture
def metrics(registry: CollectorRegistry) -> Metrics:
    return Metrics(registry=registry)


@pytest.fixture
def config() -> RaffleConfig:
    return RaffleConfig(entrance_fee=FEE, interval_s=INTERVAL)


@pytest.fixture
def make_raffle(
    config: RaffleConfig,
    coordinator: LocalCoordinator,
    ledger: Ledger,
    clock: ManualClock,
    metrics: Metrics,
) -> Callable[..., RaffleStateMachine]:
    def _make(**overrides) -> RaffleStateMachine:
        cfg = RaffleConfig(**{**config.to_dict(), **overrides})
        return RaffleStateMachine.from_config(
            cfg,
            coordinator=coordinator,
            ledger=ledger,
            clock=clock,
            events=EventLog(),
            metrics=metrics,
        )

    return _make


@pytest.fixture
def raffle(make_raffle) -> RaffleStateMachine:
    return make_raffle()


@pytest.fixture
def calculating(raffle: RaffleStateMachine, players: List[str], clock: ManualClock) -> RaffleStateMachine:
    """A raffle with players A, B, C and a pending draw."""
    for p in players[:3]:
        raffle.enter(p, FEE)
    clock.advance(INTERVAL + 1)
    raffle.perform_upkeep()
    return raffle
