import threading

import pytest

from raffle.automation import Keeper
from raffle.errors import UpkeepNotNeeded
from raffle.types.state import RaffleState

from .conftest import FEE, INTERVAL


class _Racy:
    """Reports upkeep needed but loses the race on perform."""

    def check_upkeep(self, extra_data=b""):
        return True, b""

    def perform_upkeep(self, perform_data=b""):
        raise UpkeepNotNeeded(balance=0, participant_count=0, state=RaffleState.OPEN)


def test_keeper_only_acts_when_needed(raffle, players, clock):
    keeper = Keeper(raffle)
    assert keeper.poll_once() is None
    raffle.enter(players[0], FEE)
    assert keeper.poll_once() is None
    clock.advance(INTERVAL)
    rid = keeper.poll_once()
    assert rid == raffle.pending_request_id
    assert keeper.poll_once() is None
    assert (keeper.polls, keeper.performed) == (4, 1)


def test_keeper_tolerates_lost_race():
    keeper = Keeper(_Racy())
    assert keeper.poll_once() is None
    assert keeper.performed == 0


def test_keeper_run_stops_on_event(raffle, players, clock):
    raffle.enter(players[0], FEE)
    clock.advance(INTERVAL)
    stop = threading.Event()
    keeper = Keeper(raffle)
    t = threading.Thread(target=keeper.run, args=(stop, 0.01))
    t.start()
    try:
        for _ in range(500):
            if raffle.state is RaffleState.CALCULATING:
                break
            stop.wait(0.01)
    finally:
        stop.set()
        t.join(timeout=5)
    assert not t.is_alive()
    assert keeper.performed == 1


def test_keeper_run_rejects_bad_period(raffle):
    with pytest.raises(ValueError):
        Keeper(raffle).run(threading.Event(), period_s=0)
