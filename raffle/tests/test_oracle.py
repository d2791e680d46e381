import pytest

from raffle.errors import BadFulfillment, UnknownRequest
from raffle.oracle.client import RandomnessClient
from raffle.oracle.local import DEFAULT_COORDINATOR_ADDRESS, LocalCoordinator, derive_words
from raffle.types.core import OracleRequestConfig
from raffle.utils.time import ManualClock

CFG = OracleRequestConfig(key_hash=b"\x11" * 32, subscription_id=7, callback_gas_limit=100_000)


class _Consumer:
    def __init__(self):
        self.calls = []

    def fulfill_random_words(self, caller, request_id, values):
        self.calls.append((caller, request_id, list(values)))
        return "ok"


def mk_client():
    coord = LocalCoordinator()
    clock = ManualClock(start=500)
    return RandomnessClient(coord, clock), coord, clock


def test_request_builds_full_payload():
    client, coord, _ = mk_client()
    rid = client.request_randomness(CFG)
    req = coord.requests[rid]
    assert req.key_hash == b"\x11" * 32
    assert req.subscription_id == 7
    assert req.callback_gas_limit == 100_000
    assert req.request_confirmations == 3
    assert req.num_words == 1
    assert req.native_payment is False
    assert req.to_dict()["extraArgs"] == {"nativePayment": False}


def test_request_tracks_single_pending():
    client, _, clock = mk_client()
    assert client.pending is None
    rid = client.request_randomness(CFG)
    assert client.pending_id == rid
    assert client.pending.issued_at == clock()


def test_fulfillment_clears_pending_and_returns_first_word():
    client, _, _ = mk_client()
    rid = client.request_randomness(CFG)
    assert client.on_fulfilled(rid, [42, 7]) == 42
    assert client.pending is None


def test_mismatched_id_rejected():
    client, _, _ = mk_client()
    rid = client.request_randomness(CFG)
    with pytest.raises(UnknownRequest) as ei:
        client.on_fulfilled(rid + 1, [1])
    assert ei.value.pending_id == rid
    assert client.pending_id == rid


def test_nothing_pending_rejected():
    client, _, _ = mk_client()
    with pytest.raises(UnknownRequest) as ei:
        client.on_fulfilled(1, [1])
    assert ei.value.pending_id is None


@pytest.mark.parametrize("values,reason", [([], "no-words"), ([-5], "bad-word"), ([True], "bad-word")])
def test_unusable_words_rejected(values, reason):
    client, _, _ = mk_client()
    rid = client.request_randomness(CFG)
    with pytest.raises(BadFulfillment) as ei:
        client.on_fulfilled(rid, values)
    assert ei.value.reason == reason
    assert client.pending_id == rid


def test_restore_reinstates_request():
    client, _, _ = mk_client()
    rid = client.request_randomness(CFG)
    pending = client.pending
    client.on_fulfilled(rid, [1])
    client.restore(pending)
    assert client.pending_id == rid


def test_restore_refuses_to_clobber_other_request():
    client, _, _ = mk_client()
    client.request_randomness(CFG)
    old = client.pending
    client.on_fulfilled(old.request_id, [1])
    client.request_randomness(CFG)
    with pytest.raises(RuntimeError):
        client.restore(old)


def test_local_ids_are_sequential():
    coord = LocalCoordinator()
    assert coord.last_request_id is None
    client = RandomnessClient(coord)
    assert [int(client.request_randomness(CFG)) for _ in range(3)] == [1, 2, 3]
    assert coord.last_request_id == 3


def test_local_fulfill_delivers_as_coordinator():
    coord = LocalCoordinator()
    client = RandomnessClient(coord)
    rid = client.request_randomness(CFG)
    consumer = _Consumer()
    assert coord.fulfill(consumer, rid, [9]) == "ok"
    assert consumer.calls == [(DEFAULT_COORDINATOR_ADDRESS, rid, [9])]
    assert coord.fulfilled[rid] == [9]


def test_local_fulfill_derives_words():
    coord = LocalCoordinator(seed=b"\x01" * 32)
    client = RandomnessClient(coord)
    rid = client.request_randomness(CFG)
    consumer = _Consumer()
    coord.fulfill(consumer, rid)
    assert consumer.calls[0][2] == derive_words(b"\x01" * 32, rid, 1)


def test_local_fulfill_unknown_request():
    coord = LocalCoordinator()
    with pytest.raises(UnknownRequest):
        coord.fulfill(_Consumer(), 1)


def test_derive_words_deterministic_and_distinct():
    a = derive_words(b"\x00" * 32, 1, 3)
    assert a == derive_words(b"\x00" * 32, 1, 3)
    assert len(set(a)) == 3
    assert a != derive_words(b"\x00" * 32, 2, 3)
    assert all(0 <= w < 2**256 for w in a)
