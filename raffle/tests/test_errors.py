import contextlib

import pytest

from raffle.errors import (
    InsufficientFunds,
    InsufficientPayment,
    LedgerError,
    RegistryClosed,
    TransferFailed,
    TransferRejected,
    UpkeepNotNeeded,
)
from raffle.types.state import RaffleState

from .conftest import FEE


@contextlib.contextmanager
def _passthrough():
    yield


def test_to_dict_carries_only_declared_fields():
    body = InsufficientPayment(paid=1, required=FEE).to_dict()
    assert body["code"] == "insufficient_payment"
    assert body["data"] == {"paid": 1, "required": FEE}


def test_to_dict_unwraps_enum_values():
    body = UpkeepNotNeeded(balance=0, participant_count=0, state=RaffleState.OPEN).to_dict()
    assert body["data"] == {"balance": 0, "participant_count": 0, "state": "open"}


def test_to_dict_for_plain_ledger_error():
    body = LedgerError("amount must be int").to_dict()
    assert body == {"code": "ledger_error", "message": "amount must be int", "data": {}}


def test_ledger_errors_expose_reason():
    assert InsufficientFunds(address="0x", balance=0, amount=1).reason == "insufficient balance"
    assert TransferRejected(address="0x").reason == "recipient refuses funds"
    assert TransferFailed(recipient="0x", amount=1).to_dict()["data"]["reason"] is None


def test_errors_propagate_through_context_managers():
    with pytest.raises(RegistryClosed) as ei:
        with _passthrough():
            raise RegistryClosed(state=RaffleState.CALCULATING)
    assert ei.value.state is RaffleState.CALCULATING


def test_machine_error_propagates_through_context_manager(raffle, players):
    with pytest.raises(InsufficientPayment):
        with _passthrough():
            raffle.enter(players[0], 1)


def test_errors_can_be_chained():
    with pytest.raises(TransferFailed) as ei:
        try:
            raise TransferRejected(address="0x")
        except LedgerError as e:
            raise TransferFailed(recipient="0x", amount=1, reason=e.reason) from e
    assert isinstance(ei.value.__cause__, TransferRejected)
