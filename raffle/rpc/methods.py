"""
raffle.rpc.methods
------------------

JSON-RPC method shims for a raffle instance.

These are intentionally thin: they validate/normalize inputs with pydantic
models, then delegate to a `RaffleStateMachine` that owns all state and logic.

Exposed methods:

- raffle.getParams()
- raffle.getState()
- raffle.getPlayer(index)
- raffle.enter(sender, value)
- raffle.checkUpkeep(extraData?)
- raffle.performUpkeep(performData?)
- raffle.fulfillRandomWords(caller, requestId, values)

All hex-typed inputs/outputs are 0x-prefixed. `dispatch()` wraps a call in a
JSON-RPC 2.0 envelope and maps raffle errors to stable server codes.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..errors import (
    EntryError,
    IndexOutOfRange,
    InsufficientFunds,
    LedgerError,
    OracleError,
    PayoutError,
    RaffleError,
    UpkeepError,
)
from ..machine import RaffleStateMachine
from ..types.core import to_address


class JsonRpcCode(IntEnum):
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602


class RaffleCode(IntEnum):
    SERVER_ERROR = -32000
    ENTRY_REJECTED = -32010
    PLAYER_NOT_FOUND = -32011
    INSUFFICIENT_FUNDS = -32013
    LEDGER_REJECTED = -32014
    UPKEEP_NOT_NEEDED = -32020
    ORACLE_REJECTED = -32030
    PAYOUT_FAILED = -32040


# ---------- helpers ----------

def _strip_0x(s: str) -> str:
    return s[2:] if s.startswith(("0x", "0X")) else s


def _hex_to_bytes(s: str) -> bytes:
    return bytes.fromhex(_strip_0x(s))


def _check_address(v: str) -> str:
    return to_address(v)


# ---------- request models ----------

class EnterParams(BaseModel):
    model_config = ConfigDict(frozen=True)
    sender: str = Field(..., description="0x-hex entrant address.")
    value: int = Field(..., ge=0, description="Attached amount (smallest unit).")

    @field_validator("sender")
    @classmethod
    def _sender_ok(cls, v: str) -> str:
        return _check_address(v)


class PlayerQuery(BaseModel):
    model_config = ConfigDict(frozen=True)
    index: int = Field(..., ge=0)


class CheckUpkeepParams(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)
    extra_data: str = Field(default="0x", alias="extraData")

    @field_validator("extra_data")
    @classmethod
    def _hex_ok(cls, v: str) -> str:
        _hex_to_bytes(v)
        return v


class PerformUpkeepParams(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)
    perform_data: str = Field(default="0x", alias="performData")

    @field_validator("perform_data")
    @classmethod
    def _hex_ok(cls, v: str) -> str:
        _hex_to_bytes(v)
        return v


class FulfillParams(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)
    caller: str = Field(..., description="Address delivering the words.")
    request_id: int = Field(..., ge=0, alias="requestId")
    values: List[int] = Field(default_factory=list)

    @field_validator("values")
    @classmethod
    def _words_ok(cls, v: List[int]) -> List[int]:
        if any(w < 0 for w in v):
            raise ValueError("random words must be non-negative")
        return v


# ---------- method handlers ----------

def raffle_get_params(raffle: RaffleStateMachine, _args: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    return {
        "entranceFee": raffle.entrance_fee,
        "interval": raffle.interval,
        "requestConfirmations": raffle.request_confirmations,
        "numWords": raffle.num_words,
        "oracle": raffle.oracle_address,
        "address": raffle.address,
    }


def raffle_get_state(raffle: RaffleStateMachine, _args: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    return raffle.snapshot()


def raffle_get_player(raffle: RaffleStateMachine, args: Mapping[str, Any]) -> Dict[str, Any]:
    q = PlayerQuery(**args)
    return {"index": q.index, "player": raffle.player(q.index)}


def raffle_enter(raffle: RaffleStateMachine, args: Mapping[str, Any]) -> Dict[str, Any]:
    p = EnterParams(**args)
    raffle.enter(p.sender, p.value)
    return {"player": p.sender, "playerCount": raffle.player_count}


def raffle_check_upkeep(raffle: RaffleStateMachine, args: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    p = CheckUpkeepParams(**(args or {}))
    needed, perform_data = raffle.check_upkeep(_hex_to_bytes(p.extra_data))
    balance, count, state = raffle.upkeep_diagnostics()
    return {
        "upkeepNeeded": needed,
        "performData": "0x" + perform_data.hex(),
        "balance": balance,
        "playerCount": count,
        "state": state.value,
    }


def raffle_perform_upkeep(raffle: RaffleStateMachine, args: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    p = PerformUpkeepParams(**(args or {}))
    rid = raffle.perform_upkeep(_hex_to_bytes(p.perform_data))
    return {"requestId": int(rid), "state": raffle.state.value}


def raffle_fulfill_random_words(raffle: RaffleStateMachine, args: Mapping[str, Any]) -> Dict[str, Any]:
    p = FulfillParams(**args)
    res = raffle.fulfill_random_words(p.caller, p.request_id, p.values)
    return {
        "winner": res.winner,
        "winnerIndex": res.winner_index,
        "state": raffle.state.value,
    }


# Public registry mapping JSON-RPC method names to callables.
# Each callable has signature: (raffle, args_dict) -> result
RPC_METHODS: Dict[str, Callable[..., Any]] = {
    "raffle.getParams": raffle_get_params,
    "raffle.getState": raffle_get_state,
    "raffle.getPlayer": raffle_get_player,
    "raffle.enter": raffle_enter,
    "raffle.checkUpkeep": raffle_check_upkeep,
    "raffle.performUpkeep": raffle_perform_upkeep,
    "raffle.fulfillRandomWords": raffle_fulfill_random_words,
}


# ---------- envelopes ----------

def error_code(exc: RaffleError) -> int:
    if isinstance(exc, InsufficientFunds):
        return RaffleCode.INSUFFICIENT_FUNDS
    if isinstance(exc, LedgerError):
        return RaffleCode.LEDGER_REJECTED
    if isinstance(exc, IndexOutOfRange):
        return RaffleCode.PLAYER_NOT_FOUND
    if isinstance(exc, EntryError):
        return RaffleCode.ENTRY_REJECTED
    if isinstance(exc, UpkeepError):
        return RaffleCode.UPKEEP_NOT_NEEDED
    if isinstance(exc, OracleError):
        return RaffleCode.ORACLE_REJECTED
    if isinstance(exc, PayoutError):
        return RaffleCode.PAYOUT_FAILED
    return RaffleCode.SERVER_ERROR


def dispatch(
    raffle: RaffleStateMachine,
    method: str,
    params: Optional[Mapping[str, Any]] = None,
    req_id: Optional[Union[int, str]] = None,
) -> Dict[str, Any]:
    """Run one JSON-RPC call against `raffle` and return the response envelope."""
    envelope: Dict[str, Any] = {"jsonrpc": "2.0", "id": req_id}
    handler = RPC_METHODS.get(method)
    if handler is None:
        envelope["error"] = {"code": int(JsonRpcCode.METHOD_NOT_FOUND), "message": f"method not found: {method}"}
        return envelope
    if params is not None and not isinstance(params, Mapping):
        envelope["error"] = {
            "code": int(JsonRpcCode.INVALID_PARAMS),
            "message": "params must be an object of named arguments",
        }
        return envelope
    try:
        envelope["result"] = handler(raffle, dict(params or {}))
    except ValidationError as e:
        envelope["error"] = {
            "code": int(JsonRpcCode.INVALID_PARAMS),
            "message": "invalid params",
            "data": {"errors": e.errors(include_url=False, include_context=False)},
        }
    except RaffleError as e:
        body = e.to_dict()
        envelope["error"] = {"code": int(error_code(e)), "message": body["message"], "data": body}
    return envelope


__all__ = [
    "EnterParams",
    "PlayerQuery",
    "CheckUpkeepParams",
    "PerformUpkeepParams",
    "FulfillParams",
    "RPC_METHODS",
    "RaffleCode",
    "JsonRpcCode",
    "dispatch",
    "error_code",
]
