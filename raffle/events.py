"""
raffle.events — ordered, validated event log for external listeners.

The state machine emits three notifications:

- b"RaffleEntered"         — {"player": address}
- b"RequestedRaffleWinner" — {"request_id": int}
- b"WinnerPicked"          — {"winner": address}

Events are appended to an in-memory log (indexers and tests read it back) and
pushed synchronously to subscribers. A subscriber that raises is logged and
skipped; it never affects the emitting call.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping

logger = logging.getLogger(__name__)

MAX_EVENT_NAME_BYTES = 64
MAX_KEY_LEN = 64
MAX_INT_BITS = 256

# Keys must be identifier-like: letters/underscore, then letters/digits/underscore.
_KEY_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


@dataclass(frozen=True)
class Event:
    """One emitted notification."""

    seq: int
    name: bytes
    args: Dict[str, Any]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "seq": self.seq,
            "name": self.name.decode("ascii", "replace"),
            "args": {k: ("0x" + v.hex() if isinstance(v, bytes) else v) for k, v in self.args.items()},
        }


Subscriber = Callable[[Event], None]


class EventLog:
    def __init__(self) -> None:
        self._events: List[Event] = []
        self._subscribers: List[Subscriber] = []

    # --- validation ---------------------------------------------------------

    @staticmethod
    def _check_name(name: Any) -> bytes:
        if not isinstance(name, (bytes, bytearray)):
            raise TypeError("event name must be bytes")
        b = bytes(name)
        if not b or len(b) > MAX_EVENT_NAME_BYTES:
            raise ValueError("event name must be 1..64 bytes")
        return b

    @staticmethod
    def _check_key(key: Any) -> str:
        if not isinstance(key, str) or not key or len(key) > MAX_KEY_LEN:
            raise ValueError(f"bad event key: {key!r}")
        if not _KEY_RE.match(key):
            raise ValueError(f"event key has invalid characters: {key!r}")
        return key

    @staticmethod
    def _check_value(value: Any) -> Any:
        if isinstance(value, (bytes, bytearray)):
            return bytes(value)
        if isinstance(value, (bool, str)):
            # bool is a subclass of int, so check it before int.
            return value
        if isinstance(value, int):
            if value.bit_length() > MAX_INT_BITS:
                raise ValueError("event int arg out of range")
            return int(value)
        raise TypeError(f"unsupported event arg type: {type(value).__name__}")

    # --- sink operations ----------------------------------------------------

    def emit(self, name: bytes, args: Mapping[str, Any]) -> Event:
        bname = self._check_name(name)
        checked = {self._check_key(k): self._check_value(v) for k, v in args.items()}
        ev = Event(seq=len(self._events), name=bname, args=checked)
        self._events.append(ev)
        for cb in list(self._subscribers):
            try:
                cb(ev)
            except Exception:
                logger.warning("event subscriber failed (event=%s)", bname, exc_info=True)
        return ev

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register `callback`; returns a function that unregisters it."""
        self._subscribers.append(callback)

        def _unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return _unsubscribe

    def named(self, name: bytes) -> List[Event]:
        return [e for e in self._events if e.name == name]

    @property
    def events(self) -> List[Event]:
        return list(self._events)

    def __len__(self) -> int:
        return len(self._events)


__all__ = ["Event", "EventLog", "Subscriber"]
