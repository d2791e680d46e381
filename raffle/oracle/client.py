"""
Randomness client: issue requests to the coordinator and correlate the
asynchronous fulfillments with them.

Request and response are two independent operations joined by the request id:

    rid = client.request_randomness(cfg)      # returns immediately
    ...                                       # any number of calls later, or never
    word = client.on_fulfilled(rid, [word])   # only honoured for the pending id

The client keeps exactly one pending slot. It does not refuse a second request
while one is outstanding; the state machine's CALCULATING guard does.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..errors import BadFulfillment, UnknownRequest
from ..types.core import OracleRequestConfig, RandomnessRequest, RandomWordsRequest, RequestId
from ..utils.time import Clock, SystemClock
from . import Coordinator

logger = logging.getLogger(__name__)


class RandomnessClient:
    __slots__ = ("_coordinator", "_clock", "_pending")

    def __init__(self, coordinator: Coordinator, clock: Optional[Clock] = None) -> None:
        self._coordinator = coordinator
        self._clock = clock or SystemClock()
        self._pending: Optional[RandomnessRequest] = None

    @property
    def pending(self) -> Optional[RandomnessRequest]:
        return self._pending

    @property
    def pending_id(self) -> Optional[RequestId]:
        return self._pending.request_id if self._pending is not None else None

    def request_randomness(self, config: OracleRequestConfig) -> RequestId:
        """Send a one-word request and start tracking it."""
        payload = RandomWordsRequest.from_config(config)
        request_id = RequestId(int(self._coordinator.request_random_words(payload)))
        if self._pending is not None:
            logger.warning(
                "replacing pending randomness request %s with %s",
                self._pending.request_id,
                request_id,
            )
        self._pending = RandomnessRequest(request_id=request_id, issued_at=int(self._clock()))
        logger.debug("randomness requested id=%s payload=%s", request_id, payload.to_dict())
        return request_id

    def on_fulfilled(self, request_id: int, values: Sequence[int]) -> int:
        """
        Accept the coordinator's answer for the pending request.

        Returns the first delivered word and clears the pending slot.

        Raises:
            UnknownRequest: nothing is pending or `request_id` is not the pending id.
            BadFulfillment: the matching answer carries no usable word.
        """
        pending = self._pending
        if pending is None or pending.request_id != request_id:
            raise UnknownRequest(
                request_id=request_id,
                pending_id=pending.request_id if pending is not None else None,
            )
        if not values:
            raise BadFulfillment(request_id=request_id, reason="no-words")
        word = values[0]
        if not isinstance(word, int) or isinstance(word, bool) or word < 0:
            raise BadFulfillment(request_id=request_id, reason="bad-word")
        self._pending = None
        return int(word)

    def restore(self, request: RandomnessRequest) -> None:
        """Reinstate a request consumed by a fulfillment whose settlement failed."""
        if self._pending is not None and self._pending != request:
            raise RuntimeError("another randomness request is already pending")
        self._pending = request


__all__ = ["RandomnessClient"]
