"""
In-process randomness coordinator.

Stands in for the external oracle during local runs, simulations and tests.
It accepts requests synchronously and answers only when told to, so the
asynchronous gap between request and fulfillment stays observable:

    coord = LocalCoordinator()
    rid = raffle.perform_upkeep()           # request recorded, nothing delivered
    coord.fulfill(raffle, rid)              # deterministic words derived from the seed
    coord.fulfill(raffle, rid, [0])         # or explicit words

Words are derived from a SHA3-256 stream over (seed, request id, counter).
Not a randomness source; do not use outside of local tooling.
"""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from ..errors import UnknownRequest
from ..types.core import RandomWordsRequest, RequestId
from . import RandomnessConsumer

logger = logging.getLogger(__name__)

DEFAULT_COORDINATOR_ADDRESS = "0x" + hashlib.sha3_256(b"local-coordinator").hexdigest()[:40]


def derive_words(seed: bytes, request_id: int, n: int) -> List[int]:
    """`n` deterministic 256-bit words for `request_id`."""
    out: List[int] = []
    ctr = 0
    while len(out) < n:
        m = hashlib.sha3_256()
        m.update(b"raffle-local-vrf-v1|")
        m.update(seed)
        m.update(int(request_id).to_bytes(32, "big"))
        m.update(ctr.to_bytes(8, "big"))
        out.append(int.from_bytes(m.digest(), "big"))
        ctr += 1
    return out


@dataclass
class LocalCoordinator:
    address: str = DEFAULT_COORDINATOR_ADDRESS
    seed: bytes = b"\x00" * 32
    requests: Dict[int, RandomWordsRequest] = field(default_factory=dict)
    fulfilled: Dict[int, List[int]] = field(default_factory=dict)
    _next_id: int = 1

    def request_random_words(self, request: RandomWordsRequest) -> RequestId:
        rid = self._next_id
        self._next_id += 1
        self.requests[rid] = request
        logger.debug("coordinator accepted request id=%d", rid)
        return RequestId(rid)

    @property
    def last_request_id(self) -> Optional[int]:
        return self._next_id - 1 if self.requests else None

    def fulfill(
        self,
        consumer: RandomnessConsumer,
        request_id: int,
        values: Optional[Sequence[int]] = None,
    ) -> object:
        """Deliver words for `request_id` to `consumer` as this coordinator."""
        request = self.requests.get(request_id)
        if request is None:
            raise UnknownRequest(request_id=request_id, pending_id=self.last_request_id)
        words = list(values) if values is not None else derive_words(self.seed, request_id, request.num_words)
        result = consumer.fulfill_random_words(self.address, request_id, words)
        self.fulfilled[request_id] = words
        return result


__all__ = ["LocalCoordinator", "DEFAULT_COORDINATOR_ADDRESS", "derive_words"]
