"""
Randomness oracle integration.

The coordinator itself is an external, trusted service. This package holds
the interface the raffle expects from it, the client that issues requests and
correlates fulfillments, and an in-process coordinator for local runs.
"""

from __future__ import annotations

from typing import Protocol, Sequence

from ..types.core import RandomWordsRequest, RequestId


class Coordinator(Protocol):
    """Outbound side of the oracle: accept a request, return its id."""

    def request_random_words(self, request: RandomWordsRequest) -> RequestId: ...


class RandomnessConsumer(Protocol):
    """Inbound side: the callback the coordinator invokes later."""

    def fulfill_random_words(self, caller: str, request_id: int, values: Sequence[int]) -> object: ...


__all__ = ["Coordinator", "RandomnessConsumer"]
