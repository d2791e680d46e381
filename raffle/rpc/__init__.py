"""JSON-RPC surface for a raffle instance (see `raffle.rpc.methods`)."""

from __future__ import annotations

from .methods import RPC_METHODS, dispatch

__all__ = ["RPC_METHODS", "dispatch"]
