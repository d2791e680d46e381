"""
Oracle-drawn raffle.

A time-windowed, participant-funded raffle. Entrants pay a fixed entrance fee
into a shared pool; once the interval has elapsed an automation agent triggers
a draw, the winner is picked from a random word delivered asynchronously by a
randomness coordinator, and the whole pool is paid out before the next round
opens.

Only light, stable exports are surfaced here to avoid import cycles.
"""

from __future__ import annotations

from .version import __version__

__all__ = ["__version__"]
