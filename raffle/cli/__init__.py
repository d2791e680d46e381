"""Command-line tools for the raffle (local simulation and config inspection)."""
