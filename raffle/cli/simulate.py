"""
raffle.cli.simulate
-------------------

Run a complete raffle round in-process and print what happened.

Examples:
  # Three players, default fee/interval, words derived from the local seed:
  raffle-sim run --players 3

  # Force the delivered word (index = word mod players):
  raffle-sim run --players 3 --random-value 4

  # Show the stuck-round path when the winner refuses the prize:
  raffle-sim run --players 2 --random-value 1 --refuse-winner

  # Print the effective configuration (env or file):
  raffle-sim config --file raffle.yaml

Environment:
  RAFFLE_* variables as documented in raffle.config.RaffleConfig.from_env
"""

from __future__ import annotations

import hashlib
import json
import logging
import sys
from typing import Any, Dict, List, Optional

import typer

from ..automation import Keeper
from ..config import RaffleConfig
from ..errors import ConfigError, TransferFailed
from ..ledger import Ledger
from ..machine import RaffleStateMachine
from ..oracle.local import LocalCoordinator, derive_words
from ..utils.time import ManualClock

app = typer.Typer(
    name="raffle-sim",
    help="Simulate oracle-drawn raffle rounds locally.",
    no_args_is_help=True,
    add_completion=False,
)


def _setup_logging(level: str) -> None:
    lvl = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=lvl,
        format="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )


def _player_address(i: int) -> str:
    return "0x" + hashlib.sha3_256(f"player-{i}".encode("utf-8")).hexdigest()[:40]


def _load_config(path: Optional[str]) -> RaffleConfig:
    try:
        return RaffleConfig.from_file(path) if path else RaffleConfig.from_env()
    except ConfigError as e:
        typer.echo(f"config error: {e}", err=True)
        raise typer.Exit(code=1)


@app.command("run")
def cmd_run(
    players: int = typer.Option(3, "--players", "-n", min=1, help="Number of entrants."),
    random_value: Optional[int] = typer.Option(
        None, "--random-value", "-r", min=0, help="Word delivered by the coordinator."
    ),
    refuse_winner: bool = typer.Option(False, "--refuse-winner", help="Winner rejects incoming funds."),
    config_file: Optional[str] = typer.Option(None, "--file", "-f", help="JSON/YAML config file."),
    log_level: str = typer.Option("WARNING", "--log-level", help="Python logging level."),
) -> None:
    """Enter N players, wait out the interval, draw and pay."""
    _setup_logging(log_level)
    cfg = _load_config(config_file)

    clock = ManualClock()
    coordinator = LocalCoordinator(address=cfg.oracle_address)
    addrs: List[str] = [_player_address(i) for i in range(players)]
    ledger = Ledger({a: cfg.entrance_fee for a in addrs})
    raffle = RaffleStateMachine.from_config(cfg, coordinator=coordinator, ledger=ledger, clock=clock)

    for a in addrs:
        raffle.enter(a, cfg.entrance_fee)

    keeper = Keeper(raffle)
    request_id = keeper.poll_once()
    drawn_early = request_id is not None
    if request_id is None:
        clock.advance(cfg.interval_s + 1)
        request_id = keeper.poll_once()
    if request_id is None:
        typer.echo("upkeep was not needed after the interval; nothing drawn", err=True)
        raise typer.Exit(code=1)

    word = random_value if random_value is not None else derive_words(coordinator.seed, request_id, 1)[0]
    if refuse_winner:
        ledger.refuse(addrs[word % players])

    summary: Dict[str, Any] = {
        "drawn_before_interval": drawn_early,
        "request_id": int(request_id),
        "prize": raffle.balance,
    }
    try:
        resolution = coordinator.fulfill(raffle, request_id, [word])
    except TransferFailed as e:
        summary.update({"error": e.to_dict(), "round": raffle.snapshot()})
        typer.echo(json.dumps(summary, indent=2))
        raise typer.Exit(code=2)

    summary.update(
        {
            "random_value": resolution.random_value,
            "winner_index": resolution.winner_index,
            "winner": resolution.winner,
            "winner_balance": ledger.balance(resolution.winner),
            "round": raffle.snapshot(),
            "events": [e.to_dict() for e in raffle.events.events],
        }
    )
    typer.echo(json.dumps(summary, indent=2))


@app.command("config")
def cmd_config(
    config_file: Optional[str] = typer.Option(None, "--file", "-f", help="JSON/YAML config file."),
) -> None:
    """Print the effective configuration as JSON."""
    typer.echo(_load_config(config_file).to_json())


def main() -> None:  # pragma: no cover - console entry point
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
