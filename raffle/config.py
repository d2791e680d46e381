"""
Raffle configuration.

This file defines the typed configuration for one raffle instance:
- Policy (entrance fee, draw interval) — immutable once a raffle is built
- Oracle request parameters (key hash, subscription id, callback gas limit)
- Identities (the designated coordinator address, the raffle's own address)

It provides:
- A dataclass-based config with validation
- Loading from environment variables (prefix configurable)
- Loading from a JSON or YAML file
"""

from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass
from typing import Any, Dict

import yaml

from .constants import (
    DEFAULT_CALLBACK_GAS_LIMIT,
    DEFAULT_ENTRANCE_FEE,
    DEFAULT_INTERVAL_S,
    DEFAULT_KEY_HASH,
    DEFAULT_SUBSCRIPTION_ID,
)
from .errors import ConfigError
from .oracle.local import DEFAULT_COORDINATOR_ADDRESS
from .types.core import OracleRequestConfig, key_hash_bytes, to_address
from .types.state import RaffleParams

DEFAULT_RAFFLE_ADDRESS = "0x" + "00" * 19 + "01"


@dataclass
class RaffleConfig:
    """
    Policy:
      - entrance_fee: minimum amount an entrant attaches (smallest unit, > 0)
      - interval_s: minimum seconds between draws

    Oracle:
      - key_hash: 0x-hex 32-byte gas lane selector
      - subscription_id: billing subscription for requests
      - callback_gas_limit: compute budget for the fulfillment callback
      - oracle_address: the only caller allowed to deliver randomness

    Identity:
      - raffle_address: ledger account holding the prize pool
    """

    entrance_fee: int = DEFAULT_ENTRANCE_FEE
    interval_s: int = DEFAULT_INTERVAL_S
    key_hash: str = DEFAULT_KEY_HASH
    subscription_id: int = DEFAULT_SUBSCRIPTION_ID
    callback_gas_limit: int = DEFAULT_CALLBACK_GAS_LIMIT
    oracle_address: str = DEFAULT_COORDINATOR_ADDRESS
    raffle_address: str = DEFAULT_RAFFLE_ADDRESS

    def validate(self) -> None:
        for name in ("entrance_fee", "interval_s", "subscription_id", "callback_gas_limit"):
            v = getattr(self, name)
            if not isinstance(v, int) or isinstance(v, bool):
                raise ConfigError(f"{name} must be an integer")
        if self.entrance_fee <= 0:
            raise ConfigError("entrance_fee must be > 0")
        if self.interval_s < 0:
            raise ConfigError("interval_s must be >= 0")
        if self.subscription_id < 0:
            raise ConfigError("subscription_id must be >= 0")
        if self.callback_gas_limit <= 0:
            raise ConfigError("callback_gas_limit must be > 0")
        try:
            key_hash_bytes(self.key_hash)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"key_hash: {e}") from e
        for name in ("oracle_address", "raffle_address"):
            try:
                to_address(getattr(self, name))
            except (TypeError, ValueError) as e:
                raise ConfigError(f"{name}: {e}") from e
        if to_address(self.oracle_address) == to_address(self.raffle_address):
            raise ConfigError("oracle_address and raffle_address must differ")

    # -------------------------
    # Derived views
    # -------------------------

    def params(self) -> RaffleParams:
        return RaffleParams(entrance_fee=int(self.entrance_fee), interval=int(self.interval_s))

    def request_config(self) -> OracleRequestConfig:
        return OracleRequestConfig(
            key_hash=key_hash_bytes(self.key_hash),
            subscription_id=int(self.subscription_id),
            callback_gas_limit=int(self.callback_gas_limit),
        )

    # -------------------------
    # Serialization helpers
    # -------------------------

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, sort_keys=True)

    # -------------------------
    # Loaders
    # -------------------------

    @staticmethod
    def from_env(prefix: str = "RAFFLE_") -> "RaffleConfig":
        """
        Load configuration from environment variables. All variables are optional.

        Supported keys:
          - RAFFLE_ENTRANCE_FEE=10000000000000000
          - RAFFLE_INTERVAL_S=30
          - RAFFLE_KEY_HASH=0x…
          - RAFFLE_SUBSCRIPTION_ID=1
          - RAFFLE_CALLBACK_GAS_LIMIT=500000
          - RAFFLE_ORACLE_ADDRESS=0x…
          - RAFFLE_ADDRESS=0x…
        """

        def _get(name: str, cast: Any, default: Any) -> Any:
            key = prefix + name
            raw = os.getenv(key)
            if raw is None or raw == "":
                return default
            try:
                return cast(raw)
            except ValueError as e:
                raise ConfigError(f"Invalid value for {key}: {raw!r}") from e

        cfg = RaffleConfig(
            entrance_fee=_get("ENTRANCE_FEE", int, DEFAULT_ENTRANCE_FEE),
            interval_s=_get("INTERVAL_S", int, DEFAULT_INTERVAL_S),
            key_hash=_get("KEY_HASH", str, DEFAULT_KEY_HASH),
            subscription_id=_get("SUBSCRIPTION_ID", int, DEFAULT_SUBSCRIPTION_ID),
            callback_gas_limit=_get("CALLBACK_GAS_LIMIT", int, DEFAULT_CALLBACK_GAS_LIMIT),
            oracle_address=_get("ORACLE_ADDRESS", str, DEFAULT_COORDINATOR_ADDRESS),
            raffle_address=_get("ADDRESS", str, DEFAULT_RAFFLE_ADDRESS),
        )
        cfg.validate()
        return cfg

    @staticmethod
    def from_file(path: str) -> "RaffleConfig":
        """
        Load configuration from a JSON or YAML file. Keys mirror the dataclass
        fields. Example (YAML):

            entrance_fee: 10000000000000000
            interval_s: 30
            key_hash: "0x…"
            subscription_id: 1
            callback_gas_limit: 500000

        Hex values must be quoted in YAML, otherwise they load as integers.
        """
        with open(path, "r", encoding="utf-8") as f:
            text = f.read()
        data = _parse_json_or_yaml(text, path)
        if not isinstance(data, dict):
            raise ConfigError(f"{path!r} must contain a mapping")

        known = set(RaffleConfig.__dataclass_fields__)
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"unknown config keys in {path!r}: {', '.join(unknown)}")

        cfg = RaffleConfig(**data)
        cfg.validate()
        return cfg


# -------------------------
# Utilities
# -------------------------


def _parse_json_or_yaml(text: str, path_hint: str) -> Dict[str, Any]:
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass
    try:
        return yaml.safe_load(text) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse {path_hint!r} as JSON or YAML: {e}") from e


# A handy default instance for quick use in REPL/tests.
DEFAULT: RaffleConfig = RaffleConfig()


__all__ = [
    "RaffleConfig",
    "DEFAULT",
    "DEFAULT_RAFFLE_ADDRESS",
]
