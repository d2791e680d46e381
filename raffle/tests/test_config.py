import json

import pytest

from raffle.config import DEFAULT, DEFAULT_RAFFLE_ADDRESS, RaffleConfig
from raffle.constants import DEFAULT_ENTRANCE_FEE, DEFAULT_INTERVAL_S
from raffle.errors import ConfigError
from raffle.oracle.local import DEFAULT_COORDINATOR_ADDRESS

KEY = "0x" + "ab" * 32
ORACLE = "0x" + "cd" * 20


def test_defaults_validate():
    DEFAULT.validate()
    assert DEFAULT.entrance_fee == DEFAULT_ENTRANCE_FEE
    assert DEFAULT.interval_s == DEFAULT_INTERVAL_S
    assert DEFAULT.oracle_address == DEFAULT_COORDINATOR_ADDRESS
    assert DEFAULT.raffle_address == DEFAULT_RAFFLE_ADDRESS


@pytest.mark.parametrize(
    "overrides",
    [
        {"entrance_fee": 0},
        {"entrance_fee": "10"},
        {"interval_s": -1},
        {"subscription_id": -1},
        {"callback_gas_limit": 0},
        {"key_hash": "0x1234"},
        {"key_hash": 12345},
        {"oracle_address": "0xnothex"},
        {"oracle_address": DEFAULT_RAFFLE_ADDRESS},
    ],
)
def test_validate_rejects(overrides):
    with pytest.raises(ConfigError):
        RaffleConfig(**overrides).validate()


def test_derived_views():
    cfg = RaffleConfig(entrance_fee=5, interval_s=0, key_hash=KEY, subscription_id=3, callback_gas_limit=9)
    assert cfg.params().entrance_fee == 5
    assert cfg.params().interval == 0
    rc = cfg.request_config()
    assert rc.key_hash == bytes.fromhex("ab" * 32)
    assert rc.subscription_id == 3
    assert rc.callback_gas_limit == 9


def test_from_env(monkeypatch):
    monkeypatch.setenv("RAFFLE_ENTRANCE_FEE", "123")
    monkeypatch.setenv("RAFFLE_INTERVAL_S", "60")
    monkeypatch.setenv("RAFFLE_KEY_HASH", KEY)
    monkeypatch.setenv("RAFFLE_ORACLE_ADDRESS", ORACLE)
    monkeypatch.setenv("RAFFLE_SUBSCRIPTION_ID", "")
    cfg = RaffleConfig.from_env()
    assert cfg.entrance_fee == 123
    assert cfg.interval_s == 60
    assert cfg.key_hash == KEY
    assert cfg.oracle_address == ORACLE
    assert cfg.subscription_id == 0


def test_from_env_custom_prefix(monkeypatch):
    monkeypatch.setenv("LOTTO_ENTRANCE_FEE", "7")
    assert RaffleConfig.from_env(prefix="LOTTO_").entrance_fee == 7


def test_from_env_bad_int(monkeypatch):
    monkeypatch.setenv("RAFFLE_INTERVAL_S", "soon")
    with pytest.raises(ConfigError, match="RAFFLE_INTERVAL_S"):
        RaffleConfig.from_env()


def test_from_json_file(tmp_path):
    p = tmp_path / "raffle.json"
    p.write_text(json.dumps({"entrance_fee": 50, "interval_s": 5, "key_hash": KEY}))
    cfg = RaffleConfig.from_file(str(p))
    assert (cfg.entrance_fee, cfg.interval_s, cfg.key_hash) == (50, 5, KEY)


def test_from_yaml_file(tmp_path):
    p = tmp_path / "raffle.yaml"
    p.write_text(f'entrance_fee: 50\ninterval_s: 5\noracle_address: "{ORACLE}"\n')
    cfg = RaffleConfig.from_file(str(p))
    assert cfg.oracle_address == ORACLE


def test_from_file_unknown_key(tmp_path):
    p = tmp_path / "raffle.yaml"
    p.write_text("entrance_fee: 50\nprize_split: 2\n")
    with pytest.raises(ConfigError, match="prize_split"):
        RaffleConfig.from_file(str(p))


def test_from_file_requires_mapping(tmp_path):
    p = tmp_path / "raffle.yaml"
    p.write_text("- 1\n- 2\n")
    with pytest.raises(ConfigError):
        RaffleConfig.from_file(str(p))


def test_to_json_roundtrips_fields():
    data = json.loads(RaffleConfig(entrance_fee=9).to_json())
    assert data["entrance_fee"] == 9
    assert set(data) == set(RaffleConfig.__dataclass_fields__)
