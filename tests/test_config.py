"""Tests for config.py"""

import pytest

from readbet.config import EngineConfig
from readbet.core.odds_policy import OddsPolicy

_ENV_VARS = (
    "READBET_ODDS_POLICY",
    "READBET_EMPTY_SLIP_POLICY",
    "READBET_DEFAULT_WAGER",
    "READBET_STARTING_BALANCE",
)


@pytest.fixture
def clean_env(monkeypatch):
    for name in _ENV_VARS:
        # setenv first so teardown also removes values loaded from a .env file
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    return monkeypatch


def test_defaults():
    cfg = EngineConfig()
    assert cfg.policy == OddsPolicy.fine_grained()
    assert cfg.empty_slip_policy == "raise"
    assert cfg.default_wager == 10.0
    assert not cfg.tracks_balance


@pytest.mark.parametrize("kwargs", [
    {"odds_policy": "sharp"},
    {"empty_slip_policy": "ignore"},
    {"default_wager": 0},
    {"starting_balance": -1.0},
])
def test_invalid_values_raise(kwargs):
    with pytest.raises(ValueError):
        EngineConfig(**kwargs)


def test_from_env_defaults(clean_env):
    assert EngineConfig.from_env() == EngineConfig()


def test_from_env_overrides(clean_env):
    clean_env.setenv("READBET_ODDS_POLICY", "Coarse")
    clean_env.setenv("READBET_EMPTY_SLIP_POLICY", "noop")
    clean_env.setenv("READBET_DEFAULT_WAGER", "25")
    clean_env.setenv("READBET_STARTING_BALANCE", "200")
    cfg = EngineConfig.from_env()
    assert cfg.policy == OddsPolicy.coarse()
    assert cfg.empty_slip_policy == "noop"
    assert cfg.default_wager == 25.0
    assert cfg.starting_balance == 200.0
    assert cfg.tracks_balance


def test_from_env_reads_dotenv_file(clean_env, tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("READBET_DEFAULT_WAGER=5\n")
    assert EngineConfig.from_env(str(env_file)).default_wager == 5.0


def test_from_env_invalid_value(clean_env):
    clean_env.setenv("READBET_EMPTY_SLIP_POLICY", "maybe")
    with pytest.raises(ValueError):
        EngineConfig.from_env()
