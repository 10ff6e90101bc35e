import logging
import os

import pytest

from lprtrack.config import ENV_PREFIX, EngineConfig, configure_logging

ENV_KEYS = [
    ENV_PREFIX + name
    for name in (
        "TAX_PRIORITY_DAYS",
        "TAX_CRITICAL_DAYS",
        "TAX_HIGH_DAYS",
        "PHYSICAL_PRESENCE_BUFFER_DAYS",
        "UPCOMING_DEADLINE_HORIZON_DAYS",
        "LOG_LEVEL",
    )
]


@pytest.fixture
def clean_env():
    """Clear LPRTRACK_* before and after; load_dotenv writes os.environ directly."""
    saved = {key: os.environ.pop(key) for key in ENV_KEYS if key in os.environ}
    yield
    for key in ENV_KEYS:
        os.environ.pop(key, None)
    os.environ.update(saved)


def test_defaults():
    config = EngineConfig()
    assert config.tax_priority_days == 30
    assert config.tax_critical_days == 7
    assert config.tax_high_days == 14
    assert config.physical_presence_buffer_days == 30
    assert config.upcoming_deadline_horizon_days is None
    assert config.log_level == "WARNING"


def test_log_level_normalized():
    assert EngineConfig(log_level="info").log_level == "INFO"


@pytest.mark.parametrize("kwargs", [
    {"tax_priority_days": -1},
    {"physical_presence_buffer_days": -5},
    {"upcoming_deadline_horizon_days": -1},
    {"tax_critical_days": 20},        # critical above high
    {"tax_high_days": 40},            # high above priority
])
def test_invalid_thresholds_rejected(kwargs):
    with pytest.raises(ValueError):
        EngineConfig(**kwargs)


def test_from_env_reads_prefixed_variables(clean_env, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    os.environ[ENV_PREFIX + "TAX_PRIORITY_DAYS"] = "45"
    os.environ[ENV_PREFIX + "UPCOMING_DEADLINE_HORIZON_DAYS"] = "90"
    os.environ[ENV_PREFIX + "LOG_LEVEL"] = "debug"

    config = EngineConfig.from_env(env_file=tmp_path / "missing.env")

    assert config.tax_priority_days == 45
    assert config.upcoming_deadline_horizon_days == 90
    assert config.log_level == "DEBUG"
    assert config.tax_high_days == 14


def test_from_env_loads_dotenv_file(clean_env, tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text(
        f"{ENV_PREFIX}PHYSICAL_PRESENCE_BUFFER_DAYS=10\n"
        f"{ENV_PREFIX}TAX_CRITICAL_DAYS=3\n"
    )
    config = EngineConfig.from_env(env_file=env_file)
    assert config.physical_presence_buffer_days == 10
    assert config.tax_critical_days == 3


def test_environment_wins_over_dotenv(clean_env, tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text(f"{ENV_PREFIX}TAX_HIGH_DAYS=20\n")
    os.environ[ENV_PREFIX + "TAX_HIGH_DAYS"] = "10"

    assert EngineConfig.from_env(env_file=env_file).tax_high_days == 10


def test_from_env_rejects_non_integer(clean_env, tmp_path):
    os.environ[ENV_PREFIX + "TAX_HIGH_DAYS"] = "two weeks"
    with pytest.raises(ValueError, match="must be an integer"):
        EngineConfig.from_env(env_file=tmp_path / "missing.env")


def test_configure_logging_sets_package_level():
    logger = logging.getLogger("lprtrack")
    previous = logger.level
    try:
        configure_logging(EngineConfig(log_level="debug"))
        assert logger.level == logging.DEBUG
    finally:
        logger.setLevel(previous)
