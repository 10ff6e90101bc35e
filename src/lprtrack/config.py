"""
Engine configuration for lprtrack.

This module defines the EngineConfig dataclass holding the tunable,
non-statutory knobs of the engine: reminder thresholds and safety buffers.
Statutory thresholds live in lprtrack.constants and are not configurable.

Engine functions never read the environment themselves. Callers build a
config (directly or via EngineConfig.from_env) and pass it in.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

ENV_PREFIX = "LPRTRACK_"


@dataclass
class EngineConfig:
    """
    Configuration for the calculation engine.

    Attributes:
        tax_priority_days: Tax deadlines within this many days become
            active compliance items.
        tax_critical_days: Tax deadlines within this many days are critical.
        tax_high_days: Tax deadlines within this many days are high urgency.

        physical_presence_buffer_days: Safety margin held back when computing
            the maximum safe trip under the physical-presence requirement.

        upcoming_deadline_horizon_days: Only deadlines within this many days
            are listed as upcoming. None lists every future deadline.

        log_level: Level applied to the "lprtrack" logger by configure_logging.
    """

    # Tax reminder thresholds
    tax_priority_days: int = 30
    tax_critical_days: int = 7
    tax_high_days: int = 14

    # Maximum trip calculator
    physical_presence_buffer_days: int = 30

    # Upcoming deadlines
    upcoming_deadline_horizon_days: Optional[int] = None

    log_level: str = "WARNING"

    def __post_init__(self):
        """Validate thresholds and normalize the log level."""
        for name in (
            "tax_priority_days",
            "tax_critical_days",
            "tax_high_days",
            "physical_presence_buffer_days",
        ):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative, got {getattr(self, name)}")

        if self.upcoming_deadline_horizon_days is not None and self.upcoming_deadline_horizon_days < 0:
            raise ValueError("upcoming_deadline_horizon_days must be non-negative")

        if not self.tax_critical_days <= self.tax_high_days <= self.tax_priority_days:
            raise ValueError(
                "tax thresholds must satisfy critical <= high <= priority "
                f"(got {self.tax_critical_days}, {self.tax_high_days}, {self.tax_priority_days})"
            )

        self.log_level = self.log_level.upper()

    @classmethod
    def from_env(cls, env_file: Optional[Union[str, Path]] = None) -> "EngineConfig":
        """
        Create configuration from LPRTRACK_* environment variables.

        A .env file is loaded first (values already set in the environment
        win). Unset variables keep their defaults.

        Args:
            env_file: Path to a .env file. If None, python-dotenv searches
                upward from the working directory.

        Returns:
            EngineConfig populated from the environment.
        """
        load_dotenv(dotenv_path=env_file)

        kwargs = {}
        for name in (
            "tax_priority_days",
            "tax_critical_days",
            "tax_high_days",
            "physical_presence_buffer_days",
            "upcoming_deadline_horizon_days",
        ):
            raw = os.getenv(ENV_PREFIX + name.upper())
            if raw is None or raw == "":
                continue
            try:
                kwargs[name] = int(raw)
            except ValueError as exc:
                raise ValueError(f"{ENV_PREFIX}{name.upper()} must be an integer, got {raw!r}") from exc

        log_level = os.getenv(ENV_PREFIX + "LOG_LEVEL")
        if log_level:
            kwargs["log_level"] = log_level

        logger.debug(f"Loaded engine config overrides from environment: {sorted(kwargs)}")
        return cls(**kwargs)


def configure_logging(config: EngineConfig) -> None:
    """Apply the configured level to the package logger (handlers untouched)."""
    logging.getLogger("lprtrack").setLevel(config.log_level)


DEFAULT_CONFIG = EngineConfig()
