"""Engine settings.

Every tunable constant lives here. Defaults reproduce the platform's
behaviour; any field can be overridden through ``WORKFORCE_ENGINE_*``
environment variables, e.g.::

    WORKFORCE_ENGINE_SLOPE_THRESHOLD=0.25
    WORKFORCE_ENGINE_MAX_WORKERS=8
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields
from datetime import timedelta
from typing import Mapping, Optional

from workforce_engine.errors import ConfigError

logger = logging.getLogger(__name__)

ENV_PREFIX = "WORKFORCE_ENGINE_"


@dataclass(frozen=True)
class EngineSettings:
    """Immutable tunables shared by all analytical components."""

    baseline_score: float = 50.0
    history_window_days: int = 30
    min_trend_points: int = 4
    slope_threshold: float = 0.5
    forecast_horizon_days: int = 7
    freshness_max_age_hours: float = 1.0
    max_candidates: int = 5
    availability_window_days: int = 7
    max_workers: int = 4

    def __post_init__(self) -> None:
        if not 0 <= self.baseline_score <= 100:
            raise ConfigError("baseline_score must be within [0, 100]")
        if self.min_trend_points < 2:
            raise ConfigError("min_trend_points must be at least 2")
        if self.slope_threshold < 0:
            raise ConfigError("slope_threshold must be non-negative")
        for name in ("history_window_days", "forecast_horizon_days", "availability_window_days"):
            if getattr(self, name) <= 0:
                raise ConfigError(f"{name} must be positive")
        if self.freshness_max_age_hours < 0:
            raise ConfigError("freshness_max_age_hours must be non-negative")
        if self.max_candidates < 1:
            raise ConfigError("max_candidates must be at least 1")
        if self.max_workers < 1:
            raise ConfigError("max_workers must be at least 1")

    @property
    def history_window(self) -> timedelta:
        return timedelta(days=self.history_window_days)

    @property
    def availability_window(self) -> timedelta:
        return timedelta(days=self.availability_window_days)

    @property
    def freshness_max_age(self) -> timedelta:
        return timedelta(hours=self.freshness_max_age_hours)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "EngineSettings":
        """Build settings from defaults overridden by environment variables."""

        env = os.environ if environ is None else environ
        overrides = {}
        for item in fields(cls):
            raw = env.get(f"{ENV_PREFIX}{item.name.upper()}")
            if raw is None or raw.strip() == "":
                continue
            caster = int if item.type in ("int", int) else float
            try:
                overrides[item.name] = caster(raw.strip())
            except ValueError as exc:
                raise ConfigError(f"{ENV_PREFIX}{item.name.upper()}: invalid value {raw!r}") from exc

        if overrides:
            logger.debug("Engine settings overridden from environment: %s", sorted(overrides))
        return cls(**overrides)


DEFAULT_SETTINGS = EngineSettings()
