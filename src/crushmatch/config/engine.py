"""Recompute engine configuration values."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Final

from crushmatch.domain.model import AmbiguityPolicy

from .env import env_int
from .errors import ConfigurationError

# Upper bound on member writes per atomic batch.
DEFAULT_BATCH_SIZE: Final[int] = 500
DEFAULT_MAX_ATTEMPTS: Final[int] = 3
DEFAULT_ACTIVE_WINDOW_HOURS: Final[int] = 24


@dataclass(frozen=True, slots=True)
class EngineConfig:
    """Tuning knobs for the recompute engine."""

    batch_size: int = DEFAULT_BATCH_SIZE
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    ambiguity_policy: AmbiguityPolicy = AmbiguityPolicy.FIRST


@dataclass(frozen=True, slots=True)
class ReportConfig:
    active_window_hours: int = DEFAULT_ACTIVE_WINDOW_HOURS


def _ambiguity_policy_from_env() -> AmbiguityPolicy:
    raw = os.getenv("CRUSHMATCH_AMBIGUOUS_NAMES")
    if raw is None or not raw.strip():
        return AmbiguityPolicy.FIRST
    try:
        return AmbiguityPolicy(raw.strip().lower())
    except ValueError as exc:
        allowed = ", ".join(policy.value for policy in AmbiguityPolicy)
        raise ConfigurationError(
            f"CRUSHMATCH_AMBIGUOUS_NAMES must be one of {allowed}, got {raw!r}",
            variable="CRUSHMATCH_AMBIGUOUS_NAMES",
        ) from exc


def get_engine_config() -> EngineConfig:
    return EngineConfig(
        batch_size=env_int("CRUSHMATCH_BATCH_SIZE", DEFAULT_BATCH_SIZE),
        max_attempts=env_int("CRUSHMATCH_MAX_ATTEMPTS", DEFAULT_MAX_ATTEMPTS),
        ambiguity_policy=_ambiguity_policy_from_env(),
    )


def get_report_config() -> ReportConfig:
    return ReportConfig(
        active_window_hours=env_int(
            "CRUSHMATCH_ACTIVE_WINDOW_HOURS",
            DEFAULT_ACTIVE_WINDOW_HOURS,
        )
    )
