"""Environment variable loaders for configuration."""

from __future__ import annotations

import os
from typing import Final

from .errors import ConfigurationError

_TRUTHY: Final[frozenset[str]] = frozenset({"1", "true", "yes", "on"})
_FALSY: Final[frozenset[str]] = frozenset({"0", "false", "no", "off"})


def _read(name: str) -> str | None:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    return raw.strip()


def env_int(name: str, default: int, *, minimum: int = 1) -> int:
    """Return an optional integer variable, falling back to ``default`` when unset/blank."""

    raw = _read(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}", variable=name) from exc
    if value < minimum:
        raise ConfigurationError(f"{name} must be >= {minimum}, got {value}", variable=name)
    return value


def env_flag(name: str, *, default: bool = False) -> bool:
    raw = _read(name)
    if raw is None:
        return default
    lowered = raw.lower()
    if lowered in _TRUTHY:
        return True
    if lowered in _FALSY:
        return False
    raise ConfigurationError(f"{name} must be a boolean flag, got {raw!r}", variable=name)
