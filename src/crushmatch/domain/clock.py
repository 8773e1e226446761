"""Time source shared by the engine, the store and the report job."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime

type Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(tz=UTC)
