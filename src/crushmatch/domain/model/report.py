"""Aggregate statistics appended by the scheduled report job."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING
from uuid import uuid4

if TYPE_CHECKING:
    from datetime import datetime


@dataclass(frozen=True, slots=True, kw_only=True)
class AnalyticsReport:
    id: str = field(default_factory=lambda: uuid4().hex)
    created_at: datetime

    total_members: int
    verified_members: int

    total_matches: int
    matched_pairs: tuple[str, ...]

    total_crushes: int
    orphan_crushes: int
    people_with_crushes: int
    avg_crushes: float

    # percentage (0-100) of members whose last login falls inside the window
    active_members_pct: float
    manual: bool = False
