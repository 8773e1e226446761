"""Public domain model surface."""

from __future__ import annotations

from crushmatch.domain.model.enums import AmbiguityPolicy, TriggerOutcome
from crushmatch.domain.model.member import (
    DerivedUpdate,
    MatchInfo,
    Member,
    MemberChange,
    MemberSnapshot,
    dedupe,
    new_member_id,
)
from crushmatch.domain.model.report import AnalyticsReport

__all__ = [
    "AmbiguityPolicy",
    "AnalyticsReport",
    "DerivedUpdate",
    "MatchInfo",
    "Member",
    "MemberChange",
    "MemberSnapshot",
    "TriggerOutcome",
    "dedupe",
    "new_member_id",
]
