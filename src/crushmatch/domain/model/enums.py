"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class AmbiguityPolicy(StrEnum):
    """How a first+last name lookup treats several equally good members."""

    FIRST = "first"  # lowest member id wins
    REJECT = "reject"  # ambiguous names stay orphans


class TriggerOutcome(StrEnum):
    SKIPPED = "skipped"
    RESTORED = "restored"
    RECOMPUTED = "recomputed"
