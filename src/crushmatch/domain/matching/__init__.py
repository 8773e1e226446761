"""Recompute engine: name resolution, match calculation, locks and triggers."""

from __future__ import annotations

from .calculator import CrushTally, MatchedPeer, MatchResult, calculate_matches
from .names import NameIndex, normalize_name, resolve_name
from .orchestrator import RecomputeOrchestrator, RecomputeStats
from .ratchet import enforce_locks, restore_locked
from .renames import rename_references
from .triggers import is_material

__all__ = [
    "CrushTally",
    "MatchResult",
    "MatchedPeer",
    "NameIndex",
    "RecomputeOrchestrator",
    "RecomputeStats",
    "calculate_matches",
    "enforce_locks",
    "is_material",
    "normalize_name",
    "rename_references",
    "resolve_name",
    "restore_locked",
]
