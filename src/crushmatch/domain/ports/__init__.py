"""Domain port definitions for adapters."""

from __future__ import annotations

from .persistence import AnalyticsRepository, MemberRepository, Repository
from .store import MemberListener, MemberStore, ReportSink, Unsubscribe
from .unit_of_work import MemberRepositories, MemberUnitOfWork

__all__ = [
    "AnalyticsRepository",
    "MemberListener",
    "MemberRepositories",
    "MemberRepository",
    "MemberStore",
    "MemberUnitOfWork",
    "Repository",
    "ReportSink",
    "Unsubscribe",
]
