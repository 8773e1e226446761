"""SQLAlchemy adapter package for crushmatch."""

from __future__ import annotations

from .mappings import (
    analytics_report_table,
    member_table,
    metadata,
    store_state_table,
)
from .repositories import SqlAlchemyAnalyticsRepository, SqlAlchemyMemberRepository
from .unit_of_work import SqlAlchemyMemberUnitOfWork, shutdown, startup

__all__ = [
    "SqlAlchemyAnalyticsRepository",
    "SqlAlchemyMemberRepository",
    "SqlAlchemyMemberUnitOfWork",
    "analytics_report_table",
    "member_table",
    "metadata",
    "shutdown",
    "startup",
    "store_state_table",
]
