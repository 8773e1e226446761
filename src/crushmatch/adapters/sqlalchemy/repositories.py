"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING, cast

from sqlalchemy import insert, select, update

from crushmatch.adapters.sqlalchemy.mappings import (
    STORE_STATE_ID,
    analytics_report_table,
    member_from_row,
    member_table,
    member_to_row,
    report_from_row,
    report_to_row,
    store_state_table,
)

if TYPE_CHECKING:
    from sqlalchemy.engine import CursorResult
    from sqlalchemy.orm import Session

    from crushmatch.domain.model import AnalyticsReport, Member


class SqlAlchemyMemberRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: Member) -> None:
        self.session.execute(insert(member_table).values(**member_to_row(entity)))

    def get(self, member_id: str) -> Member | None:
        stmt = select(member_table).where(member_table.c.id == member_id)
        row = self.session.execute(stmt).mappings().one_or_none()
        return member_from_row(row) if row is not None else None

    def list_all(self) -> list[Member]:
        stmt = select(member_table).order_by(member_table.c.id)
        return [member_from_row(row) for row in self.session.execute(stmt).mappings()]

    def save(self, member: Member) -> None:
        values = member_to_row(member)
        del values["id"]
        stmt = update(member_table).where(member_table.c.id == member.id).values(**values)
        self.session.execute(stmt)

    def data_version(self) -> int:
        stmt = select(store_state_table.c.data_version).where(
            store_state_table.c.id == STORE_STATE_ID
        )
        return int(self.session.execute(stmt).scalar_one())

    def lock_data_version(self, expected: int) -> bool:
        # a no-op UPDATE takes the write lock; SQLite ignores SELECT ... FOR UPDATE
        stmt = (
            update(store_state_table)
            .where(
                store_state_table.c.id == STORE_STATE_ID,
                store_state_table.c.data_version == expected,
            )
            .values(data_version=store_state_table.c.data_version)
        )
        result = cast("CursorResult[object]", self.session.execute(stmt))
        return result.rowcount == 1

    def bump_data_version(self) -> int:
        stmt = (
            update(store_state_table)
            .where(store_state_table.c.id == STORE_STATE_ID)
            .values(data_version=store_state_table.c.data_version + 1)
        )
        result = cast("CursorResult[object]", self.session.execute(stmt))
        if result.rowcount != 1:
            raise LookupError("store_state row missing; run migrations to seed it")
        return self.data_version()


class SqlAlchemyAnalyticsRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: AnalyticsReport) -> None:
        self.session.execute(insert(analytics_report_table).values(**report_to_row(entity)))

    def latest(self) -> AnalyticsReport | None:
        stmt = (
            select(analytics_report_table)
            .order_by(analytics_report_table.c.created_at.desc())
            .limit(1)
        )
        row = self.session.execute(stmt).mappings().one_or_none()
        return report_from_row(row) if row is not None else None


if TYPE_CHECKING:
    from crushmatch.domain.ports.persistence import AnalyticsRepository, MemberRepository

    _session_stub = cast("Session", object())
    _member_repo_check: MemberRepository = SqlAlchemyMemberRepository(_session_stub)
    _report_repo_check: AnalyticsRepository = SqlAlchemyAnalyticsRepository(_session_stub)
