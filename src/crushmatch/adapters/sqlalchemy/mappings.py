"""SQLAlchemy table metadata for member records and reports."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, Final, cast

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Dialect,
    Float,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    TypeDecorator,
)

from crushmatch.domain.model import AnalyticsReport, MatchInfo, Member

if TYPE_CHECKING:
    from sqlalchemy.engine import RowMapping

STORE_STATE_ID: Final[int] = 1


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


class StringListType(TypeDecorator[tuple[str, ...]]):
    """Ordered list of strings stored as a JSON array."""

    impl = Text
    cache_ok = True

    def process_bind_param(self, value: tuple[str, ...] | None, dialect: Dialect) -> str:
        _ = dialect
        return json.dumps(list(value or ()))

    def process_result_value(self, value: str | None, dialect: Dialect) -> tuple[str, ...]:
        _ = dialect
        if value is None:
            return ()
        loaded = json.loads(value)
        if not isinstance(loaded, list):
            return ()
        items = cast(list[Any], loaded)
        return tuple(item for item in items if isinstance(item, str))


class MatchListType(TypeDecorator[tuple[MatchInfo, ...]]):
    impl = Text
    cache_ok = True

    def process_bind_param(self, value: tuple[MatchInfo, ...] | None, dialect: Dialect) -> str:
        _ = dialect
        payload = [
            {
                "peer_id": match.peer_id,
                "peer_name": match.peer_name,
                "peer_contact": match.peer_contact,
                "matched_at": match.matched_at.astimezone(UTC).isoformat(),
            }
            for match in value or ()
        ]
        return json.dumps(payload)

    def process_result_value(self, value: str | None, dialect: Dialect) -> tuple[MatchInfo, ...]:
        _ = dialect
        if value is None:
            return ()
        loaded = json.loads(value)
        if not isinstance(loaded, list):
            return ()
        matches: list[MatchInfo] = []
        for item in cast(list[Any], loaded):
            if not isinstance(item, dict):
                continue
            entry = cast(dict[str, Any], item)
            matches.append(
                MatchInfo(
                    peer_id=str(entry["peer_id"]),
                    peer_name=str(entry.get("peer_name", "")),
                    peer_contact=str(entry.get("peer_contact", "")),
                    matched_at=datetime.fromisoformat(str(entry["matched_at"])),
                )
            )
        return tuple(matches)


metadata = MetaData(
    naming_convention={
        "ix": "ix_%(column_0_label)s",
        "uq": "uq_%(table_name)s_%(column_0_label)s",
        "ck": "ck_%(table_name)s_%(constraint_name)s",
        "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
        "pk": "pk_%(table_name)s",
    }
)

member_table = Table(
    "member",
    metadata,
    Column("id", String, primary_key=True),
    Column("identity_name", String, nullable=False, default=""),
    Column("contact", String, nullable=False, default=""),
    Column("crushes", StringListType(), nullable=False),
    Column("locked_crushes", StringListType(), nullable=False),
    Column("matches", MatchListType(), nullable=False),
    Column("crush_count", Integer, nullable=False, default=0),
    Column("created_at", UTCDateTime(), nullable=True),
    Column("updated_at", UTCDateTime(), nullable=True),
    Column("last_login", UTCDateTime(), nullable=True),
)

store_state_table = Table(
    "store_state",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("data_version", Integer, nullable=False, default=0),
)

analytics_report_table = Table(
    "analytics_report",
    metadata,
    Column("id", String, primary_key=True),
    Column("created_at", UTCDateTime(), nullable=False, index=True),
    Column("total_members", Integer, nullable=False),
    Column("verified_members", Integer, nullable=False),
    Column("total_matches", Integer, nullable=False),
    Column("matched_pairs", StringListType(), nullable=False),
    Column("total_crushes", Integer, nullable=False),
    Column("orphan_crushes", Integer, nullable=False),
    Column("people_with_crushes", Integer, nullable=False),
    Column("avg_crushes", Float, nullable=False),
    Column("active_members_pct", Float, nullable=False),
    Column("manual", Boolean, nullable=False, default=False),
)


def member_to_row(member: Member) -> dict[str, object]:
    return {
        "id": member.id,
        "identity_name": member.identity_name,
        "contact": member.contact,
        "crushes": member.crushes,
        "locked_crushes": member.locked_crushes,
        "matches": member.matches,
        "crush_count": member.crush_count,
        "created_at": member.created_at,
        "updated_at": member.updated_at,
        "last_login": member.last_login,
    }


def member_from_row(row: RowMapping) -> Member:
    return Member(
        id=row["id"],
        identity_name=row["identity_name"] or "",
        contact=row["contact"] or "",
        crushes=row["crushes"],
        locked_crushes=row["locked_crushes"],
        matches=row["matches"],
        crush_count=row["crush_count"] or 0,
        created_at=row["created_at"],
        updated_at=row["updated_at"],
        last_login=row["last_login"],
    )


def report_to_row(report: AnalyticsReport) -> dict[str, object]:
    return {
        "id": report.id,
        "created_at": report.created_at,
        "total_members": report.total_members,
        "verified_members": report.verified_members,
        "total_matches": report.total_matches,
        "matched_pairs": report.matched_pairs,
        "total_crushes": report.total_crushes,
        "orphan_crushes": report.orphan_crushes,
        "people_with_crushes": report.people_with_crushes,
        "avg_crushes": report.avg_crushes,
        "active_members_pct": report.active_members_pct,
        "manual": report.manual,
    }


def report_from_row(row: RowMapping) -> AnalyticsReport:
    return AnalyticsReport(
        id=row["id"],
        created_at=row["created_at"],
        total_members=row["total_members"],
        verified_members=row["verified_members"],
        total_matches=row["total_matches"],
        matched_pairs=row["matched_pairs"],
        total_crushes=row["total_crushes"],
        orphan_crushes=row["orphan_crushes"],
        people_with_crushes=row["people_with_crushes"],
        avg_crushes=row["avg_crushes"],
        active_members_pct=row["active_members_pct"],
        manual=row["manual"],
    )
