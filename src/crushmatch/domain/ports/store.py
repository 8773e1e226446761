"""The member store port consumed by the recompute engine."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from datetime import datetime

    from crushmatch.domain.model import (
        AnalyticsReport,
        DerivedUpdate,
        Member,
        MemberChange,
        MemberSnapshot,
    )

type MemberListener = Callable[["MemberChange"], object]
type Unsubscribe = Callable[[], None]


@runtime_checkable
class MemberStore(Protocol):
    """Injectable access to the member collection."""

    def snapshot(self) -> MemberSnapshot: ...

    def commit_batch(
        self,
        updates: Sequence[DerivedUpdate],
        *,
        expected_version: int | None = None,
        bump_version: bool = False,
    ) -> int: ...

    def watch(self, listener: MemberListener) -> Unsubscribe: ...

    def get(self, member_id: str) -> Member: ...

    def register(self, member: Member) -> Member: ...

    def update_member(
        self,
        member_id: str,
        *,
        crushes: Iterable[str] | None = None,
        identity_name: str | None = None,
    ) -> MemberChange: ...

    def write_crushes(
        self,
        member_id: str,
        crushes: Iterable[str],
        *,
        notify: bool = True,
    ) -> MemberChange: ...

    # called by the sign-in flow; reports count recent logins as active members
    def touch_login(self, member_id: str, *, at: datetime | None = None) -> Member: ...


@runtime_checkable
class ReportSink(Protocol):
    """Append-only destination for analytics reports, separate from member records."""

    def append_report(self, report: AnalyticsReport) -> None: ...
