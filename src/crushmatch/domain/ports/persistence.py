"""Ports for persisting member records and reports."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from crushmatch.domain.model import AnalyticsReport, Member


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal repository contract for a persistent aggregate store."""

    def add(self, entity: TEntity) -> None: ...


@runtime_checkable
class MemberRepository(Repository["Member"], Protocol):
    """Persistence contract for member records.

    ``data_version`` is a collection-wide stamp bumped by client-side writes only.
    """

    def get(self, member_id: str) -> Member | None: ...

    def list_all(self) -> Sequence[Member]: ...

    def save(self, member: Member) -> None: ...

    def data_version(self) -> int: ...

    def lock_data_version(self, expected: int) -> bool:
        """Hold the version for the rest of the transaction if it still equals ``expected``."""
        ...

    def bump_data_version(self) -> int: ...


@runtime_checkable
class AnalyticsRepository(Repository["AnalyticsReport"], Protocol):
    """Append-only store for report snapshots."""

    def latest(self) -> AnalyticsReport | None: ...
