"""In-process member storage, used for tests and throwaway runs."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Literal

from crushmatch.domain.ports.unit_of_work import MemberRepositories

if TYPE_CHECKING:
    from collections.abc import Callable
    from types import TracebackType

    from crushmatch.domain.model import AnalyticsReport, Member


@dataclass(slots=True)
class InMemoryDatabase:
    """Committed state shared by every unit of work created against it."""

    members: dict[str, Member] = field(default_factory=dict[str, "Member"])
    reports: list[AnalyticsReport] = field(default_factory=list["AnalyticsReport"])
    data_version: int = 0
    commits: int = 0


class InMemoryMemberRepository:
    """Buffers writes until the owning unit of work commits."""

    def __init__(self, database: InMemoryDatabase) -> None:
        self._database = database
        self.pending: dict[str, Member] = {}
        self.version_bumps = 0

    def add(self, entity: Member) -> None:
        self.pending[entity.id] = entity

    def save(self, member: Member) -> None:
        self.pending[member.id] = member

    def get(self, member_id: str) -> Member | None:
        if member_id in self.pending:
            return self.pending[member_id]
        return self._database.members.get(member_id)

    def list_all(self) -> list[Member]:
        merged = {**self._database.members, **self.pending}
        return list(merged.values())

    def data_version(self) -> int:
        return self._database.data_version + self.version_bumps

    def lock_data_version(self, expected: int) -> bool:
        return self.data_version() == expected

    def bump_data_version(self) -> int:
        self.version_bumps += 1
        return self.data_version()


class InMemoryAnalyticsRepository:
    def __init__(self, database: InMemoryDatabase) -> None:
        self._database = database
        self.pending: list[AnalyticsReport] = []

    def add(self, entity: AnalyticsReport) -> None:
        self.pending.append(entity)

    def latest(self) -> AnalyticsReport | None:
        reports = [*self._database.reports, *self.pending]
        return reports[-1] if reports else None


class InMemoryUnitOfWork:
    """Unit of work over an :class:`InMemoryDatabase`; nothing is visible until commit."""

    def __init__(self, database: InMemoryDatabase) -> None:
        self.database = database
        self._repositories: MemberRepositories | None = None

    def __enter__(self) -> InMemoryUnitOfWork:
        self._repositories = MemberRepositories(
            members=InMemoryMemberRepository(self.database),
            reports=InMemoryAnalyticsRepository(self.database),
        )
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        if exc_type is not None:
            self.rollback()
        self._repositories = None
        return False

    @property
    def repositories(self) -> MemberRepositories:
        if self._repositories is None:
            raise RuntimeError("Unit of work used outside of its context")
        return self._repositories

    def commit(self) -> None:
        members = self._member_repository()
        reports = self._report_repository()
        self.database.members.update(members.pending)
        self.database.data_version += members.version_bumps
        self.database.reports.extend(reports.pending)
        self.database.commits += 1
        self._reset()

    def rollback(self) -> None:
        self._reset()

    def _reset(self) -> None:
        if self._repositories is None:
            return
        self._repositories = MemberRepositories(
            members=InMemoryMemberRepository(self.database),
            reports=InMemoryAnalyticsRepository(self.database),
        )

    def _member_repository(self) -> InMemoryMemberRepository:
        repository = self.repositories.members
        if not isinstance(repository, InMemoryMemberRepository):
            raise TypeError("Unexpected member repository type")
        return repository

    def _report_repository(self) -> InMemoryAnalyticsRepository:
        repository = self.repositories.reports
        if not isinstance(repository, InMemoryAnalyticsRepository):
            raise TypeError("Unexpected report repository type")
        return repository


def in_memory_unit_of_work_factory(
    database: InMemoryDatabase | None = None,
) -> tuple[InMemoryDatabase, Callable[[], InMemoryUnitOfWork]]:
    """Return a fresh database together with a factory bound to it."""

    db = database or InMemoryDatabase()
    return db, lambda: InMemoryUnitOfWork(db)


if TYPE_CHECKING:
    from crushmatch.domain.ports.persistence import AnalyticsRepository, MemberRepository
    from crushmatch.domain.ports.unit_of_work import MemberUnitOfWork

    _database_stub = InMemoryDatabase()
    _member_repo_check: MemberRepository = InMemoryMemberRepository(_database_stub)
    _report_repo_check: AnalyticsRepository = InMemoryAnalyticsRepository(_database_stub)
    _uow_check: MemberUnitOfWork = InMemoryUnitOfWork(_database_stub)
