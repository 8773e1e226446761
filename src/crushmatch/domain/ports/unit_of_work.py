"""Transaction boundary around the member and report repositories."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, Self, runtime_checkable

if TYPE_CHECKING:
    from types import TracebackType

    from crushmatch.domain.ports.persistence import AnalyticsRepository, MemberRepository


@dataclass(frozen=True, slots=True)
class MemberRepositories:
    """Repositories that share one transaction."""

    members: MemberRepository
    reports: AnalyticsRepository


@runtime_checkable
class MemberUnitOfWork(Protocol):
    """Context manager handing out :class:`MemberRepositories`.

    Leaving the block without :meth:`commit` discards every pending write; an
    exception inside the block rolls back and propagates.
    """

    @property
    def repositories(self) -> MemberRepositories: ...

    def __enter__(self) -> Self: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...
