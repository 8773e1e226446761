"""SQLAlchemy-backed unit of work for member records and reports.

The adapter is process-wide: :func:`startup` migrates the schema and binds a
session factory once, after which :class:`SqlAlchemyMemberUnitOfWork` can be
constructed freely (the store opens one per operation).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from crushmatch.adapters.sqlalchemy.migrations import upgrade_head
from crushmatch.adapters.sqlalchemy.repositories import (
    SqlAlchemyAnalyticsRepository,
    SqlAlchemyMemberRepository,
)
from crushmatch.config import get_database_config
from crushmatch.domain.ports.unit_of_work import MemberRepositories

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)


class StartupError(RuntimeError):
    """Raised when the SQLAlchemy adapter is used before (or twice during) initialisation."""


@dataclass(frozen=True, slots=True)
class _Binding:
    engine: Engine
    sessions: sessionmaker[Session]


_binding: _Binding | None = None


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> None:
    """Create (or adopt) an engine, migrate it to head, and bind the session factory."""

    global _binding  # noqa: PLW0603
    if _binding is not None and not force:
        raise StartupError(
            "SQLAlchemy adapter already initialised. Pass force=True to reconfigure."
        )

    if engine is None:
        config = get_database_config()
        engine = create_engine(database_uri or config.uri, echo=config.echo, future=True)
    upgrade_head(engine=engine)
    _binding = _Binding(engine=engine, sessions=sessionmaker(bind=engine, expire_on_commit=False))
    log.debug("SQLAlchemy adapter bound to %s", engine.url.render_as_string(hide_password=True))


def configured_engine() -> Engine | None:
    return _binding.engine if _binding is not None else None


def is_started() -> bool:
    return _binding is not None


def shutdown() -> None:
    """Dispose the bound engine and forget it (primarily for tests)."""

    global _binding  # noqa: PLW0603
    if _binding is not None:
        _binding.engine.dispose()
    _binding = None


def _session_factory() -> sessionmaker[Session]:
    if _binding is None:
        raise StartupError(
            "SQLAlchemy adapter not initialised. Call crushmatch.adapters.sqlalchemy."
            "unit_of_work.startup() before requesting a unit of work."
        )
    return _binding.sessions


class SqlAlchemyMemberUnitOfWork:
    """One session per ``with`` block; nothing is written unless :meth:`commit` runs."""

    def __init__(self, session_factory: sessionmaker[Session] | None = None) -> None:
        self._sessions = session_factory or _session_factory()
        self._session: Session | None = None
        self._repositories: MemberRepositories | None = None

    def __enter__(self) -> SqlAlchemyMemberUnitOfWork:
        if self._session is not None:
            raise StartupError("Unit of work session already open")
        self._session = self._sessions()
        self._repositories = MemberRepositories(
            members=SqlAlchemyMemberRepository(self._session),
            reports=SqlAlchemyAnalyticsRepository(self._session),
        )
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        session = self.session
        try:
            if exc_type is not None:
                session.rollback()
        finally:
            session.close()
            self._session = None
            self._repositories = None
        return False

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work session not open")
        return self._session

    @property
    def repositories(self) -> MemberRepositories:
        if self._repositories is None:
            raise StartupError("Unit of work session not open")
        return self._repositories

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


if TYPE_CHECKING:
    from crushmatch.domain.ports.unit_of_work import MemberUnitOfWork

    _uow_check: MemberUnitOfWork = SqlAlchemyMemberUnitOfWork()
