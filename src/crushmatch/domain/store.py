"""Member store built on top of a unit of work."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import TYPE_CHECKING

from crushmatch.domain.clock import utcnow
from crushmatch.domain.errors import DuplicateMemberError, MemberNotFoundError, StaleSnapshotError
from crushmatch.domain.model import Member, MemberChange, MemberSnapshot

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence
    from datetime import datetime

    from crushmatch.domain.clock import Clock
    from crushmatch.domain.model import AnalyticsReport, DerivedUpdate
    from crushmatch.domain.ports.persistence import MemberRepository
    from crushmatch.domain.ports.store import MemberListener, Unsubscribe
    from crushmatch.domain.ports.unit_of_work import MemberUnitOfWork

log = logging.getLogger(__name__)


class UnitOfWorkMemberStore:
    """:class:`~crushmatch.domain.ports.store.MemberStore` over any member unit of work.

    Each public call opens its own unit of work. Client writes bump the
    collection ``data_version`` and are published to watchers after commit;
    engine batches leave the version alone unless they rewrite client-owned
    fields, and publish nothing.
    """

    def __init__(
        self,
        unit_of_work_factory: Callable[[], MemberUnitOfWork],
        *,
        clock: Clock = utcnow,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._clock = clock
        self._listeners: list[MemberListener] = []

    # reads ---------------------------------------------------------------

    def snapshot(self) -> MemberSnapshot:
        with self._uow_factory() as uow:
            repository = uow.repositories.members
            members = sorted(repository.list_all(), key=lambda member: member.id)
            return MemberSnapshot(members=tuple(members), data_version=repository.data_version())

    def get(self, member_id: str) -> Member:
        with self._uow_factory() as uow:
            return _require(uow.repositories.members, member_id)

    # engine writes -------------------------------------------------------

    def commit_batch(
        self,
        updates: Sequence[DerivedUpdate],
        *,
        expected_version: int | None = None,
        bump_version: bool = False,
    ) -> int:
        """Apply ``updates`` in one transaction and return the resulting ``data_version``.

        With ``expected_version`` the version row stays locked from the check
        until commit, so no client write can slip in between. ``bump_version``
        marks the batch as rewriting client-owned fields.
        """

        now = self._clock()
        with self._uow_factory() as uow:
            repository = uow.repositories.members
            if expected_version is not None and not repository.lock_data_version(
                expected_version
            ):
                raise StaleSnapshotError(expected_version, repository.data_version())
            if not updates:
                return repository.data_version()
            for update in updates:
                member = _require(repository, update.member_id)
                repository.save(replace(member.apply(update), updated_at=now))
            version = (
                repository.bump_data_version() if bump_version else repository.data_version()
            )
            uow.commit()
        log.debug("Committed batch of %s member update(s)", len(updates))
        return version

    # client writes -------------------------------------------------------

    def register(self, member: Member) -> Member:
        now = self._clock()
        stored = replace(
            member,
            created_at=member.created_at or now,
            updated_at=member.updated_at or now,
        )
        with self._uow_factory() as uow:
            repository = uow.repositories.members
            # bump first so the version row is locked before anything is read
            repository.bump_data_version()
            if repository.get(stored.id) is not None:
                raise DuplicateMemberError(stored.id)
            repository.add(stored)
            uow.commit()
        log.info("Registered member %s (%s)", stored.id, stored.identity_name or "unverified")
        self._publish(MemberChange(before=Member(id=stored.id), after=stored))
        return stored

    def update_member(
        self,
        member_id: str,
        *,
        crushes: Iterable[str] | None = None,
        identity_name: str | None = None,
    ) -> MemberChange:
        return self._client_write(member_id, crushes=crushes, identity_name=identity_name)

    def write_crushes(
        self,
        member_id: str,
        crushes: Iterable[str],
        *,
        notify: bool = True,
    ) -> MemberChange:
        return self._client_write(member_id, crushes=crushes, notify=notify)

    def touch_login(self, member_id: str, *, at: datetime | None = None) -> Member:
        """Record a sign-in; ``last_login`` drives the report's activity figure."""

        with self._uow_factory() as uow:
            repository = uow.repositories.members
            member = replace(_require(repository, member_id), last_login=at or self._clock())
            repository.save(member)
            uow.commit()
        return member

    def _client_write(
        self,
        member_id: str,
        *,
        crushes: Iterable[str] | None = None,
        identity_name: str | None = None,
        notify: bool = True,
    ) -> MemberChange:
        with self._uow_factory() as uow:
            repository = uow.repositories.members
            repository.bump_data_version()
            before = _require(repository, member_id)
            after = replace(
                before,
                crushes=before.crushes if crushes is None else tuple(crushes),
                identity_name=before.identity_name if identity_name is None else identity_name,
                updated_at=self._clock(),
            )
            repository.save(after)
            uow.commit()
        change = MemberChange(before=before, after=after)
        if notify:
            self._publish(change)
        return change

    # reports -------------------------------------------------------------

    def append_report(self, report: AnalyticsReport) -> None:
        with self._uow_factory() as uow:
            uow.repositories.reports.add(report)
            uow.commit()

    def latest_report(self) -> AnalyticsReport | None:
        with self._uow_factory() as uow:
            return uow.repositories.reports.latest()

    # watchers ------------------------------------------------------------

    def watch(self, listener: MemberListener) -> Unsubscribe:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self, change: MemberChange) -> None:
        for listener in tuple(self._listeners):
            listener(change)


def _require(repository: MemberRepository, member_id: str) -> Member:
    member = repository.get(member_id)
    if member is None:
        raise MemberNotFoundError(member_id)
    return member


if TYPE_CHECKING:
    from typing import cast

    from crushmatch.domain.ports.store import MemberStore, ReportSink

    _factory_stub = cast("Callable[[], MemberUnitOfWork]", object())
    _store_check: MemberStore = UnitOfWorkMemberStore(_factory_stub)
    _sink_check: ReportSink = UnitOfWorkMemberStore(_factory_stub)
