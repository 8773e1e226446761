"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING

from crushmatch.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyMemberUnitOfWork,
    is_started,
    startup,
)
from crushmatch.config import get_engine_config, get_report_config
from crushmatch.domain.engine import MatchingEngine
from crushmatch.domain.model import Member, dedupe, new_member_id
from crushmatch.domain.ports.unit_of_work import MemberUnitOfWork
from crushmatch.domain.store import UnitOfWorkMemberStore

if TYPE_CHECKING:
    from collections.abc import Iterable

    from crushmatch.config import EngineConfig, ReportConfig
    from crushmatch.domain.matching.orchestrator import RecomputeStats
    from crushmatch.domain.model import AnalyticsReport, MemberChange

UnitOfWorkFactory = Callable[[], MemberUnitOfWork]


log = getLogger(__name__)


def _effective_uow(unit_of_work_factory: UnitOfWorkFactory | None) -> UnitOfWorkFactory:
    if unit_of_work_factory is not None:
        return unit_of_work_factory
    if not is_started():
        startup()
    return SqlAlchemyMemberUnitOfWork


def build_engine(
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    config: EngineConfig | None = None,
    report_config: ReportConfig | None = None,
) -> tuple[UnitOfWorkMemberStore, MatchingEngine]:
    """Return a store and an engine already subscribed to its change feed."""

    store = UnitOfWorkMemberStore(_effective_uow(unit_of_work_factory))
    engine = MatchingEngine(
        store,
        config=config or get_engine_config(),
        report_config=report_config or get_report_config(),
        reports=store,
    )
    engine.attach()
    return store, engine


def register_member(
    *,
    identity_name: str = "",
    contact: str = "",
    crushes: Iterable[str] = (),
    member_id: str | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> Member:
    """Store a new member; the engine recomputes so earlier orphan crushes can resolve."""

    store, _ = build_engine(unit_of_work_factory=unit_of_work_factory)
    member = Member(
        id=member_id or new_member_id(),
        identity_name=identity_name.strip(),
        contact=contact.strip(),
        crushes=dedupe(crush.strip() for crush in crushes if crush.strip()),
    )
    store.register(member)
    return store.get(member.id)


def update_crushes(
    member_id: str,
    crushes: Iterable[str],
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> Member:
    """Replace a member's crush list as the member would from the client."""

    store, _ = build_engine(unit_of_work_factory=unit_of_work_factory)
    change: MemberChange = store.update_member(
        member_id,
        crushes=dedupe(crush.strip() for crush in crushes if crush.strip()),
    )
    log.info("Updated crushes for member %s: %s", member_id, list(change.after.crushes))
    return store.get(member_id)


def rename_member(
    member_id: str,
    identity_name: str,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> Member:
    """Change a member's verified identity name, rewriting crushes that named them."""

    store, _ = build_engine(unit_of_work_factory=unit_of_work_factory)
    store.update_member(member_id, identity_name=identity_name.strip())
    return store.get(member_id)


def show_member(
    member_id: str,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> Member:
    store = UnitOfWorkMemberStore(_effective_uow(unit_of_work_factory))
    return store.get(member_id)


def recompute_all(
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    config: EngineConfig | None = None,
) -> RecomputeStats:
    """Run a full recompute over every stored member."""

    _, engine = build_engine(unit_of_work_factory=unit_of_work_factory, config=config)
    log.info(
        "Starting full recompute: batch_size=%s, max_attempts=%s, ambiguous_names=%s",
        engine.config.batch_size,
        engine.config.max_attempts,
        engine.config.ambiguity_policy,
    )
    return engine.trigger_full_recompute()


def generate_report(
    *,
    manual: bool = True,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> AnalyticsReport:
    """Compute an analytics report and append it to report storage."""

    _, engine = build_engine(unit_of_work_factory=unit_of_work_factory)
    return engine.periodic_report(manual=manual)


def record_login(
    member_id: str,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> Member:
    """Stamp ``last_login`` for a member who just signed in."""

    store = UnitOfWorkMemberStore(_effective_uow(unit_of_work_factory))
    member = store.touch_login(member_id)
    log.info("Recorded login for member %s", member_id)
    return member
