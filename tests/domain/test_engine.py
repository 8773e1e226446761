from __future__ import annotations

from dataclasses import replace
from datetime import timedelta
from typing import TYPE_CHECKING

import pytest

from crushmatch.adapters.memory import in_memory_unit_of_work_factory
from crushmatch.config import EngineConfig
from crushmatch.domain.engine import MatchingEngine
from crushmatch.domain.errors import StaleSnapshotError
from crushmatch.domain.model import MemberChange, TriggerOutcome
from tests.helpers.members import InterferingStore, make_member

if TYPE_CHECKING:
    from crushmatch.adapters.memory import InMemoryDatabase
    from tests.helpers.members import FixedClock, MemoryStoreFixture


@pytest.fixture
def engine(memory_store: MemoryStoreFixture, clock: FixedClock) -> MatchingEngine:
    engine = MatchingEngine(memory_store.store, reports=memory_store.store, clock=clock)
    engine.attach()
    return engine


def _register_pair(memory_store: MemoryStoreFixture) -> None:
    memory_store.store.register(make_member("a", "Ann Lee", "Bo Kim"))
    memory_store.store.register(make_member("b", "Bo Kim", "Ann Lee"))


def test_registering_mutual_members_matches_them(
    memory_store: MemoryStoreFixture,
    engine: MatchingEngine,
) -> None:
    _register_pair(memory_store)

    assert [m.peer_id for m in memory_store.stored("a").matches] == ["b"]
    assert [m.peer_id for m in memory_store.stored("b").matches] == ["a"]
    assert memory_store.stored("a").locked_crushes == ("Bo Kim",)


def test_new_member_absorbs_orphan_crushes(
    memory_store: MemoryStoreFixture,
    engine: MatchingEngine,
) -> None:
    memory_store.store.register(make_member("a", "Ann Lee", "Jon Smith"))
    memory_store.store.register(make_member("b", "Bo Kim", "Jon A. Smith"))

    jon = memory_store.store.register(make_member("j", "Jon Smith"))

    assert jon.id == "j"
    assert memory_store.stored("j").crush_count == 2


def test_immaterial_change_is_skipped(engine: MatchingEngine) -> None:
    before = make_member("a", "Ann Lee", "Bo Kim")
    after = replace(before, crushes=("  bo KIM ",), crush_count=4)

    assert engine.on_member_changed(MemberChange(before, after)) is TriggerOutcome.SKIPPED


def test_removing_locked_crush_is_restored(
    memory_store: MemoryStoreFixture,
    engine: MatchingEngine,
    caplog: pytest.LogCaptureFixture,
) -> None:
    _register_pair(memory_store)
    before = memory_store.stored("a")

    with caplog.at_level("WARNING"):
        outcome = engine.on_member_changed(MemberChange(before, before.with_crushes(["Cy Park"])))

    assert outcome is TriggerOutcome.RESTORED
    assert "tried to remove locked crushes" in caplog.text
    assert memory_store.stored("a").crushes == ("Cy Park", "Bo Kim")
    assert [m.peer_id for m in memory_store.stored("a").matches] == ["b"]


def test_client_write_dropping_lock_is_corrected_through_change_feed(
    memory_store: MemoryStoreFixture,
    engine: MatchingEngine,
) -> None:
    _register_pair(memory_store)

    memory_store.store.update_member("a", crushes=[])

    ann = memory_store.stored("a")
    assert "Bo Kim" in ann.crushes
    assert ann.locked_crushes == ("Bo Kim",)


def test_material_change_recomputes(
    memory_store: MemoryStoreFixture,
    engine: MatchingEngine,
) -> None:
    memory_store.store.register(make_member("a", "Ann Lee"))
    memory_store.store.register(make_member("b", "Bo Kim"))

    change = memory_store.store.update_member("b", crushes=["Ann Lee"])

    assert change.before.crushes == ()
    assert memory_store.stored("a").crush_count == 1


def test_rename_rewrites_crushes_naming_old_identity(
    memory_store: MemoryStoreFixture,
    engine: MatchingEngine,
) -> None:
    _register_pair(memory_store)
    memory_store.store.register(make_member("c", "Cy Park", "bo kim"))

    memory_store.store.update_member("b", identity_name="Bo Park")

    ann = memory_store.stored("a")
    assert ann.crushes == ("Bo Park",)
    assert ann.locked_crushes == ("Bo Park",)
    assert [(m.peer_id, m.peer_name) for m in ann.matches] == [("b", "Bo Park")]
    assert memory_store.stored("c").crushes == ("Bo Park",)
    assert memory_store.stored("b").crush_count == 2


def test_unsubscribed_engine_ignores_changes(
    memory_store: MemoryStoreFixture,
    clock: FixedClock,
) -> None:
    engine = MatchingEngine(memory_store.store, clock=clock)
    unsubscribe = engine.attach()
    unsubscribe()

    memory_store.store.register(make_member("a", "Ann Lee"))
    memory_store.store.register(make_member("b", "Bo Kim", "Ann Lee"))

    assert memory_store.stored("a").crush_count == 0


def test_periodic_report_is_appended_to_report_storage(
    memory_store: MemoryStoreFixture,
    engine: MatchingEngine,
    clock: FixedClock,
) -> None:
    _register_pair(memory_store)
    memory_store.store.touch_login("a", at=clock.now - timedelta(hours=2))

    report = engine.periodic_report(manual=True)

    assert memory_store.database.reports == [report]
    assert memory_store.store.latest_report() == report
    assert report.manual is True
    assert report.total_members == 2
    assert report.matched_pairs == ("Ann Lee - Bo Kim",)
    assert report.active_members_pct == 50.0


def _rename_store(
    clock: FixedClock,
    interfere_on: set[int],
) -> tuple[InMemoryDatabase, InterferingStore]:
    database, factory = in_memory_unit_of_work_factory()
    database.members.update(
        {
            "a": make_member("a", "Ann Lee", "Old Name", "Cy Park"),
            "o": make_member("o", "New Name"),
        }
    )
    store = InterferingStore(
        factory,
        victim_id="a",
        interfere_on=interfere_on,
        victim_crushes=["Old Name", "Cy Park", "Dee Moss"],
        clock=clock,
    )
    return database, store


def test_rename_rewrite_keeps_client_write_landing_mid_rewrite(clock: FixedClock) -> None:
    database, store = _rename_store(clock, interfere_on={1})
    engine = MatchingEngine(store, clock=clock)

    outcome = engine.on_member_changed(
        MemberChange(make_member("o", "Old Name"), database.members["o"])
    )

    assert outcome is TriggerOutcome.RECOMPUTED
    assert database.members["a"].crushes == ("New Name", "Cy Park", "Dee Moss")
    assert database.members["o"].crush_count == 1
    # one bump for the client write, one for the rewrite itself
    assert database.data_version == 2


def test_rename_rewrite_gives_up_after_max_attempts(clock: FixedClock) -> None:
    database, store = _rename_store(clock, interfere_on={1, 2})
    engine = MatchingEngine(store, config=EngineConfig(max_attempts=2), clock=clock)

    with pytest.raises(StaleSnapshotError):
        engine.on_member_changed(MemberChange(make_member("o", "Old Name"), database.members["o"]))

    assert database.members["a"].crushes == ("Old Name", "Cy Park", "Dee Moss")
    assert store.commit_calls == 2
