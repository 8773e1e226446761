from __future__ import annotations

from dataclasses import replace

from crushmatch.domain.matching.ratchet import enforce_locks, missing_locks, restore_locked
from tests.helpers.members import make_member


def test_enforce_locks_accepts_write_keeping_every_lock() -> None:
    before = make_member("a", "Ann Lee", "Bo Kim", locked=["Bo Kim"])
    after = replace(before, crushes=("Bo Kim", "Cy Park"))

    assert enforce_locks(before, after) is None


def test_enforce_locks_appends_dropped_locks_after_remaining_crushes() -> None:
    before = make_member("a", "Ann Lee", "Bo Kim", "Cy Park", locked=["Bo Kim", "Cy Park"])
    after = replace(before, crushes=("Dee Moss",))

    assert enforce_locks(before, after) == ("Dee Moss", "Bo Kim", "Cy Park")


def test_enforce_locks_uses_locks_from_before_image() -> None:
    before = make_member("a", "Ann Lee", "Bo Kim")
    after = replace(before, crushes=(), locked_crushes=("Bo Kim",))

    assert enforce_locks(before, after) is None


def test_missing_locks_ignores_duplicate_lock_entries() -> None:
    assert missing_locks(("Bo Kim", "Bo Kim"), ()) == ("Bo Kim",)


def test_restore_locked_returns_same_record_when_consistent() -> None:
    member = make_member("a", "Ann Lee", "Bo Kim", locked=["Bo Kim"])

    assert restore_locked(member) is member


def test_restore_locked_repairs_record_missing_a_lock() -> None:
    member = make_member("a", "Ann Lee", locked=["Bo Kim"])

    restored = restore_locked(member)

    assert restored.crushes == ("Bo Kim",)
    assert restored.locked_crushes == ("Bo Kim",)
