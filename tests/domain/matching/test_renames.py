from __future__ import annotations

from crushmatch.domain.matching.renames import rename_references
from tests.helpers.members import make_member


def test_rename_rewrites_crushes_and_locks_naming_old_name() -> None:
    ann = make_member("a", "Ann Lee", "bo  kim", "Cy Park", locked=["bo  kim"])
    bo = make_member("b", "Bo Park", "Ann Lee")

    updates = rename_references([ann, bo], "Bo Kim", "Bo Park", renamed_id="b")

    assert len(updates) == 1
    (update,) = updates
    assert update.member_id == "a"
    assert update.crushes == ("Bo Park", "Cy Park")
    assert update.locked_crushes == ("Bo Park",)


def test_rename_leaves_partial_name_matches_alone() -> None:
    ann = make_member("a", "Ann Lee", "Bo X Kim")

    assert rename_references([ann], "Bo Kim", "Bo Park", renamed_id="b") == []


def test_rename_skips_renamed_member_and_no_op_renames() -> None:
    bo = make_member("b", "Bo Kim", "Bo Kim")

    assert rename_references([bo], "Bo Kim", "Bo Park", renamed_id="b") == []
    assert rename_references([bo], "Bo Kim", "BO KIM", renamed_id="x") == []
    assert rename_references([bo], "", "Bo Park", renamed_id="x") == []


def test_rename_collapses_entries_that_become_duplicates() -> None:
    ann = make_member("a", "Ann Lee", "Bo Kim", "Bo Park")

    (update,) = rename_references([ann], "Bo Kim", "Bo Park", renamed_id="b")

    assert update.crushes == ("Bo Park",)
