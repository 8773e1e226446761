"""Carry crushes and locks over when a member's identity name changes."""

from __future__ import annotations

from typing import TYPE_CHECKING

from crushmatch.domain.matching.names import normalize_name
from crushmatch.domain.model import DerivedUpdate, dedupe

if TYPE_CHECKING:
    from collections.abc import Iterable

    from crushmatch.domain.model import Member


def _replace(values: tuple[str, ...], old_key: str, new_name: str) -> tuple[str, ...]:
    return dedupe(new_name if normalize_name(value) == old_key else value for value in values)


def rename_references(
    members: Iterable[Member],
    old_name: str,
    new_name: str,
    *,
    renamed_id: str,
) -> list[DerivedUpdate]:
    """Rewrite other members' crushes naming ``old_name`` so they point at ``new_name``.

    Only entries whose normalized text equals the old name are touched; matches
    and counts are carried unchanged and left for the following recompute.
    """

    old_key = normalize_name(old_name)
    if not old_key or old_key == normalize_name(new_name):
        return []

    updates: list[DerivedUpdate] = []
    for member in members:
        if member.id == renamed_id:
            continue
        crushes = _replace(member.crushes, old_key, new_name)
        locked = _replace(member.locked_crushes, old_key, new_name)
        if crushes == member.crushes and locked == member.locked_crushes:
            continue
        updates.append(
            DerivedUpdate(
                member_id=member.id,
                crushes=crushes,
                locked_crushes=locked,
                matches=member.matches,
                crush_count=member.crush_count,
            )
        )
    return updates
