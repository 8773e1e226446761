"""Decide whether a member write should cause a full recompute.

Only the fields a client may change are compared. Matches, counts and locks are
written by the engine itself, so differences there never count as material.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from crushmatch.domain.model import Member


def crush_signature(crushes: Iterable[str]) -> list[str]:
    return sorted(" ".join(crush.lower().split()) for crush in crushes)


def crushes_changed(before: Member, after: Member) -> bool:
    return crush_signature(before.crushes) != crush_signature(after.crushes)


def identity_changed(before: Member, after: Member) -> bool:
    return before.identity_name != after.identity_name


def is_material(before: Member, after: Member) -> bool:
    return crushes_changed(before, after) or identity_changed(before, after)
