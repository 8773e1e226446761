"""One-way ratchet on locked crushes."""

from __future__ import annotations

from typing import TYPE_CHECKING

from crushmatch.domain.model import dedupe

if TYPE_CHECKING:
    from crushmatch.domain.model import Member


def missing_locks(locked: tuple[str, ...], crushes: tuple[str, ...]) -> tuple[str, ...]:
    present = set(crushes)
    return tuple(name for name in dedupe(locked) if name not in present)


def enforce_locks(before: Member, after: Member) -> tuple[str, ...] | None:
    """Return the corrected crush list if ``after`` dropped a crush locked in ``before``.

    ``None`` means the write keeps every lock and can be accepted as-is.
    """

    missing = missing_locks(before.locked_crushes, after.crushes)
    if not missing:
        return None
    return dedupe((*after.crushes, *missing))


def restore_locked(member: Member) -> Member:
    """Bring a single record back in line with ``locked_crushes ⊆ crushes``."""

    corrected = enforce_locks(member, member)
    if corrected is None:
        return member
    return member.with_crushes(corrected)
