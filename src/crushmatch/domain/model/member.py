"""Member records and the value objects exchanged with a member store."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING
from uuid import uuid4

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import datetime


def new_member_id() -> str:
    return uuid4().hex


def dedupe(values: Iterable[str]) -> tuple[str, ...]:
    """Drop repeated entries while keeping first-seen order."""

    return tuple(dict.fromkeys(values))


@dataclass(frozen=True, slots=True)
class MatchInfo:
    """One confirmed mutual edge as seen from the owning member."""

    peer_id: str
    peer_name: str
    peer_contact: str
    matched_at: datetime


@dataclass(frozen=True, slots=True, kw_only=True)
class Member:
    """A signed-up roster participant.

    ``crushes`` and ``identity_name`` belong to the member's client; ``matches``,
    ``crush_count`` and growth of ``locked_crushes`` belong to the recompute engine.
    """

    id: str = field(default_factory=new_member_id)
    identity_name: str = ""
    contact: str = ""
    crushes: tuple[str, ...] = ()
    locked_crushes: tuple[str, ...] = ()
    matches: tuple[MatchInfo, ...] = ()
    crush_count: int = 0

    created_at: datetime | None = None
    updated_at: datetime | None = None
    last_login: datetime | None = None

    @property
    def is_verified(self) -> bool:
        return bool(self.identity_name.strip())

    def with_crushes(self, crushes: Iterable[str]) -> Member:
        return replace(self, crushes=tuple(crushes))

    def apply(self, update: DerivedUpdate) -> Member:
        """Return a copy carrying the engine-owned fields of ``update``."""

        return replace(
            self,
            crushes=self.crushes if update.crushes is None else update.crushes,
            locked_crushes=update.locked_crushes,
            matches=update.matches,
            crush_count=update.crush_count,
        )


@dataclass(frozen=True, slots=True)
class MemberChange:
    """Before/after images of a single member write."""

    before: Member
    after: Member

    @property
    def member_id(self) -> str:
        return self.after.id


@dataclass(frozen=True, slots=True, kw_only=True)
class DerivedUpdate:
    """Engine-owned state to write back for one member.

    ``crushes`` is only set when locked entries had to be restored in memory.
    """

    member_id: str
    locked_crushes: tuple[str, ...]
    matches: tuple[MatchInfo, ...]
    crush_count: int
    crushes: tuple[str, ...] | None = None


@dataclass(frozen=True, slots=True)
class MemberSnapshot:
    """Consistent read of the whole member collection.

    ``members`` is sorted by id; ``data_version`` is the collection stamp at read time.
    """

    members: tuple[Member, ...]
    data_version: int

    def by_id(self) -> dict[str, Member]:
        return {member.id: member for member in self.members}

    def __len__(self) -> int:
        return len(self.members)
