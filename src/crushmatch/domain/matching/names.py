"""Free-text crush name resolution against member identity names.

Resolution order:
- exact match on the normalized identity name
- first-token + last-token match, to tolerate middle names and initials
- otherwise no match (an "orphan" crush)

Members with a blank identity name are never resolution targets. Ties are broken
by iteration order; snapshots hand members over sorted by id so the outcome does
not depend on storage order.
"""

from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from crushmatch.domain.model import AmbiguityPolicy

if TYPE_CHECKING:
    from collections.abc import Iterable

    from crushmatch.domain.model import Member

_NON_ALNUM = re.compile(r"[\W_]+")


def normalize_name(value: str) -> str:
    """Fold a name to its comparison form (accents stripped, lowercase, single spaces)."""

    text = unicodedata.normalize("NFKD", value)
    text = "".join(ch for ch in text if not unicodedata.combining(ch))
    text = text.lower()
    text = _NON_ALNUM.sub(" ", text)
    return " ".join(text.split())


def first_last_key(normalized: str) -> tuple[str, str] | None:
    tokens = normalized.split(" ")
    if len(tokens) < 2:  # noqa: PLR2004
        return None
    return tokens[0], tokens[-1]


@dataclass(slots=True)
class NameIndex:
    """Lookup tables over a member list, equivalent to :func:`resolve_name`.

    Built once per recompute so every crush is resolved in constant time.
    """

    policy: AmbiguityPolicy = AmbiguityPolicy.FIRST
    _exact: dict[str, Member] = field(default_factory=dict[str, "Member"])
    _first_last: dict[tuple[str, str], list[Member]] = field(
        default_factory=dict[tuple[str, str], list["Member"]]
    )

    @classmethod
    def from_members(
        cls,
        members: Iterable[Member],
        *,
        policy: AmbiguityPolicy = AmbiguityPolicy.FIRST,
    ) -> NameIndex:
        index = cls(policy=policy)
        for member in members:
            index.add(member)
        return index

    def add(self, member: Member) -> None:
        if not member.is_verified:
            return
        normalized = normalize_name(member.identity_name)
        if not normalized:
            return
        self._exact.setdefault(normalized, member)
        key = first_last_key(normalized)
        if key is not None:
            self._first_last.setdefault(key, []).append(member)

    def resolve(self, candidate: str) -> Member | None:
        normalized = normalize_name(candidate)
        if not normalized:
            return None

        exact = self._exact.get(normalized)
        if exact is not None:
            return exact

        key = first_last_key(normalized)
        if key is None:
            return None
        hits = self._first_last.get(key)
        if not hits:
            return None
        if len(hits) > 1 and self.policy is AmbiguityPolicy.REJECT:
            return None
        return hits[0]


def resolve_name(
    candidate: str,
    members: Iterable[Member],
    *,
    policy: AmbiguityPolicy = AmbiguityPolicy.FIRST,
) -> Member | None:
    """Resolve ``candidate`` to a member, or ``None`` when nobody matches."""

    return NameIndex.from_members(members, policy=policy).resolve(candidate)
