"""Full-population computation of crush counts, mutual matches and locks."""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from crushmatch.domain.matching.names import NameIndex
from crushmatch.domain.model import AmbiguityPolicy, dedupe

if TYPE_CHECKING:
    from collections.abc import Sequence

    from crushmatch.domain.model import Member

log = logging.getLogger(__name__)


@dataclass(slots=True)
class CrushTally:
    """Where every crush entry of the population went.

    ``by_member`` counts distinct admirers per member id, ``orphans`` counts entries
    by literal text when nobody matches, and ``redundant`` holds self-references
    and repeat entries from one admirer toward the same member. Together they
    account for every entry exactly once.
    """

    by_member: Counter[str] = field(default_factory=Counter[str])
    orphans: Counter[str] = field(default_factory=Counter[str])
    redundant: int = 0

    @property
    def total(self) -> int:
        return sum(self.by_member.values()) + sum(self.orphans.values()) + self.redundant

    def count_for(self, member: Member) -> int:
        # orphan entries keyed by the raw id cover crushes stored under a stale name
        return max(self.by_member.get(member.id, 0), self.orphans.get(member.id, 0))


@dataclass(frozen=True, slots=True)
class MatchedPeer:
    """A mutual edge found during calculation, before timestamps are assigned."""

    peer: Member
    crush: str


@dataclass(slots=True)
class MatchResult:
    crush_counts: CrushTally
    matches_by_member: dict[str, tuple[MatchedPeer, ...]]
    locked_by_member: dict[str, tuple[str, ...]]

    def crush_count(self, member: Member) -> int:
        return self.crush_counts.count_for(member)

    def unique_pairs(self) -> set[frozenset[str]]:
        return {
            frozenset((member_id, matched.peer.id))
            for member_id, peers in self.matches_by_member.items()
            for matched in peers
        }


def calculate_matches(
    members: Sequence[Member],
    *,
    policy: AmbiguityPolicy = AmbiguityPolicy.FIRST,
) -> MatchResult:
    """Compute counts, matches and newly required locks for ``members``.

    Pure over its input. ``members`` should be in a stable order (snapshots sort by
    id) because resolution ties go to the first candidate.
    """

    index = NameIndex.from_members(members, policy=policy)
    targets: dict[str, tuple[Member | None, ...]] = {
        member.id: tuple(index.resolve(crush) for crush in member.crushes) for member in members
    }

    tally = _tally(members, targets)

    admirers_of: dict[str, set[str]] = {}
    for member in members:
        for target in targets[member.id]:
            if target is not None and target.id != member.id:
                admirers_of.setdefault(target.id, set()).add(member.id)

    matches_by_member: dict[str, tuple[MatchedPeer, ...]] = {}
    locked_by_member: dict[str, tuple[str, ...]] = {}
    for member in members:
        if not member.is_verified:
            log.debug("Skipping member %s without identity name", member.id)
            matches_by_member[member.id] = ()
            locked_by_member[member.id] = ()
            continue

        matched: dict[str, MatchedPeer] = {}
        locked: list[str] = []
        for crush, target in zip(member.crushes, targets[member.id], strict=True):
            if target is None or target.id == member.id:
                continue
            if target.id not in admirers_of.get(member.id, ()):
                continue
            locked.append(crush)
            if target.id not in matched:
                matched[target.id] = MatchedPeer(peer=target, crush=crush)
                log.debug("Match found: %s <-> %s", member.identity_name, target.identity_name)

        matches_by_member[member.id] = tuple(matched.values())
        locked_by_member[member.id] = dedupe(locked)

    return MatchResult(
        crush_counts=tally,
        matches_by_member=matches_by_member,
        locked_by_member=locked_by_member,
    )


def _tally(
    members: Sequence[Member],
    targets: dict[str, tuple[Member | None, ...]],
) -> CrushTally:
    tally = CrushTally()
    for member in members:
        seen: set[str] = set()
        for crush, target in zip(member.crushes, targets[member.id], strict=True):
            if target is None:
                log.debug("No member found for crush name %r; counting as orphan", crush)
                tally.orphans[crush] += 1
            elif target.id == member.id or target.id in seen:
                tally.redundant += 1
            else:
                seen.add(target.id)
                tally.by_member[target.id] += 1
    return tally
