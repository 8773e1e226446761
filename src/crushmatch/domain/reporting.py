"""Read-only aggregate statistics over the member collection."""

from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING

from crushmatch.domain.matching.calculator import calculate_matches
from crushmatch.domain.model import AmbiguityPolicy, AnalyticsReport

if TYPE_CHECKING:
    from datetime import datetime

    from crushmatch.domain.model import Member, MemberSnapshot

UNNAMED_MEMBER = "(Unnamed Member)"


def _label(member: Member) -> str:
    return member.identity_name.strip() or member.contact.strip() or UNNAMED_MEMBER


def _matched_pairs(members: tuple[Member, ...]) -> tuple[str, ...]:
    names = {member.id: _label(member) for member in members}
    pairs: dict[frozenset[str], str] = {}
    for member in members:
        for match in member.matches:
            key = frozenset((member.id, match.peer_id))
            if key in pairs:
                continue
            peer_label = names.get(match.peer_id, match.peer_name or UNNAMED_MEMBER)
            pairs[key] = " - ".join(sorted((names[member.id], peer_label)))
    return tuple(sorted(pairs.values()))


def build_report(
    snapshot: MemberSnapshot,
    *,
    now: datetime,
    active_window: timedelta = timedelta(hours=24),
    policy: AmbiguityPolicy = AmbiguityPolicy.FIRST,
    manual: bool = False,
) -> AnalyticsReport:
    """Summarise ``snapshot`` as stored; nothing is recomputed onto members."""

    members = snapshot.members
    total = len(members)
    total_crushes = sum(len(member.crushes) for member in members)
    tally = calculate_matches(members, policy=policy).crush_counts

    cutoff = now - active_window
    active = sum(
        1 for member in members if member.last_login is not None and member.last_login > cutoff
    )
    pairs = _matched_pairs(members)

    return AnalyticsReport(
        created_at=now,
        total_members=total,
        verified_members=sum(1 for member in members if member.is_verified),
        total_matches=len(pairs),
        matched_pairs=pairs,
        total_crushes=total_crushes,
        orphan_crushes=sum(tally.orphans.values()),
        people_with_crushes=sum(1 for member in members if member.crush_count > 0),
        avg_crushes=round(total_crushes / total, 2) if total else 0.0,
        active_members_pct=round(active / total * 100, 2) if total else 0.0,
        manual=manual,
    )
