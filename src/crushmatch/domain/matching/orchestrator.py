"""Full recompute: snapshot, restore locks, calculate, write back in batches."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from itertools import batched
from typing import TYPE_CHECKING

from crushmatch.config.engine import EngineConfig
from crushmatch.domain.clock import utcnow
from crushmatch.domain.errors import StaleSnapshotError
from crushmatch.domain.matching.calculator import MatchResult, calculate_matches
from crushmatch.domain.matching.ratchet import restore_locked
from crushmatch.domain.model import DerivedUpdate, MatchInfo, dedupe

if TYPE_CHECKING:
    from datetime import datetime

    from crushmatch.domain.clock import Clock
    from crushmatch.domain.model import Member, MemberSnapshot
    from crushmatch.domain.ports.store import MemberStore

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RecomputeStats:
    """Outcome of one full recompute."""

    members: int
    updated: int
    batches: int
    matches: int
    orphan_crushes: int
    restored_locks: int
    attempts: int
    data_version: int


class RecomputeOrchestrator:
    """Owns every write to ``matches``, ``crush_count`` and ``locked_crushes``.

    Batches are individually atomic but the run as a whole is not. Because the
    computation is a pure function of the snapshot, re-running after a crash
    converges to the same state. Every batch is committed against the snapshot's
    ``data_version``; a client write in between aborts the attempt and the run
    starts over from a fresh snapshot.
    """

    def __init__(
        self,
        store: MemberStore,
        *,
        config: EngineConfig | None = None,
        clock: Clock = utcnow,
    ) -> None:
        self.store = store
        self.config = config or EngineConfig()
        self._clock = clock

    def run_full_recompute(self) -> RecomputeStats:
        attempt = 1
        while True:
            try:
                return self._run_once(attempt)
            except StaleSnapshotError as exc:
                if attempt >= self.config.max_attempts:
                    raise
                log.warning(
                    "Recompute attempt %s/%s aborted: %s",
                    attempt,
                    self.config.max_attempts,
                    exc,
                )
                attempt += 1

    def _run_once(self, attempt: int) -> RecomputeStats:
        snapshot = self.store.snapshot()
        log.info(
            "Starting recompute: members=%s, data_version=%s, attempt=%s",
            len(snapshot),
            snapshot.data_version,
            attempt,
        )

        restored = tuple(restore_locked(member) for member in snapshot.members)
        restored_count = sum(
            1
            for before, after in zip(snapshot.members, restored, strict=True)
            if before is not after
        )
        if restored_count:
            log.warning("Restored locked crushes in memory for %s member(s)", restored_count)

        result = calculate_matches(restored, policy=self.config.ambiguity_policy)
        updates = self.derive_updates(snapshot, restored, result)

        batches = 0
        for chunk in batched(updates, self.config.batch_size):
            self.store.commit_batch(chunk, expected_version=snapshot.data_version)
            batches += 1

        stats = RecomputeStats(
            members=len(snapshot),
            updated=len(updates),
            batches=batches,
            matches=len(result.unique_pairs()),
            orphan_crushes=sum(result.crush_counts.orphans.values()),
            restored_locks=restored_count,
            attempts=attempt,
            data_version=snapshot.data_version,
        )
        log.info(
            "Finished recompute: updated=%s, batches=%s, matches=%s, orphan_crushes=%s",
            stats.updated,
            stats.batches,
            stats.matches,
            stats.orphan_crushes,
        )
        return stats

    def derive_updates(
        self,
        snapshot: MemberSnapshot,
        restored: tuple[Member, ...],
        result: MatchResult,
    ) -> list[DerivedUpdate]:
        """Return updates for members whose stored state differs from ``result``."""

        now = self._clock()
        updates: list[DerivedUpdate] = []
        for original, member in zip(snapshot.members, restored, strict=True):
            update = _derive(original, member, result, now)
            if original.apply(update) != original:
                updates.append(update)
        return updates


def _derive(
    original: Member,
    member: Member,
    result: MatchResult,
    now: datetime,
) -> DerivedUpdate:
    previous_at = {match.peer_id: match.matched_at for match in original.matches}
    matches = tuple(
        MatchInfo(
            peer_id=matched.peer.id,
            peer_name=matched.peer.identity_name,
            peer_contact=matched.peer.contact,
            matched_at=previous_at.get(matched.peer.id, now),
        )
        for matched in result.matches_by_member.get(member.id, ())
    )
    locked = result.locked_by_member.get(member.id, ())
    return DerivedUpdate(
        member_id=member.id,
        crushes=None if member.crushes == original.crushes else member.crushes,
        locked_crushes=dedupe((*original.locked_crushes, *locked)),
        matches=matches,
        crush_count=result.crush_count(member),
    )
