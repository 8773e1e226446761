"""Entry points the surrounding system calls into."""

from __future__ import annotations

import logging
from datetime import timedelta
from itertools import batched
from typing import TYPE_CHECKING

from crushmatch.config.engine import EngineConfig, ReportConfig
from crushmatch.domain.clock import utcnow
from crushmatch.domain.errors import StaleSnapshotError
from crushmatch.domain.matching.orchestrator import RecomputeOrchestrator
from crushmatch.domain.matching.ratchet import enforce_locks, missing_locks
from crushmatch.domain.matching.renames import rename_references
from crushmatch.domain.matching.triggers import identity_changed, is_material
from crushmatch.domain.model import TriggerOutcome
from crushmatch.domain.reporting import build_report

if TYPE_CHECKING:
    from crushmatch.domain.clock import Clock
    from crushmatch.domain.matching.orchestrator import RecomputeStats
    from crushmatch.domain.model import AnalyticsReport, MemberChange
    from crushmatch.domain.ports.store import MemberStore, ReportSink, Unsubscribe

log = logging.getLogger(__name__)


class MatchingEngine:
    """Reacts to member changes and runs recomputes and reports on demand."""

    def __init__(
        self,
        store: MemberStore,
        *,
        config: EngineConfig | None = None,
        report_config: ReportConfig | None = None,
        reports: ReportSink | None = None,
        clock: Clock = utcnow,
    ) -> None:
        self.store = store
        self.config = config or EngineConfig()
        self.report_config = report_config or ReportConfig()
        self.reports = reports
        self._clock = clock
        self.orchestrator = RecomputeOrchestrator(store, config=self.config, clock=clock)

    def attach(self) -> Unsubscribe:
        """Subscribe :meth:`on_member_changed` to the store's change feed."""

        return self.store.watch(self.on_member_changed)

    def on_member_changed(self, change: MemberChange) -> TriggerOutcome:
        before, after = change.before, change.after
        if not is_material(before, after):
            log.debug("No material change for member %s, skipping", after.id)
            return TriggerOutcome.SKIPPED

        corrected = enforce_locks(before, after)
        if corrected is not None:
            log.warning(
                "Member %s tried to remove locked crushes %s; restoring",
                after.id,
                list(missing_locks(before.locked_crushes, after.crushes)),
            )
            # the corrective write re-enters through the change feed
            self.store.write_crushes(after.id, corrected)
            return TriggerOutcome.RESTORED

        if identity_changed(before, after) and before.is_verified and after.is_verified:
            self._propagate_rename(after.id, before.identity_name, after.identity_name)

        log.info("Material change for member %s, recomputing", after.id)
        self.trigger_full_recompute()
        return TriggerOutcome.RECOMPUTED

    def trigger_full_recompute(self) -> RecomputeStats:
        return self.orchestrator.run_full_recompute()

    def periodic_report(self, *, manual: bool = False) -> AnalyticsReport:
        report = build_report(
            self.store.snapshot(),
            now=self._clock(),
            active_window=timedelta(hours=self.report_config.active_window_hours),
            policy=self.config.ambiguity_policy,
            manual=manual,
        )
        if self.reports is not None:
            self.reports.append_report(report)
        log.info(
            "Report %s: members=%s, matches=%s, crushes=%s",
            report.id,
            report.total_members,
            report.total_matches,
            report.total_crushes,
        )
        return report

    def _propagate_rename(self, member_id: str, old_name: str, new_name: str) -> None:
        attempt = 1
        while True:
            try:
                rewritten = self._rewrite_references(member_id, old_name, new_name)
            except StaleSnapshotError as exc:
                if attempt >= self.config.max_attempts:
                    raise
                log.warning(
                    "Rename rewrite attempt %s/%s aborted: %s",
                    attempt,
                    self.config.max_attempts,
                    exc,
                )
                attempt += 1
            else:
                break
        if rewritten:
            log.info(
                "Rewrote crushes naming %r to %r for %s member(s)",
                old_name,
                new_name,
                rewritten,
            )

    def _rewrite_references(self, member_id: str, old_name: str, new_name: str) -> int:
        snapshot = self.store.snapshot()
        updates = rename_references(
            snapshot.members,
            old_name,
            new_name,
            renamed_id=member_id,
        )
        # crushes are client-owned, so each batch bumps the version it was checked against
        version = snapshot.data_version
        for chunk in batched(updates, self.config.batch_size):
            version = self.store.commit_batch(chunk, expected_version=version, bump_version=True)
        return len(updates)
