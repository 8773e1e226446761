from __future__ import annotations

from datetime import UTC, datetime

import pytest

from crushmatch.domain.matching.orchestrator import RecomputeStats
from crushmatch.domain.model import AnalyticsReport, Member
from crushmatch.ui import cli


def _stats() -> RecomputeStats:
    return RecomputeStats(
        members=2,
        updated=2,
        batches=1,
        matches=1,
        orphan_crushes=0,
        restored_locks=0,
        attempts=1,
        data_version=2,
    )


def test_cli_recompute(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[str] = []

    def fake_recompute() -> RecomputeStats:
        calls.append("recompute")
        return _stats()

    monkeypatch.setattr(cli, "recompute_all", fake_recompute)

    cli.main(["recompute"])

    assert calls == ["recompute"]


def test_cli_report_defaults_to_manual(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}

    def fake_report(**kwargs: object) -> AnalyticsReport:
        captured.update(kwargs)
        return AnalyticsReport(
            created_at=datetime(2025, 1, 1, tzinfo=UTC),
            total_members=0,
            verified_members=0,
            total_matches=0,
            matched_pairs=(),
            total_crushes=0,
            orphan_crushes=0,
            people_with_crushes=0,
            avg_crushes=0.0,
            active_members_pct=0.0,
        )

    monkeypatch.setattr(cli, "generate_report", fake_report)

    cli.main(["report"])
    assert captured == {"manual": True}

    cli.main(["report", "--scheduled"])
    assert captured == {"manual": False}


def test_cli_member_add_collects_repeated_crushes(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}

    def fake_register(**kwargs: object) -> Member:
        captured.update(kwargs)
        return Member(id="ann", identity_name="Ann Lee")

    monkeypatch.setattr(cli, "register_member", fake_register)

    cli.main(["member", "add", "--name", "Ann Lee", "--crush", "Bo Kim", "--crush", "Cy Park"])

    assert captured == {
        "identity_name": "Ann Lee",
        "contact": "",
        "crushes": ["Bo Kim", "Cy Park"],
        "member_id": None,
    }


def test_cli_member_crushes_and_rename(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[tuple[str, object]] = []

    def fake_update(member_id: str, crushes: list[str]) -> Member:
        calls.append(("crushes", (member_id, crushes)))
        return Member(id=member_id, crushes=tuple(crushes))

    def fake_rename(member_id: str, identity_name: str) -> Member:
        calls.append(("rename", (member_id, identity_name)))
        return Member(id=member_id, identity_name=identity_name)

    monkeypatch.setattr(cli, "update_crushes", fake_update)
    monkeypatch.setattr(cli, "rename_member", fake_rename)

    cli.main(["member", "crushes", "ann", "Bo Kim", "Cy Park"])
    cli.main(["member", "crushes", "ann"])
    cli.main(["member", "rename", "ann", "Ann Park"])

    assert calls == [
        ("crushes", ("ann", ["Bo Kim", "Cy Park"])),
        ("crushes", ("ann", [])),
        ("rename", ("ann", "Ann Park")),
    ]


def test_cli_missing_subcommand_exits_with_usage_error() -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["member"])

    assert excinfo.value.code == 2


def test_cli_blank_rename_fails(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cli, "rename_member", lambda *_: pytest.fail("should not rename"))

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["member", "rename", "ann", "  "])

    assert excinfo.value.code == 1


def test_cli_failure_exits_with_error(monkeypatch: pytest.MonkeyPatch) -> None:
    def failing_show(member_id: str) -> Member:
        raise LookupError(member_id)

    monkeypatch.setattr(cli, "show_member", failing_show)

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["member", "show", "missing"])

    assert excinfo.value.code == 1


def test_cli_member_login(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[str] = []

    def fake_login(member_id: str) -> Member:
        calls.append(member_id)
        return Member(id=member_id, last_login=datetime(2025, 2, 14, tzinfo=UTC))

    monkeypatch.setattr(cli, "record_login", fake_login)

    cli.main(["member", "login", "ann"])

    assert calls == ["ann"]
