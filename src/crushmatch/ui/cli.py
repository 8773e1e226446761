"""Command-line entry point for recomputes, reports and member management."""

from __future__ import annotations

import argparse
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from crushmatch.app import (
    generate_report,
    recompute_all,
    record_login,
    register_member,
    rename_member,
    show_member,
    update_crushes,
)
from crushmatch.config import configure_logging

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from crushmatch.domain.model import Member

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Recompute mutual crush matches")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("recompute", help="Run a full match recompute")

    report = subparsers.add_parser("report", help="Generate an analytics report")
    report.add_argument(
        "--scheduled",
        action="store_true",
        help="Mark the report as scheduled instead of manually requested",
    )

    member = subparsers.add_parser("member", help="Member management commands")
    member_sub = member.add_subparsers(dest="member_command", required=True)

    member_add = member_sub.add_parser("add", help="Register a member")
    member_add.add_argument(
        "--name",
        type=str,
        default="",
        help="Verified identity name (omit for an unverified member)",
    )
    member_add.add_argument("--contact", type=str, default="", help="Contact handle")
    member_add.add_argument(
        "--crush",
        dest="crushes",
        action="append",
        default=[],
        help="Name of someone the member has a crush on (repeatable)",
    )
    member_add.add_argument("--id", dest="member_id", type=str, help="Explicit member id")

    member_crushes = member_sub.add_parser("crushes", help="Replace a member's crush list")
    member_crushes.add_argument("member_id", type=str)
    member_crushes.add_argument("crushes", nargs="*", help="Crush names; none clears the list")

    member_rename = member_sub.add_parser("rename", help="Change a member's identity name")
    member_rename.add_argument("member_id", type=str)
    member_rename.add_argument("identity_name", type=str)

    member_show = member_sub.add_parser("show", help="Log a member's stored state")
    member_show.add_argument("member_id", type=str)

    member_login = member_sub.add_parser("login", help="Record that a member signed in")
    member_login.add_argument("member_id", type=str)

    return parser.parse_args(list(argv))


def _log_member(member: Member) -> None:
    log.info(
        "Member %s: name=%r, crushes=%s, locked=%s, crush_count=%s",
        member.id,
        member.identity_name,
        list(member.crushes),
        list(member.locked_crushes),
        member.crush_count,
    )
    for match in member.matches:
        log.info(
            "  matched with %s (%s) since %s",
            match.peer_name,
            match.peer_contact or "no contact",
            match.matched_at.isoformat(),
        )


def _run_member_command(parsed_args: argparse.Namespace) -> None:
    if parsed_args.member_command == "add":
        member = register_member(
            identity_name=parsed_args.name,
            contact=parsed_args.contact,
            crushes=parsed_args.crushes,
            member_id=parsed_args.member_id,
        )
        log.info("Registered member %s", member.id)
        _log_member(member)
    elif parsed_args.member_command == "crushes":
        _log_member(update_crushes(parsed_args.member_id, parsed_args.crushes))
    elif parsed_args.member_command == "rename":
        if not parsed_args.identity_name.strip():
            raise ValueError("Identity name must not be blank")
        _log_member(rename_member(parsed_args.member_id, parsed_args.identity_name))
    elif parsed_args.member_command == "show":
        _log_member(show_member(parsed_args.member_id))
    elif parsed_args.member_command == "login":
        member = record_login(parsed_args.member_id)
        log.info("Member %s last login: %s", member.id, member.last_login)
    else:
        raise ValueError(f"Unsupported member command: {parsed_args.member_command}")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    configure_logging()
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    # argparse exits with status 2 on invalid arguments
    parsed_args = _parse_args(args_list)

    try:
        if parsed_args.command == "recompute":
            stats = recompute_all()
            log.info(
                "Recompute finished: members=%s, updated=%s, matches=%s, attempts=%s",
                stats.members,
                stats.updated,
                stats.matches,
                stats.attempts,
            )
        elif parsed_args.command == "report":
            report = generate_report(manual=not parsed_args.scheduled)
            log.info(
                "Report %s: verified=%s/%s, pairs=%s, orphan_crushes=%s, active=%s%%",
                report.id,
                report.verified_members,
                report.total_members,
                ", ".join(report.matched_pairs) or "none",
                report.orphan_crushes,
                report.active_members_pct,
            )
        elif parsed_args.command == "member":
            _run_member_command(parsed_args)
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except Exception:
        log.exception("Fatal error while running %s", parsed_args.command)
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    """Console-script entry point."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
