"""Errors raised by the matching engine and its store."""

from __future__ import annotations


class MatchingError(RuntimeError):
    """Base class for engine failures."""


class MemberNotFoundError(MatchingError, LookupError):
    def __init__(self, member_id: str) -> None:
        super().__init__(f"No member with id {member_id!r}")
        self.member_id = member_id


class DuplicateMemberError(MatchingError):
    def __init__(self, member_id: str) -> None:
        super().__init__(f"Member {member_id!r} already exists")
        self.member_id = member_id


class StaleSnapshotError(MatchingError):
    """A client write landed between a recompute's snapshot and its commit."""

    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(
            f"Member data changed during recompute (snapshot version {expected}, "
            f"store version {actual})"
        )
        self.expected = expected
        self.actual = actual
