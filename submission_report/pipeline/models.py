"""Typed records flowing through the report pipeline.

All records are frozen dataclasses: fetchers produce ``GroupMember`` and
``SubmissionRecord`` values from the platform envelopes, the aggregator
joins them into ``StudentAggregate`` values, and the renderer only reads
them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Union

Score = Union[int, float, str]

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def parse_timestamp(value: object) -> datetime | None:
    """Parse a platform timestamp into an aware ``datetime``.

    Accepts ISO-8601 strings (``Z`` suffix or explicit offset; naive values
    are taken as UTC) and numeric epoch milliseconds. Returns ``None`` for
    absent or unparseable values.

    Examples
    --------
    >>> parse_timestamp("2024-03-01T10:00:00Z").year
    2024
    >>> parse_timestamp("yesterday") is None
    True
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not text:
        return None
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def timestamp_millis(value: object) -> int:
    """Return epoch milliseconds for ``value``, or 0 when it cannot be parsed."""
    parsed = parse_timestamp(value)
    if parsed is None:
        return 0
    return int((parsed - _EPOCH).total_seconds() * 1000)


@dataclass(frozen=True)
class GroupMember:
    """A member of a user group, keyed by ``user_serial``."""

    user_serial: str
    group_serial: str = ""
    name: str = ""
    email: str = ""


@dataclass(frozen=True)
class Attachment:
    """A file or link attached to a submission.

    ``type`` is the platform's attachment type string and selects how the
    attachment is rendered (image thumbnail, link or download).
    """

    url: str
    type: str = ""


@dataclass(frozen=True)
class SubmissionRecord:
    """One submission entry for a user; several may share a ``user_serial``."""

    user_serial: str
    description: str = ""
    score: Score | None = None
    submitted_at: str | int | float | None = None
    attachments: tuple[Attachment, ...] = ()
    feedback: str = ""

    @property
    def submitted_at_datetime(self) -> datetime | None:
        return parse_timestamp(self.submitted_at)

    @property
    def submitted_at_millis(self) -> int:
        return timestamp_millis(self.submitted_at)

    @property
    def has_score(self) -> bool:
        return self.score is not None


@dataclass(frozen=True)
class StudentAggregate:
    """Joined view of one student and their submissions, newest first."""

    user_serial: str
    group_serial: str
    name: str
    email: str
    submissions: tuple[SubmissionRecord, ...] = field(default_factory=tuple)

    @property
    def latest_submission(self) -> SubmissionRecord | None:
        return self.submissions[0] if self.submissions else None

    @property
    def submission_count(self) -> int:
        return len(self.submissions)

    @property
    def attachment_count(self) -> int:
        return sum(len(s.attachments) for s in self.submissions)


@dataclass(frozen=True)
class ReportSummary:
    """Header counts shown in the report and the CLI preview."""

    student_count: int
    submission_count: int
    file_count: int


__all__ = [
    "Attachment",
    "GroupMember",
    "ReportSummary",
    "Score",
    "StudentAggregate",
    "SubmissionRecord",
    "parse_timestamp",
    "timestamp_millis",
]
