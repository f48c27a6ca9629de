"""data_aggregator.py: join group membership with submissions per student.

This module forms the data-oriented component of the report pipeline. It
joins the two independently fetched record sets on the user serial,
orders each student's submissions newest first, orders students by name,
and derives the summary counts and preview rows shown before export.

Design Principles
-----------------
- Isolated responsibility: contains *no* rendering or network logic.
- Exposes only pure functions over the records in
  ``submission_report.pipeline.models``.
- Fallback labels come from ``submission_report/config.py``.

Usage
-----
>>> from submission_report.pipeline.models import GroupMember, SubmissionRecord
>>> students = aggregate(
...     [GroupMember("U1", "G1", "Ada", "ada@example.org")],
...     [SubmissionRecord("U1", submitted_at="2024-01-01T00:00:00Z")],
... )
>>> students[0].name, students[0].submission_count
('Ada', 1)
"""

from __future__ import annotations

import locale
import unicodedata
from collections.abc import Iterable, Sequence

from submission_report.config import (
    PREVIEW_FEEDBACK_LENGTH,
    PREVIEW_ROW_LIMIT,
    UNKNOWN_STUDENT_NAME,
)
from submission_report.pipeline.models import (
    GroupMember,
    ReportSummary,
    StudentAggregate,
    SubmissionRecord,
)


def name_sort_key(name: str) -> str:
    """Collation key comparing names by base letters only.

    Case and accents are ignored, then the ``LC_COLLATE`` collation is
    applied, so ``"bob"`` sorts after ``"Alice"`` and ``"Émile"`` next to
    ``"Emile"``. Under the default ``C`` locale this is code-point order;
    the CLI switches ``LC_COLLATE`` to the environment's locale.

    Examples
    --------
    >>> sorted(["bob", "Alice"], key=name_sort_key)
    ['Alice', 'bob']
    """
    decomposed = unicodedata.normalize("NFKD", name)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return locale.strxfrm(base.casefold())


def aggregate(
    groups: Iterable[GroupMember], submissions: Iterable[SubmissionRecord]
) -> list[StudentAggregate]:
    """Join group members and submissions into per-student aggregates.

    One aggregate is produced for every distinct user serial that appears in
    ``submissions``; members without submissions are not included. A
    submission whose user serial has no matching member still produces an
    aggregate, with an empty group serial and the ``UNKNOWN_STUDENT_NAME``
    label.

    Parameters
    ----------
    groups : Iterable[GroupMember]
        Group members. When a user serial occurs twice, the later member wins.
    submissions : Iterable[SubmissionRecord]
        Submission records in fetch order.

    Returns
    -------
    list[StudentAggregate]
        Aggregates sorted by name (case- and accent-insensitive, stable, so
        equal names keep first-appearance order). Each aggregate's
        submissions are sorted newest first by ``submitted_at``; missing or
        unparseable timestamps count as epoch 0 and equal timestamps keep
        their input order.

    Notes
    -----
    - The renderer relies on index 0 being the latest submission.
    - Both sorts are stable (``list.sort``).

    Examples
    --------
    >>> from submission_report.pipeline.models import SubmissionRecord
    >>> [s.name for s in aggregate([], [SubmissionRecord("X")])]
    ['Unknown Student']
    """
    members = {member.user_serial: member for member in groups}
    order: list[str] = []
    collected: dict[str, list[SubmissionRecord]] = {}
    for submission in submissions:
        serial = submission.user_serial
        if serial not in collected:
            collected[serial] = []
            order.append(serial)
        collected[serial].append(submission)

    students: list[StudentAggregate] = []
    for serial in order:
        member = members.get(serial)
        entries = collected[serial]
        entries.sort(key=lambda s: s.submitted_at_millis, reverse=True)
        students.append(
            StudentAggregate(
                user_serial=serial,
                group_serial=member.group_serial if member else "",
                name=(member.name if member else "") or UNKNOWN_STUDENT_NAME,
                email=member.email if member else "",
                submissions=tuple(entries),
            )
        )
    students.sort(key=lambda student: name_sort_key(student.name))
    return students


def summarize(students: Sequence[StudentAggregate]) -> ReportSummary:
    """Count students, submission entries and attached files."""
    return ReportSummary(
        student_count=len(students),
        submission_count=sum(s.submission_count for s in students),
        file_count=sum(s.attachment_count for s in students),
    )


def truncate_text(value: str | None, max_length: int) -> str:
    """Trim ``value`` and cut it to ``max_length`` characters ending in an ellipsis.

    Examples
    --------
    >>> truncate_text("  short  ", 10)
    'short'
    >>> truncate_text("abcdefghij", 5)
    'abcd…'
    """
    if not value:
        return ""
    trimmed = value.strip()
    if len(trimmed) <= max_length:
        return trimmed
    return f"{trimmed[: max_length - 1]}…"


def preview_rows(
    students: Sequence[StudentAggregate],
    limit: int = PREVIEW_ROW_LIMIT,
    feedback_length: int = PREVIEW_FEEDBACK_LENGTH,
) -> list[tuple[str, str, str, str]]:
    """Build plain-text ``(student, submissions, score, feedback)`` preview rows.

    Only the first ``limit`` students are included. Score and feedback come
    from each student's latest submission; missing values show as ``—``.
    """
    rows: list[tuple[str, str, str, str]] = []
    for student in students[:limit]:
        latest = student.latest_submission
        score = format_score(latest.score) if latest and latest.has_score else "—"
        feedback = (
            truncate_text(latest.feedback, feedback_length)
            if latest and latest.feedback
            else "—"
        )
        rows.append(
            (student.name or "—", str(student.submission_count), score, feedback)
        )
    return rows


def format_score(score: object) -> str:
    """Render a score without a trailing ``.0`` on whole floats."""
    if isinstance(score, float) and score.is_integer():
        return str(int(score))
    return str(score)


__all__ = [
    "aggregate",
    "format_score",
    "name_sort_key",
    "preview_rows",
    "summarize",
    "truncate_text",
]
