"""Report rendering for the static submissions document.

This module turns student aggregates into one self-contained HTML document
(inline styles, no external resources besides attachment URLs). The
document is composed from small pure fragment functions, one per level of
the report:

- ``render_document``: page shell, styles, header with summary counts
- ``render_student_row``: one table row per student
- ``render_submission_list``: a single card inline, or a collapsible block
- ``render_submission_card``: index, timestamp, description, attachments
- ``render_attachment``: image thumbnail, link or download anchor

Each fragment escapes the dynamic values it embeds itself, so callers never
pass pre-escaped text around. User-sourced fields (names, emails,
descriptions, feedback, attachment URLs and types) are stored content and
must never reach the document unescaped.

Example
-------
>>> from submission_report.pipeline.models import StudentAggregate, SubmissionRecord
>>> html = render([StudentAggregate("U1", "", "Ada", "", (SubmissionRecord("U1"),))])
>>> html.startswith("<!doctype html>")
True
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path

from submission_report.config import (
    DEFAULT_ATTACHMENT_LABEL,
    LINK_ATTACHMENT_TYPE,
    NAME_FALLBACK,
    REPORT_FILENAME_FORMAT,
    REPORT_TITLE,
    TIMESTAMP_DISPLAY_FORMAT,
)
from submission_report.exceptions import EmptyDataError
from submission_report.pipeline.models import (
    Attachment,
    ReportSummary,
    StudentAggregate,
    SubmissionRecord,
)

from .data_aggregator import format_score, summarize
from .escaping import escape_attribute, escape_html, format_multiline

# Matches anywhere in the type string, case-insensitively.
IMAGE_TYPE_PATTERN = re.compile(r"PNG|JPE?G|GIF|WEBP", re.IGNORECASE)

_BASE_STYLES = """      :root {
        color-scheme: light;
        font-family: system-ui, -apple-system, BlinkMacSystemFont, "Segoe UI", sans-serif;
      }
      body {
        margin: 0;
        padding: 24px;
        background: #f5f7fa;
      }
      header {
        margin-bottom: 24px;
      }
      h1 {
        margin: 0 0 8px;
        font-size: 22px;
      }
      table {
        width: 100%;
        border-collapse: collapse;
        background: white;
        border-radius: 8px;
        overflow: hidden;
        box-shadow: 0 2px 6px rgba(0, 0, 0, 0.1);
      }
      thead {
        background: #005ea8;
        color: white;
      }
      th, td {
        padding: 12px;
        text-align: left;
        vertical-align: top;
        border-bottom: 1px solid rgba(0, 0, 0, 0.08);
      }
      tr:last-child td {
        border-bottom: none;
      }
      .muted {
        color: rgba(0, 0, 0, 0.6);
        font-style: italic;
      }
      .student-meta {
        display: flex;
        flex-direction: column;
        gap: 4px;
      }
      .student-meta small {
        color: rgba(0, 0, 0, 0.6);
      }
      .submission-list {
        display: flex;
        flex-direction: column;
        gap: 12px;
      }
      .submission-card {
        border: 1px solid rgba(0, 0, 0, 0.1);
        border-radius: 6px;
        padding: 12px;
        background: rgba(0, 0, 0, 0.02);
      }
      .submission-card header {
        margin: 0 0 8px;
        font-weight: 600;
        display: flex;
        gap: 12px;
        flex-wrap: wrap;
      }
      .submission-card header span {
        display: flex;
        gap: 6px;
      }
      .attachments {
        margin-top: 8px;
        display: grid;
        gap: 12px;
      }
      .attachments img {
        max-width: 260px;
        width: 100%;
        border: 1px solid rgba(0, 0, 0, 0.1);
        border-radius: 4px;
      }
      summary {
        cursor: pointer;
      }
      summary::marker {
        color: #005ea8;
      }
      a {
        color: #005ea8;
      }"""

PRINT_STYLES = (
    "@page { margin: 12mm; } "
    "@media print { body { background: white; padding: 12mm; } "
    "table { box-shadow: none; } details > summary { list-style: none; } }"
)
AUTO_PRINT_SCRIPT = (
    '<script>window.addEventListener("load",()=>{window.focus();window.print();});'
    "</script>"
)

_MUTED = '<span class="muted">{}</span>'


@dataclass(frozen=True)
class ReportOptions:
    """Rendering switches.

    ``print_mode`` embeds print styling and a load-time print trigger.
    ``generated_at`` pins the header timestamp (defaults to now).
    """

    print_mode: bool = False
    generated_at: datetime | None = None


def is_image_type(attachment_type: str) -> bool:
    return bool(attachment_type) and IMAGE_TYPE_PATTERN.search(attachment_type) is not None


def is_link_type(attachment_type: str) -> bool:
    return (attachment_type or "").upper() == LINK_ATTACHMENT_TYPE


def format_datetime(value: datetime) -> str:
    """Format ``value`` in the local timezone for display."""
    return value.astimezone().strftime(TIMESTAMP_DISPLAY_FORMAT)


def render_attachment(
    attachment: Attachment, student_name: str, submission_index: int, file_index: int
) -> str:
    """Render one attachment with its ``<type> <submission>.<file>`` label."""
    safe_url = escape_attribute(attachment.url)
    label = escape_html(
        f"{attachment.type or DEFAULT_ATTACHMENT_LABEL} {submission_index}.{file_index}"
    )
    if is_image_type(attachment.type):
        alt = escape_attribute(
            f"{student_name} submission image {submission_index}.{file_index}"
        )
        return (
            "<div>"
            f'<div><a href="{safe_url}" target="_blank" rel="noopener">{label}</a></div>'
            f'<img src="{safe_url}" alt="{alt}" loading="lazy" />'
            "</div>"
        )
    if is_link_type(attachment.type):
        return (
            f'<div>{label}: <a href="{safe_url}" target="_blank" rel="noopener">'
            "Open link</a></div>"
        )
    return (
        f'<div>{label}: <a href="{safe_url}" target="_blank" rel="noopener">'
        "Download file</a></div>"
    )


def render_attachments(
    attachments: Sequence[Attachment], student_name: str, submission_index: int
) -> str:
    if not attachments:
        return f'<div class="attachments">{_MUTED.format("No files")}</div>'
    items = "".join(
        render_attachment(attachment, student_name, submission_index, file_index)
        for file_index, attachment in enumerate(attachments, start=1)
    )
    return f'<div class="attachments">{items}</div>'


def render_submitted_at(submission: SubmissionRecord) -> str:
    """Localized submission time, the raw value if unparseable, or a muted marker."""
    if submission.submitted_at is None:
        return _MUTED.format("Not submitted")
    parsed = submission.submitted_at_datetime
    if parsed is None:
        return escape_html(submission.submitted_at)
    return escape_html(format_datetime(parsed))


def render_submission_card(
    submission: SubmissionRecord, student_name: str, index: int
) -> str:
    """Render one submission card; ``index`` is 1-based within the student."""
    description = (
        format_multiline(submission.description)
        if submission.description
        else _MUTED.format("No description provided.")
    )
    attachments = render_attachments(submission.attachments, student_name, index)
    return (
        '<article class="submission-card">'
        "<header>"
        f"<span><strong>Submission {index}</strong></span>"
        f"<span>Submitted: {render_submitted_at(submission)}</span>"
        "</header>"
        f"<div>{description}</div>"
        f"{attachments}"
        "</article>"
    )


def render_submission_list(student: StudentAggregate) -> str:
    """One card inline, or a collapsible ``<n> submissions`` block of cards."""
    count = student.submission_count
    if count == 1:
        return render_submission_card(student.submissions[0], student.name, 1)
    cards = "".join(
        render_submission_card(submission, student.name, index)
        for index, submission in enumerate(student.submissions, start=1)
    )
    return (
        "<details open>"
        f"<summary>{count} submissions</summary>"
        f'<div class="submission-list">{cards}</div>'
        "</details>"
    )


def render_student_row(student: StudentAggregate) -> str:
    """Render a student's table row; students without submissions render nothing."""
    latest = student.latest_submission
    if latest is None:
        return ""
    score = (
        escape_html(format_score(latest.score))
        if latest.has_score
        else _MUTED.format("No score")
    )
    feedback = (
        format_multiline(latest.feedback)
        if latest.feedback
        else _MUTED.format("No feedback")
    )
    meta = [f"<strong>{escape_html(student.name or NAME_FALLBACK)}</strong>"]
    if student.email:
        meta.append(f"<small>{escape_html(student.email)}</small>")
    meta.append(
        f'<small class="muted">User Serial: {escape_html(student.user_serial)}</small>'
    )
    if student.group_serial:
        meta.append(
            f'<small class="muted">Group Serial: {escape_html(student.group_serial)}</small>'
        )
    return (
        "        <tr>\n"
        f'          <td><div class="student-meta">{"".join(meta)}</div></td>\n'
        f"          <td>{render_submission_list(student)}</td>\n"
        f"          <td>{score}</td>\n"
        f"          <td>{feedback}</td>\n"
        "        </tr>"
    )


def render_document(
    students: Sequence[StudentAggregate],
    summary: ReportSummary,
    *,
    print_mode: bool,
    generated_at: datetime,
) -> str:
    """Assemble the page shell around the student rows."""
    rows = "\n".join(row for row in map(render_student_row, students) if row)
    print_styles = f"      {PRINT_STYLES}\n" if print_mode else ""
    script = f"    {AUTO_PRINT_SCRIPT}\n" if print_mode else ""
    stamp = escape_html(format_datetime(generated_at))
    title = escape_html(REPORT_TITLE)
    return (
        "<!doctype html>\n"
        '<html lang="en">\n'
        "  <head>\n"
        '    <meta charset="utf-8" />\n'
        f"    <title>{title}</title>\n"
        "    <style>\n"
        f"{_BASE_STYLES}\n"
        f"{print_styles}"
        "    </style>\n"
        "  </head>\n"
        "  <body>\n"
        "    <header>\n"
        f"      <h1>{title}</h1>\n"
        f"      <p>Generated at {stamp} · {summary.student_count} students · "
        f"{summary.submission_count} submission entries · "
        f"{summary.file_count} files</p>\n"
        "    </header>\n"
        "    <table>\n"
        "      <thead>\n"
        "        <tr>\n"
        '          <th style="width: 25%">Student</th>\n'
        '          <th style="width: 30%">Submissions</th>\n'
        '          <th style="width: 15%">Score</th>\n'
        '          <th style="width: 30%">Feedback</th>\n'
        "        </tr>\n"
        "      </thead>\n"
        "      <tbody>\n"
        f"{rows}\n"
        "      </tbody>\n"
        "    </table>\n"
        f"{script}"
        "  </body>\n"
        "</html>\n"
    )


def render(
    students: Sequence[StudentAggregate], options: ReportOptions | None = None
) -> str:
    r"""Render the complete report document for ``students``.

    Parameters
    ----------
    students : Sequence[StudentAggregate]
        Aggregates in display order, as produced by ``aggregate``.
    options : ReportOptions, optional
        Print mode and header timestamp.

    Returns
    -------
    str
        A complete HTML document.

    Raises
    ------
    EmptyDataError
        If ``students`` is empty; no degenerate document is produced.

    Examples
    --------
    >>> render([])
    Traceback (most recent call last):
    ...
    submission_report.exceptions.EmptyDataError: EMPTY_DATA_ERROR: No submission data available. Fetch data before exporting.
    """
    if not students:
        raise EmptyDataError("No submission data available. Fetch data before exporting.")
    options = options or ReportOptions()
    generated_at = options.generated_at or datetime.now().astimezone()
    return render_document(
        students,
        summarize(students),
        print_mode=options.print_mode,
        generated_at=generated_at,
    )


def report_filename(today: date | None = None) -> str:
    """Return the download filename for a report generated on ``today``."""
    day = today or date.today()
    return REPORT_FILENAME_FORMAT.format(date=day.isoformat())


def write_html_output(html_content: str, output_file: Path) -> Path:
    r"""Write ``html_content`` to ``output_file`` as UTF-8, creating parent directories.

    Returns
    -------
    Path
        The written file path.

    Raises
    ------
    OSError
        If the directory or file cannot be written.
    """
    output_file.parent.mkdir(parents=True, exist_ok=True)
    output_file.write_text(html_content, encoding="utf-8")
    return output_file


__all__ = [
    "AUTO_PRINT_SCRIPT",
    "IMAGE_TYPE_PATTERN",
    "PRINT_STYLES",
    "ReportOptions",
    "format_datetime",
    "is_image_type",
    "is_link_type",
    "render",
    "render_attachment",
    "render_attachments",
    "render_document",
    "render_student_row",
    "render_submission_card",
    "render_submission_list",
    "render_submitted_at",
    "report_filename",
    "write_html_output",
]
