"""Tests for the HTML report renderer."""

from datetime import date, datetime, timezone

import pytest

from submission_report.exceptions import EmptyDataError
from submission_report.pipeline.fetcher.envelopes import parse_submission
from submission_report.pipeline.models import (
    Attachment,
    StudentAggregate,
    SubmissionRecord,
)
from submission_report.pipeline.report.renderer import (
    AUTO_PRINT_SCRIPT,
    PRINT_STYLES,
    ReportOptions,
    is_image_type,
    is_link_type,
    render,
    render_attachment,
    render_student_row,
    render_submitted_at,
    report_filename,
    write_html_output,
)

GENERATED = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def student(name="Ada", submissions=None, **kwargs):
    if submissions is None:
        submissions = (SubmissionRecord("U1", description="Essay"),)
    return StudentAggregate(
        user_serial=kwargs.get("user_serial", "U1"),
        group_serial=kwargs.get("group_serial", "GRP-1"),
        name=name,
        email=kwargs.get("email", ""),
        submissions=tuple(submissions),
    )


def test_render_escapes_user_content():
    evil = student(
        name="<script>x</script>",
        submissions=[
            SubmissionRecord(
                "U1",
                description="a & b",
                feedback="<i>ok</i>",
                attachments=(Attachment('https://x/"onerror=`y`', "FILE"),),
            )
        ],
    )
    html = render([evil], ReportOptions(generated_at=GENERATED))
    assert "<script>x</script>" not in html
    assert "&lt;script&gt;x&lt;/script&gt;" in html
    assert "a &amp; b" in html
    assert "&lt;i&gt;ok&lt;/i&gt;" in html
    assert 'href="https://x/&quot;onerror=&#96;y&#96;"' in html


def test_render_header_counts_and_columns():
    students = [
        student(
            submissions=[
                SubmissionRecord("U1", attachments=(Attachment("a"), Attachment("b"))),
                SubmissionRecord("U1"),
            ]
        ),
        student(name="Bo", user_serial="U2"),
    ]
    html = render(students, ReportOptions(generated_at=GENERATED))
    assert html.startswith("<!doctype html>")
    assert "2 students · 3 submission entries · 2 files" in html
    for column in ("Student", "Submissions", "Score", "Feedback"):
        assert f">{column}</th>" in html
    assert "<summary>2 submissions</summary>" in html


def test_print_mode_adds_styles_and_script():
    html = render([student()], ReportOptions(print_mode=True, generated_at=GENERATED))
    assert PRINT_STYLES in html
    assert AUTO_PRINT_SCRIPT in html
    plain = render([student()], ReportOptions(generated_at=GENERATED))
    assert AUTO_PRINT_SCRIPT not in plain
    assert "@media print" not in plain


def test_render_empty_raises():
    with pytest.raises(EmptyDataError):
        render([])


def test_student_row_markers_for_missing_values():
    row = render_student_row(student())
    assert "No score" in row
    assert "No feedback" in row
    assert "No files" in row
    assert "Not submitted" in row
    assert "User Serial: U1" in row
    assert "Group Serial: GRP-1" in row
    assert "<details" not in row


def test_student_row_shows_latest_score_and_multiline_feedback():
    row = render_student_row(
        student(
            email="ada@x.org",
            submissions=[
                SubmissionRecord("U1", score=90.0, feedback="Great\nwork"),
                SubmissionRecord("U1", score=50),
            ],
        )
    )
    assert "<td>90</td>" in row
    assert "Great<br />work" in row
    assert "<small>ada@x.org</small>" in row


def test_student_without_submissions_renders_nothing():
    assert render_student_row(student(submissions=[])) == ""


def test_attachment_kinds():
    image = render_attachment(Attachment("https://f/p.png", "SUBMISSION_TYPE_PNG"), "Ada", 2, 1)
    assert '<img src="https://f/p.png"' in image
    assert 'alt="Ada submission image 2.1"' in image
    assert "SUBMISSION_TYPE_PNG 2.1" in image

    link = render_attachment(Attachment("https://example.org", "submission_type_link"), "Ada", 1, 2)
    assert "Open link" in link and "<img" not in link

    other = render_attachment(Attachment("https://f/doc.pdf", ""), "Ada", 1, 3)
    assert "File 1.3" in other and "Download file" in other
    assert 'target="_blank" rel="noopener"' in other


def test_image_type_match_is_unanchored():
    assert is_image_type("SUBMISSION_TYPE_JPEG")
    assert is_image_type("image/webp")
    assert not is_image_type("SUBMISSION_TYPE_PDF")
    assert not is_image_type("")
    assert is_link_type("SUBMISSION_TYPE_LINK")
    assert not is_link_type("LINK")


def test_submitted_at_unparseable_shows_raw_escaped():
    assert render_submitted_at(SubmissionRecord("U1", submitted_at="<soon>")) == "&lt;soon&gt;"
    rendered = render_submitted_at(
        SubmissionRecord("U1", submitted_at="2024-05-01T08:00:00Z")
    )
    assert "2024" in rendered and "muted" not in rendered


def test_report_filename_and_write(tmp_path):
    assert report_filename(date(2024, 5, 1)) == "uob-submissions-2024-05-01.html"
    target = write_html_output("<p>é</p>", tmp_path / "nested" / "r.html")
    assert target.read_text(encoding="utf-8") == "<p>é</p>"


def test_zero_submitted_at_renders_not_submitted():
    record = parse_submission({"userSerial": "U1", "submittedAt": 0})
    assert "Not submitted" in render_submitted_at(record)
