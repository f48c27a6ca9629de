"""Report Pipeline Module.

Joins fetched records per student, renders the HTML report and holds the
run state between fetches and exports.

References
----------
- ``data_aggregator.py``: join, ordering, summary counts and preview rows.
- ``escaping.py``: HTML and attribute escaping.
- ``renderer.py``: document fragments and file output.
- ``runner.py``: ``ReportSession`` lifecycle.
"""

from .data_aggregator import aggregate, preview_rows, summarize, truncate_text
from .escaping import escape_attribute, escape_html, format_multiline
from .renderer import ReportOptions, render, report_filename, write_html_output
from .runner import ReportSession, RunState

__all__ = [
    "ReportOptions",
    "ReportSession",
    "RunState",
    "aggregate",
    "escape_attribute",
    "escape_html",
    "format_multiline",
    "preview_rows",
    "render",
    "report_filename",
    "summarize",
    "truncate_text",
    "write_html_output",
]
