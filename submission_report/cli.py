"""Command-line entrypoint for building a submissions report.

Resolves the group and structure serials, runs the fetch → join pipeline
once, prints a short preview of the result and writes the HTML report
(the ``pdf`` format writes the print-ready variant, which opens the
browser's print dialog when loaded).

Examples
--------
>>> # In shell
>>> python -m submission_report --group-serial GRP-1 --structure-serial Node-1
>>> python -m submission_report --page-url "https://cms.uobmydigitalspace.com/...?serial=Node-1&group=GRP-1" --format pdf --open
"""

from __future__ import annotations

import argparse
import asyncio
import locale
import logging
import os
import webbrowser
from collections.abc import Sequence
from pathlib import Path

from rich.console import Console
from rich.table import Table
from rich.text import Text

from submission_report.config import (
    DEFAULT_OUTPUT_DIR,
    LOG_DIR,
    LOG_FILENAME_REPORT,
    LOG_FORMAT,
)
from submission_report.exceptions import AppError
from submission_report.pipeline.context import (
    ContextResolver,
    FallbackContextResolver,
    PageContextResolver,
    StaticContextResolver,
)
from submission_report.pipeline.fetcher import (
    AiohttpTransport,
    PlatformAPIClient,
    PlatformConfig,
)
from submission_report.pipeline.models import StudentAggregate
from submission_report.pipeline.report import (
    ReportOptions,
    ReportSession,
    preview_rows,
    summarize,
)

logger = logging.getLogger(__name__)

console = Console()


def configure_logging(level: str = "INFO", enable_file: bool = True) -> None:
    r"""Configure root logging for CLI runs.

    Replaces existing root handlers with a stream handler and, unless
    disabled, a file handler under ``LOG_DIR``. Failure to create the log
    file is reported on the stream handler and otherwise ignored.

    Parameters
    ----------
    level : str, optional
        Logging level name. Defaults to ``"INFO"``.
    enable_file : bool, optional
        Whether to add the file handler. Defaults to True.
    """
    for h in logging.root.handlers[:]:
        logging.root.removeHandler(h)
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    file_error: OSError | None = None
    if enable_file:
        try:
            LOG_DIR.mkdir(exist_ok=True)
            handlers.insert(
                0, logging.FileHandler(LOG_DIR / LOG_FILENAME_REPORT, mode="a")
            )
        except OSError as err:
            file_error = err
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers,
    )
    if file_error is not None:
        logger.warning("File logging disabled: %s", file_error)


def apply_collation_locale() -> None:
    """Use the environment's collation rules for sorting student names."""
    try:
        locale.setlocale(locale.LC_COLLATE, "")
    except locale.Error as err:
        logger.warning("Falling back to code-point name ordering: %s", err)


def parse_arguments(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments.

    Returns
    -------
    argparse.Namespace
        Parsed arguments with attributes ``group_serial``, ``structure_serial``,
        ``page_url``, ``page_text_file``, ``resource_url``, ``format``,
        ``output``, ``open`` and ``log_level``.
    """
    parser = argparse.ArgumentParser(
        description="Export assignment submissions of a user group as an HTML report."
    )
    parser.add_argument("--group-serial", type=str, default=None)
    parser.add_argument("--structure-serial", type=str, default=None)
    parser.add_argument(
        "--page-url",
        type=str,
        default=None,
        help="Assignment page URL to detect serials from.",
    )
    parser.add_argument(
        "--page-text-file",
        type=Path,
        default=None,
        help="Saved page markup searched for serials.",
    )
    parser.add_argument(
        "--resource-url",
        action="append",
        default=[],
        help="Request URL issued by the page (repeatable, oldest first).",
    )
    parser.add_argument("--format", choices=("html", "pdf"), default="html")
    parser.add_argument("-o", "--output", type=Path, default=DEFAULT_OUTPUT_DIR)
    parser.add_argument(
        "--open", action="store_true", help="Open the written report in a browser."
    )
    parser.add_argument(
        "--log-level", type=str, default=os.environ.get("LOG_LEVEL", "INFO")
    )
    return parser.parse_args(argv)


def build_resolver(args: argparse.Namespace, config: PlatformConfig) -> ContextResolver:
    """Pick the context resolver: explicit flags first, then page detection, then defaults."""
    if args.group_serial or args.structure_serial:
        primary: ContextResolver = StaticContextResolver(
            args.group_serial, args.structure_serial
        )
    else:
        page_text = ""
        if args.page_text_file is not None:
            page_text = args.page_text_file.read_text(encoding="utf-8")
        primary = PageContextResolver(
            args.page_url or "", page_text=page_text, resource_urls=args.resource_url
        )
    return FallbackContextResolver(
        primary, config.default_group_serial, config.default_structure_serial
    )


def build_preview_table(students: Sequence[StudentAggregate]) -> Table:
    """Rich table of the first few students, as shown before exporting."""
    table = Table(show_header=True, header_style="bold blue")
    for label in ("Student", "Submissions", "Score", "Feedback"):
        table.add_column(label)
    for row in preview_rows(students):
        table.add_row(*(Text(cell) for cell in row))
    return table


def print_preview(session: ReportSession) -> None:
    summary = summarize(session.students)
    if session.context is not None:
        labels = session.context.describe()
        console.print(
            f"Group: {labels['group']}  Structure: {labels['structure']}",
            markup=False,
        )
    console.print(
        f"{summary.student_count} students · {summary.submission_count} submission "
        f"entries · {summary.file_count} files.",
        markup=False,
    )
    console.print(build_preview_table(session.students))


async def run_report(
    config: PlatformConfig,
    resolver: ContextResolver,
    output_dir: Path,
    options: ReportOptions,
) -> Path:
    """Run one pipeline pass against the platform and write the report."""
    async with AiohttpTransport(config) as transport:
        session = ReportSession(PlatformAPIClient(transport, config), resolver)
        await session.run()
    print_preview(session)
    return session.export_to(output_dir, options)


def main(argv: Sequence[str] | None = None) -> int:
    """Run the CLI; returns the process exit status."""
    args = parse_arguments(argv)
    configure_logging(args.log_level, enable_file=not os.environ.get("DISABLE_FILE_LOGS"))
    apply_collation_locale()
    try:
        config = PlatformConfig()
        resolver = build_resolver(args, config)
        options = ReportOptions(print_mode=args.format == "pdf")
        target = asyncio.run(run_report(config, resolver, args.output, options))
    except AppError as err:
        console.print(err.message, style="bold red", markup=False)
        return 1
    except OSError as err:
        logger.error("Failed to read or write a file: %s", err)
        console.print(f"Failed to export report: {err}", style="bold red", markup=False)
        return 1
    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        return 130
    console.print(f"Report written to {target}", style="green", markup=False)
    if args.open and not webbrowser.open(target.resolve().as_uri()):
        logger.warning("Could not open a browser for %s", target)
    return 0


__all__ = [
    "apply_collation_locale",
    "build_preview_table",
    "build_resolver",
    "configure_logging",
    "main",
    "parse_arguments",
    "run_report",
]
