"""Run the fetch → join pipeline and export the last good result.

``ReportSession`` owns the state of one report workspace across runs:

- lifecycle ``IDLE → RUNNING → SUCCEEDED | FAILED``, exposed as ``state``;
- a single in-flight run: calling ``run`` while ``RUNNING`` raises
  ``RunInProgressError`` and changes nothing;
- the last successful aggregate, replaced wholesale on success and left
  untouched on failure so it remains exportable.

Usage Examples
--------------
Typical programmatic usage::

    from submission_report.pipeline.context import StaticContextResolver
    from submission_report.pipeline.fetcher import (
        AiohttpTransport, PlatformAPIClient, PlatformConfig,
    )
    from submission_report.pipeline.report.runner import ReportSession

    async def main():
        cfg = PlatformConfig()
        async with AiohttpTransport(cfg) as transport:
            session = ReportSession(
                PlatformAPIClient(transport, cfg),
                StaticContextResolver("GRP-1", "Node-1"),
            )
            await session.run()
        return session.export()
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Sequence
from datetime import date
from pathlib import Path
from typing import Protocol

from submission_report.exceptions import AppError, EmptyDataError, RunInProgressError
from submission_report.pipeline.context import ContextResolver, SerialContext
from submission_report.pipeline.models import (
    GroupMember,
    ReportSummary,
    StudentAggregate,
    SubmissionRecord,
)

from .data_aggregator import aggregate, summarize
from .renderer import ReportOptions, render, report_filename, write_html_output

logger = logging.getLogger(__name__)


class RunState(str, enum.Enum):
    IDLE = "idle"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class RecordSource(Protocol):
    """The two listings a run needs; ``PlatformAPIClient`` implements it."""

    async def fetch_all_user_groups(self, group_serial: str) -> list[GroupMember]: ...

    async def fetch_user_submissions(
        self, structure_serial: str, user_serials: Sequence[str]
    ) -> list[SubmissionRecord]: ...


class ReportSession:
    """Pipeline state holder for repeated runs and exports.

    Parameters
    ----------
    source : RecordSource
        Fetches group members and submissions.
    resolver : ContextResolver
        Supplies the group and structure serials at the start of each run.

    Attributes
    ----------
    state : RunState
        Current lifecycle state.
    students : tuple[StudentAggregate, ...]
        Aggregates of the last successful run (empty before the first one).
    members, submissions : tuple
        Raw records of the last successful run.
    context : SerialContext | None
        Serials used by the most recent run attempt.
    last_error : Exception | None
        Error of the most recent failed run; cleared when a run starts.
    """

    def __init__(self, source: RecordSource, resolver: ContextResolver) -> None:
        self.source = source
        self.resolver = resolver
        self.state = RunState.IDLE
        self.students: tuple[StudentAggregate, ...] = ()
        self.members: tuple[GroupMember, ...] = ()
        self.submissions: tuple[SubmissionRecord, ...] = ()
        self.context: SerialContext | None = None
        self.last_error: Exception | None = None

    @property
    def busy(self) -> bool:
        return self.state is RunState.RUNNING

    @property
    def can_export(self) -> bool:
        return bool(self.students)

    @property
    def summary(self) -> ReportSummary:
        return summarize(self.students)

    async def _collect(
        self,
    ) -> tuple[list[GroupMember], list[SubmissionRecord], list[StudentAggregate]]:
        self.context = self.resolver.resolve()
        group_serial, structure_serial = self.context.require()
        logger.info("Fetching user group %s", group_serial)
        members = await self.source.fetch_all_user_groups(group_serial)
        if not members:
            raise EmptyDataError(
                "No users found in the specified group.",
                context={"group_serial": group_serial},
            )
        user_serials = [m.user_serial for m in members if m.user_serial]
        logger.info(
            "Fetched %d users; fetching submissions for %s",
            len(members),
            structure_serial,
        )
        submissions = (
            await self.source.fetch_user_submissions(structure_serial, user_serials)
            if user_serials
            else []
        )
        students = aggregate(members, submissions)
        if not students:
            raise EmptyDataError(
                "No submissions found for this selection.",
                context={
                    "group_serial": group_serial,
                    "structure_serial": structure_serial,
                },
            )
        return members, submissions, students

    async def run(self) -> list[StudentAggregate]:
        """Fetch, join and store a fresh aggregate.

        Returns
        -------
        list[StudentAggregate]
            The new aggregate, also stored on ``students``.

        Raises
        ------
        RunInProgressError
            If a run is already in flight; state is not modified.
        ConfigError, NetworkError, ProtocolError, EmptyDataError
            When the run fails. ``state`` becomes ``FAILED``, ``last_error``
            records the error and the previous aggregate is kept.
        """
        if self.busy:
            raise RunInProgressError("A report run is already in progress.")
        self.state = RunState.RUNNING
        self.last_error = None
        try:
            members, submissions, students = await self._collect()
        except AppError as err:
            self._fail(err)
            logger.error("Report run failed: %s", err, extra={"error": err.to_dict()})
            raise
        except Exception as err:
            self._fail(err)
            logger.exception("Report run failed unexpectedly")
            raise
        except BaseException:
            # cancelled mid-run
            self.state = RunState.FAILED
            raise
        self.members = tuple(members)
        self.submissions = tuple(submissions)
        self.students = tuple(students)
        self.state = RunState.SUCCEEDED
        summary = self.summary
        logger.info(
            "Report data ready: %d students, %d submission entries, %d files",
            summary.student_count,
            summary.submission_count,
            summary.file_count,
        )
        return list(students)

    def _fail(self, err: Exception) -> None:
        self.state = RunState.FAILED
        self.last_error = err
        if self.students:
            logger.warning(
                "Keeping previous report data (%d students) after failure",
                len(self.students),
            )

    def export(self, options: ReportOptions | None = None) -> str:
        """Render the last successful aggregate.

        Raises
        ------
        EmptyDataError
            If no run has succeeded yet.
        """
        return render(self.students, options)

    def export_to(
        self,
        output_dir: Path,
        options: ReportOptions | None = None,
        today: date | None = None,
    ) -> Path:
        """Render and write the report into ``output_dir`` under its dated filename."""
        html = self.export(options)
        target = write_html_output(html, Path(output_dir) / report_filename(today))
        logger.info("Report written to %s", target)
        return target


__all__ = ["RecordSource", "ReportSession", "RunState"]
