"""Tests for ``ReportSession`` run lifecycle and export."""

import asyncio
from datetime import date

import pytest

from submission_report.exceptions import (
    ConfigError,
    EmptyDataError,
    NetworkError,
    RunInProgressError,
)
from submission_report.pipeline.context import StaticContextResolver
from submission_report.pipeline.models import GroupMember, SubmissionRecord
from submission_report.pipeline.report.runner import ReportSession, RunState


class FakeSource:
    """Record source returning canned members and submissions."""

    def __init__(self, members=(), submissions=(), error=None, gate=None):
        self.members = list(members)
        self.submissions = list(submissions)
        self.error = error
        self.gate = gate
        self.submission_calls = []

    async def fetch_all_user_groups(self, group_serial):
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return list(self.members)

    async def fetch_user_submissions(self, structure_serial, user_serials):
        self.submission_calls.append((structure_serial, list(user_serials)))
        return list(self.submissions)


def make_session(source, group="GRP-1", structure="Node-1"):
    return ReportSession(source, StaticContextResolver(group, structure))


@pytest.mark.asyncio
async def test_successful_run_stores_aggregate():
    source = FakeSource(
        [GroupMember("U1", "GRP-1", "Ada"), GroupMember("", "GRP-1", "Nobody")],
        [SubmissionRecord("U1", description="x")],
    )
    session = make_session(source)
    students = await session.run()

    assert session.state is RunState.SUCCEEDED
    assert [s.name for s in students] == ["Ada"]
    assert session.can_export
    assert session.summary.submission_count == 1
    assert source.submission_calls == [("Node-1", ["U1"])]


@pytest.mark.asyncio
async def test_missing_context_fails_before_fetching():
    source = FakeSource()
    session = make_session(source, group=None)
    with pytest.raises(ConfigError):
        await session.run()
    assert session.state is RunState.FAILED
    assert isinstance(session.last_error, ConfigError)
    assert source.submission_calls == []


@pytest.mark.asyncio
async def test_empty_group_is_empty_data_error():
    session = make_session(FakeSource(members=[]))
    with pytest.raises(EmptyDataError, match="No users found"):
        await session.run()


@pytest.mark.asyncio
async def test_no_submissions_is_empty_data_error():
    session = make_session(FakeSource([GroupMember("U1", name="Ada")], []))
    with pytest.raises(EmptyDataError, match="No submissions found"):
        await session.run()
    assert not session.can_export


@pytest.mark.asyncio
async def test_failure_keeps_previous_data_exportable():
    source = FakeSource(
        [GroupMember("U1", name="Ada")], [SubmissionRecord("U1", description="kept")]
    )
    session = make_session(source)
    await session.run()

    source.error = NetworkError("down", status=503)
    with pytest.raises(NetworkError):
        await session.run()

    assert session.state is RunState.FAILED
    assert [s.name for s in session.students] == ["Ada"]
    assert "kept" in session.export()


@pytest.mark.asyncio
async def test_concurrent_run_is_rejected():
    gate = asyncio.Event()
    source = FakeSource(
        [GroupMember("U1", name="Ada")], [SubmissionRecord("U1")], gate=gate
    )
    session = make_session(source)
    first = asyncio.create_task(session.run())
    await asyncio.sleep(0)
    assert session.busy

    with pytest.raises(RunInProgressError):
        await session.run()
    assert session.state is RunState.RUNNING

    gate.set()
    await first
    assert session.state is RunState.SUCCEEDED


@pytest.mark.asyncio
async def test_cancelled_run_is_marked_failed():
    gate = asyncio.Event()
    session = make_session(FakeSource(gate=gate))
    task = asyncio.create_task(session.run())
    await asyncio.sleep(0)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task
    assert session.state is RunState.FAILED
    assert not session.busy


def test_export_before_any_run_raises():
    session = make_session(FakeSource())
    assert session.state is RunState.IDLE
    with pytest.raises(EmptyDataError):
        session.export()


@pytest.mark.asyncio
async def test_export_to_writes_dated_file(tmp_path):
    source = FakeSource([GroupMember("U1", name="Ada")], [SubmissionRecord("U1")])
    session = make_session(source)
    await session.run()
    target = session.export_to(tmp_path / "out", today=date(2024, 5, 1))
    assert target.name == "uob-submissions-2024-05-01.html"
    assert "Ada" in target.read_text(encoding="utf-8")
