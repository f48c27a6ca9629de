"""Tests for the sequential page walker."""

import pytest

from submission_report.exceptions import NetworkError
from submission_report.pipeline.fetcher.paginated import (
    Page,
    fetch_all_pages,
    normalize_total_page,
)


class ScriptedSource:
    """Page source returning scripted ``(record_count, total_page)`` pages."""

    def __init__(self, pages):
        self.pages = pages
        self.calls = []

    async def __call__(self, page, page_size):
        self.calls.append((page, page_size))
        scripted = self.pages[page - 1]
        if isinstance(scripted, Exception):
            raise scripted
        count, total = scripted
        return Page(records=[f"p{page}-r{i}" for i in range(count)], total_page=total)


@pytest.mark.asyncio
async def test_fetch_all_pages_walks_three_pages_in_order():
    source = ScriptedSource([(50, 3), (50, 3), (7, 3)])
    records = await fetch_all_pages(source, 50)
    assert len(records) == 107
    assert source.calls == [(1, 50), (2, 50), (3, 50)]
    assert records[0] == "p1-r0" and records[50] == "p2-r0" and records[-1] == "p3-r6"


@pytest.mark.asyncio
async def test_fetch_all_pages_follows_revised_total():
    source = ScriptedSource([(2, 2), (2, 3), (1, 3)])
    records = await fetch_all_pages(source, 2)
    assert [c[0] for c in source.calls] == [1, 2, 3]
    assert len(records) == 5


@pytest.mark.asyncio
async def test_fetch_all_pages_stops_when_total_shrinks():
    source = ScriptedSource([(2, 4), (2, 2), (2, 4)])
    records = await fetch_all_pages(source, 2)
    assert [c[0] for c in source.calls] == [1, 2]
    assert len(records) == 4


@pytest.mark.asyncio
@pytest.mark.parametrize("total", [0, None, "junk", -3])
async def test_fetch_all_pages_requests_at_least_one_page(total):
    source = ScriptedSource([(3, total), (3, total)])
    records = await fetch_all_pages(source, 10)
    assert len(source.calls) == 1
    assert len(records) == 3


@pytest.mark.asyncio
async def test_fetch_all_pages_aborts_on_first_failure():
    source = ScriptedSource([(5, 3), NetworkError("boom", status=502), (5, 3)])
    with pytest.raises(NetworkError) as excinfo:
        await fetch_all_pages(source, 5)
    assert excinfo.value.status == 502
    assert [c[0] for c in source.calls] == [1, 2]


@pytest.mark.asyncio
async def test_fetch_all_pages_rejects_bad_page_size():
    with pytest.raises(ValueError):
        await fetch_all_pages(ScriptedSource([]), 0)


def test_normalize_total_page():
    assert normalize_total_page(3) == 3
    assert normalize_total_page("4") == 4
    assert normalize_total_page(2.0) == 2
    assert normalize_total_page(0) == 1
    assert normalize_total_page(None) == 1
    assert normalize_total_page(True) == 1
    assert normalize_total_page({}) == 1
