"""Sequential page walker for paginated platform listings.

``fetch_all_pages`` is source-agnostic: the caller supplies an async
callable that fetches a single page and reports the server's current
total-page count. Pages are requested strictly in order, one at a time,
and the first failure aborts the walk.

Examples
--------
>>> import asyncio
>>> async def source(page, page_size):
...     return Page(records=[page], total_page=2)
>>> asyncio.run(fetch_all_pages(source, 50))
[1, 2]
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Page(Generic[T]):
    """One page of records plus the server-reported total page count."""

    records: Sequence[T]
    total_page: int = 1


PageSource = Callable[[int, int], Awaitable[Page[T]]]


def normalize_total_page(value: object) -> int:
    """Coerce a server-reported total page count; missing, zero or junk means 1.

    Examples
    --------
    >>> normalize_total_page("3"), normalize_total_page(0), normalize_total_page(None)
    (3, 1, 1)
    """
    if value is None or isinstance(value, bool):
        return 1
    try:
        total = int(float(value))  # type: ignore[arg-type]
    except (TypeError, ValueError, OverflowError):
        return 1
    return max(total, 1)


async def fetch_all_pages(source: PageSource[T], page_size: int) -> list[T]:
    """Fetch every page from ``source`` and concatenate the records.

    Parameters
    ----------
    source : Callable[[int, int], Awaitable[Page]]
        Coroutine function called as ``source(page, page_size)``. It raises
        ``NetworkError`` or ``ProtocolError`` on failure; those propagate
        unchanged.
    page_size : int
        Number of records requested per page.

    Returns
    -------
    list
        Records of all pages, in page order and response order within a page.

    Raises
    ------
    ValueError
        If ``page_size`` is below 1.

    Notes
    -----
    The total page count is re-read from every response and the latest
    value bounds the loop, so a server that revises the total mid-walk is
    followed. At least one page is always requested.
    """
    if page_size < 1:
        raise ValueError(f"page_size must be at least 1, got {page_size}")
    results: list[T] = []
    current_page = 1
    total_page = 1
    while current_page <= total_page:
        page = await source(current_page, page_size)
        total_page = normalize_total_page(page.total_page)
        results.extend(page.records)
        logger.debug(
            "Fetched page %d/%d (%d records)", current_page, total_page, len(page.records)
        )
        current_page += 1
    logger.info("Fetched %d records across %d pages", len(results), current_page - 1)
    return results


__all__ = ["Page", "PageSource", "fetch_all_pages", "normalize_total_page"]
