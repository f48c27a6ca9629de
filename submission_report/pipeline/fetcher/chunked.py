"""Bounded-batch fetching for key-list queries.

The submission endpoint takes its user serials as a repeated query
parameter, so large key sets are split into consecutive chunks and
requested one chunk at a time.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterator, Sequence
from typing import TypeVar

from submission_report.config import CHUNK_SIZE

logger = logging.getLogger(__name__)

T = TypeVar("T")

ChunkFetcher = Callable[[Sequence[str]], Awaitable[Sequence[T]]]


def chunked(keys: Sequence[str], size: int) -> Iterator[list[str]]:
    """Yield consecutive slices of ``keys`` holding at most ``size`` items.

    Examples
    --------
    >>> [len(c) for c in chunked([str(i) for i in range(40)], 18)]
    [18, 18, 4]
    """
    if size < 1:
        raise ValueError(f"chunk size must be at least 1, got {size}")
    for start in range(0, len(keys), size):
        yield list(keys[start : start + size])


async def fetch_by_keys(
    keys: Sequence[str],
    fetch_chunk: ChunkFetcher[T],
    chunk_size: int = CHUNK_SIZE,
) -> list[T]:
    """Fetch records for ``keys`` in chunks and concatenate them in chunk order.

    Parameters
    ----------
    keys : Sequence[str]
        Keys to query, in the order their chunks should be requested.
    fetch_chunk : Callable[[Sequence[str]], Awaitable[Sequence]]
        Coroutine function issuing one request for one chunk.
    chunk_size : int, optional
        Maximum number of keys per request (default ``CHUNK_SIZE``).

    Returns
    -------
    list
        All records, chunk by chunk. An empty key list issues no request.

    Raises
    ------
    NetworkError, ProtocolError
        Propagated from ``fetch_chunk``; remaining chunks are not requested
        and no partial result is returned.
    """
    results: list[T] = []
    chunks = list(chunked(keys, chunk_size))
    for index, chunk in enumerate(chunks, start=1):
        records = await fetch_chunk(chunk)
        results.extend(records)
        logger.debug(
            "Fetched chunk %d/%d (%d keys, %d records)",
            index,
            len(chunks),
            len(chunk),
            len(records),
        )
    return results


__all__ = ["ChunkFetcher", "chunked", "fetch_by_keys"]
