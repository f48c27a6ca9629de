"""fetcher.client module.

This module is the networking boundary of the report pipeline. It defines:

- ``Transport``: the narrow ``get(url, params)`` capability the pipeline
  needs from an HTTP stack, returning a ``TransportResponse`` with the
  status code and the decoded JSON body (``None`` when the body is not
  JSON).
- ``AiohttpTransport``: the production transport, built on an
  ``aiohttp.ClientSession`` with the platform's fixed header set, the
  ambient session cookie and an ``aiolimiter`` request throttle.
- ``PlatformAPIClient``: binds the group-listing and submission-listing
  endpoints to the paginated and chunked fetchers and translates failures
  into ``NetworkError`` / ``ProtocolError``.

Requests are issued one at a time; nothing here retries. The first failed
request surfaces to the caller.

Examples
--------
>>> import asyncio
>>> from submission_report.pipeline.fetcher.config import PlatformConfig
>>> async def main():
...     cfg = PlatformConfig()
...     async with AiohttpTransport(cfg) as transport:
...         client = PlatformAPIClient(transport, cfg)
...         return await client.fetch_all_user_groups("GRP-123")
>>> # asyncio.run(main())
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Protocol

import aiohttp
from aiolimiter import AsyncLimiter

from submission_report.config import (
    USER_GROUP_PATH,
    USER_GROUP_STATUS,
    USER_SUBMISSION_PATH,
)
from submission_report.exceptions import NetworkError, ProtocolError
from submission_report.pipeline.models import GroupMember, SubmissionRecord

from .chunked import fetch_by_keys
from .config import PlatformConfig
from .envelopes import SubmissionEnvelope, UserGroupEnvelope
from .paginated import Page, fetch_all_pages

logger = logging.getLogger(__name__)

QueryParams = Sequence[tuple[str, str]]


@dataclass(frozen=True)
class TransportResponse:
    """Status code and decoded JSON body of one GET request."""

    status: int
    body: Any = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class Transport(Protocol):
    """HTTP GET capability supplied by the session collaborator."""

    async def get(self, url: str, params: QueryParams) -> TransportResponse: ...


class AiohttpTransport:
    r"""``Transport`` implementation backed by ``aiohttp``.

    The transport can own its session (used as an async context manager)
    or borrow one passed in by the caller, which is then never closed here.

    Parameters
    ----------
    config : PlatformConfig
        Supplies headers, timeout and the requests-per-minute throttle.
    session : aiohttp.ClientSession, optional
        Existing session to reuse. Tests inject fakes exposing ``get``.
    limiter : AsyncLimiter, optional
        Throttle shared across requests; defaults to ``config.target_rpm``
        requests per 60 seconds.
    """

    def __init__(
        self,
        config: PlatformConfig,
        session: aiohttp.ClientSession | None = None,
        limiter: AsyncLimiter | None = None,
    ) -> None:
        self.config = config
        self._session = session
        self._owns_session = session is None
        self._limiter = limiter or AsyncLimiter(config.target_rpm, 60)

    async def __aenter__(self) -> "AiohttpTransport":
        self._open()
        return self

    def _open(self) -> aiohttp.ClientSession:
        if self._session is None:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the owned session; failures are logged and not raised."""
        if self._session is None or not self._owns_session:
            return
        try:
            await self._session.close()
        except Exception:
            logger.warning("Failed to close HTTP session cleanly", exc_info=True)
        finally:
            self._session = None

    async def get(self, url: str, params: QueryParams) -> TransportResponse:
        """Issue one GET request and decode the body as UTF-8 JSON.

        A body that is not valid UTF-8 JSON is returned as ``None``.

        Raises
        ------
        NetworkError
            If the connection fails or times out before a status is received.
        """
        session = self._open()
        try:
            async with self._limiter:
                async with session.get(
                    url,
                    params=list(params),
                    headers=self.config.headers(),
                    timeout=aiohttp.ClientTimeout(total=self.config.request_timeout),
                ) as response:
                    status = response.status
                    raw = await response.read()
        except aiohttp.ClientError as err:
            raise NetworkError(
                f"Request to {url} failed: {err}", context={"url": url}
            ) from err
        except asyncio.TimeoutError as err:
            raise NetworkError(
                f"Request to {url} timed out after {self.config.request_timeout}s",
                context={"url": url},
            ) from err
        try:
            body = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError):
            body = None
        return TransportResponse(status=status, body=body)


class PlatformAPIClient:
    """Typed access to the platform's group and submission listings.

    Parameters
    ----------
    transport : Transport
        Collaborator performing the HTTP requests.
    config : PlatformConfig
        Base URL, tenant, page size and chunk size.
    """

    def __init__(self, transport: Transport, config: PlatformConfig) -> None:
        self.transport = transport
        self.config = config

    @property
    def user_group_url(self) -> str:
        return f"{self.config.base_url}{USER_GROUP_PATH}"

    @property
    def user_submission_url(self) -> str:
        return f"{self.config.base_url}{USER_SUBMISSION_PATH}"

    async def _get_payload(self, url: str, params: QueryParams, label: str) -> Any:
        response = await self.transport.get(url, params)
        if not response.ok:
            raise NetworkError(
                f"{label} request failed with status {response.status}",
                status=response.status,
                context={"url": url},
            )
        if response.body is None:
            raise ProtocolError(
                f"{label} response body is not valid JSON", context={"url": url}
            )
        return response.body

    async def fetch_user_group_page(
        self, group_serial: str, page: int, page_size: int
    ) -> Page[GroupMember]:
        """Fetch one page of active members of ``group_serial``."""
        params = [
            ("page", str(page)),
            ("pageSize", str(page_size)),
            ("groupSerials", group_serial),
            ("withUserData", "true"),
            ("status", USER_GROUP_STATUS),
            ("userId", ""),
            ("userSerial", ""),
        ]
        payload = await self._get_payload(self.user_group_url, params, "User group")
        envelope = UserGroupEnvelope.from_payload(payload)
        return Page(records=envelope.members, total_page=envelope.total_page)

    async def fetch_all_user_groups(self, group_serial: str) -> list[GroupMember]:
        """Walk every page of the group listing for ``group_serial``."""

        async def source(page: int, page_size: int) -> Page[GroupMember]:
            return await self.fetch_user_group_page(group_serial, page, page_size)

        return await fetch_all_pages(source, self.config.page_size)

    async def fetch_submission_chunk(
        self, structure_serial: str, user_serials: Sequence[str]
    ) -> list[SubmissionRecord]:
        """Fetch submissions of one chunk of users for ``structure_serial``."""
        params = [("structureSerial", structure_serial), ("tenant", self.config.tenant)]
        params.extend(("userSerials", serial) for serial in user_serials)
        payload = await self._get_payload(
            self.user_submission_url, params, "Submission"
        )
        return list(SubmissionEnvelope.from_payload(payload).submissions)

    async def fetch_user_submissions(
        self, structure_serial: str, user_serials: Sequence[str]
    ) -> list[SubmissionRecord]:
        """Fetch submissions for all ``user_serials`` in bounded chunks."""

        async def fetch_chunk(chunk: Sequence[str]) -> list[SubmissionRecord]:
            return await self.fetch_submission_chunk(structure_serial, chunk)

        return await fetch_by_keys(user_serials, fetch_chunk, self.config.chunk_size)


__all__ = [
    "AiohttpTransport",
    "PlatformAPIClient",
    "QueryParams",
    "Transport",
    "TransportResponse",
]
