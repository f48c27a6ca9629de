"""The fetcher package retrieves membership and submission records from the platform.

Modules exported
----------------
AiohttpTransport, Transport, TransportResponse
    HTTP boundary: the narrow GET capability and its aiohttp implementation.
PlatformAPIClient
    Endpoint bindings for the group and submission listings.
PlatformConfig
    Environment-driven configuration of base URL, headers and request shaping.
fetch_all_pages, fetch_by_keys
    Sequential page walking and chunked key batching.
"""

from __future__ import annotations

from .chunked import chunked, fetch_by_keys
from .client import AiohttpTransport, PlatformAPIClient, Transport, TransportResponse
from .config import PlatformConfig
from .envelopes import SubmissionEnvelope, UserGroupEnvelope
from .paginated import Page, fetch_all_pages

__all__ = [
    "AiohttpTransport",
    "Page",
    "PlatformAPIClient",
    "PlatformConfig",
    "SubmissionEnvelope",
    "Transport",
    "TransportResponse",
    "UserGroupEnvelope",
    "chunked",
    "fetch_all_pages",
    "fetch_by_keys",
]
