"""Configuration and environment loader for the platform API client.

This module provides ``PlatformConfig``, which loads, validates, and
exposes all configuration required to talk to the assignment platform:
base URL, tenant headers, the ambient session cookie, request shaping
(page size, chunk size) and throttling.

Role in Architecture
--------------------
- Forms the boundary between the process environment (shell, CI, ``.env``)
  and the pipeline's typed runtime config.
- No business or client logic: only configuration loading and validation.

Examples
--------
>>> from submission_report.pipeline.fetcher.config import PlatformConfig
>>> cfg = PlatformConfig()
>>> cfg.page_size > 0
True
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

import submission_report.config as _project_config
from submission_report.config import (
    CHUNK_SIZE,
    DEFAULT_BASE_URL,
    DEFAULT_COUNTRY,
    DEFAULT_PLATFORM,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_TARGET_RPM,
    DEFAULT_TENANT,
    PAGE_SIZE,
)
from submission_report.exceptions import ConfigError


def _positive_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError as err:
        raise ConfigError(
            f"{name} must be an integer, got {raw!r}", context={"variable": name}
        ) from err
    if value < 1:
        raise ConfigError(
            f"{name} must be at least 1, got {value}", context={"variable": name}
        )
    return value


class PlatformConfig:
    r"""Configuration loader and validator for the assignment platform API.

    Attributes
    ----------
    base_url : str
        Scheme and host of the platform API, without a trailing slash.
    tenant : str
        Tenant name sent as the ``tenantname`` header and ``tenant`` query.
    country : str
        Country code header.
    platform : str
        Platform header value (``Web``).
    session_cookie : str
        Ambient credentials forwarded as a ``Cookie`` header; may be empty.
    page_size : int
        Page size for the user-group listing.
    chunk_size : int
        Maximum number of user serials per submission request.
    request_timeout : int
        Timeout (seconds) for individual requests.
    target_rpm : int
        Upper bound on requests per minute.
    default_group_serial, default_structure_serial : str
        Fallback serials used when context detection finds nothing.

    Notes
    -----
    Instantiate once per process. Values come from the environment and an
    optional ``.env`` file at the project root.
    """

    def __init__(self) -> None:
        """Load configuration from the environment and validate it.

        Raises
        ------
        ConfigError
            If a numeric setting is not a positive integer.
        """
        env_path = Path(_project_config.PROJECT_ROOT) / ".env"
        if env_path.exists():
            load_dotenv(env_path, override=False)
        self.base_url: str = os.getenv("PLATFORM_BASE_URL", DEFAULT_BASE_URL).rstrip(
            "/"
        )
        self.tenant: str = os.getenv("PLATFORM_TENANT", DEFAULT_TENANT)
        self.country: str = os.getenv("PLATFORM_COUNTRY", DEFAULT_COUNTRY)
        self.platform: str = os.getenv("PLATFORM_NAME", DEFAULT_PLATFORM)
        self.session_cookie: str = os.getenv("PLATFORM_SESSION_COOKIE", "")
        self.page_size = _positive_int("PAGE_SIZE", PAGE_SIZE)
        self.chunk_size = _positive_int("CHUNK_SIZE", CHUNK_SIZE)
        self.request_timeout = _positive_int("REQUEST_TIMEOUT", DEFAULT_REQUEST_TIMEOUT)
        self.target_rpm = _positive_int("TARGET_RPM", DEFAULT_TARGET_RPM)
        self.default_group_serial: str = os.getenv("DEFAULT_GROUP_SERIAL", "")
        self.default_structure_serial: str = os.getenv("DEFAULT_STRUCTURE_SERIAL", "")
        if not self.base_url.startswith(("http://", "https://")):
            raise ConfigError(
                f"PLATFORM_BASE_URL must be an http(s) URL, got {self.base_url!r}"
            )

    def headers(self) -> dict[str, str]:
        """Return the fixed header set sent with every platform request."""
        headers = {
            "content-type": "application/json",
            "tenantname": self.tenant,
            "country": self.country,
            "platform": self.platform,
            "with-auth": "true",
        }
        if self.session_cookie:
            headers["Cookie"] = self.session_cookie
        return headers
