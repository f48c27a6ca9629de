"""Run-context resolution: which group and which assignment structure to report on.

A run needs two platform serials: the group serial (whose members are
listed) and the structure serial (the assignment whose submissions are
fetched). They come from a ``ContextResolver``:

- ``StaticContextResolver`` returns values supplied directly (CLI flags).
- ``PageContextResolver`` inspects an assignment page on the platform: its
  URL query, the URLs of resources the page loaded, and finally the page
  text.
- ``FallbackContextResolver`` fills whatever the primary resolver missed
  from configured defaults and remembers which values were detected.

Resolvers never guess: a serial that cannot be found is ``None``, and
``SerialContext.require`` turns that into an actionable ``ConfigError``.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol
from urllib.parse import parse_qs, urlsplit

from submission_report.config import PLATFORM_HOST_PREFIX
from submission_report.exceptions import ConfigError

logger = logging.getLogger(__name__)

STRUCTURE_PARAM = "serial"
GROUP_PARAM_CANDIDATES: tuple[str, ...] = ("groupSerial", "groupSerials", "group")
GROUP_SERIALS_IN_TEXT = re.compile(r"groupSerials=([A-Z0-9-]+)")
STRUCTURE_SERIAL_IN_TEXT = re.compile(r"Node-[A-Z0-9]+")
GROUP_SERIAL_IN_TEXT = re.compile(r"GRP-[A-Z0-9]+")


@dataclass(frozen=True)
class SerialContext:
    """Serials identifying one report; either may be unresolved (``None``)."""

    group_serial: str | None = None
    structure_serial: str | None = None
    group_detected: bool = False
    structure_detected: bool = False

    @property
    def is_complete(self) -> bool:
        return bool(self.group_serial and self.structure_serial)

    def require(self) -> tuple[str, str]:
        """Return ``(group_serial, structure_serial)`` or raise ``ConfigError``."""
        missing = [
            label
            for label, value in (
                ("group serial", self.group_serial),
                ("structure serial", self.structure_serial),
            )
            if not value
        ]
        if missing:
            raise ConfigError(
                "Unable to resolve "
                + " and ".join(missing)
                + ". Open the assignment page on the platform or pass "
                "--group-serial/--structure-serial (or set DEFAULT_GROUP_SERIAL/"
                "DEFAULT_STRUCTURE_SERIAL).",
                context={"missing": missing},
            )
        return str(self.group_serial), str(self.structure_serial)

    def describe(self) -> dict[str, str]:
        """Human-readable labels, marking values that came from defaults."""

        def label(value: str | None, detected: bool) -> str:
            if not value:
                return "Not detected"
            return value if detected else f"{value} (default)"

        return {
            "group": label(self.group_serial, self.group_detected),
            "structure": label(self.structure_serial, self.structure_detected),
        }


class ContextResolver(Protocol):
    """Supplies the serials for a run before it starts."""

    def resolve(self) -> SerialContext: ...


class StaticContextResolver:
    """Resolver over explicitly supplied serials; empty strings count as missing."""

    def __init__(
        self, group_serial: str | None = None, structure_serial: str | None = None
    ) -> None:
        self.group_serial = group_serial or None
        self.structure_serial = structure_serial or None

    def resolve(self) -> SerialContext:
        return SerialContext(
            group_serial=self.group_serial,
            structure_serial=self.structure_serial,
            group_detected=self.group_serial is not None,
            structure_detected=self.structure_serial is not None,
        )


def _first_query_value(url: str, keys: Sequence[str]) -> str | None:
    query = parse_qs(urlsplit(url).query)
    for key in keys:
        for value in query.get(key, []):
            if value:
                return value
    return None


class PageContextResolver:
    """Detect serials from an assignment page on the platform.

    Parameters
    ----------
    page_url : str
        URL of the page. Pages outside ``host_prefix`` resolve to nothing.
    page_text : str, optional
        Page markup, searched for ``Node-...`` / ``GRP-...`` identifiers
        when the URLs do not carry the serials.
    resource_urls : Sequence[str], optional
        URLs of requests the page issued, oldest first. The most recent
        one carrying a group parameter wins.
    host_prefix : str, optional
        Required URL prefix of the platform.
    """

    def __init__(
        self,
        page_url: str,
        page_text: str = "",
        resource_urls: Sequence[str] = (),
        host_prefix: str = PLATFORM_HOST_PREFIX,
    ) -> None:
        self.page_url = page_url
        self.page_text = page_text
        self.resource_urls = list(resource_urls)
        self.host_prefix = host_prefix

    def _group_from_resources(self) -> str | None:
        for url in reversed(self.resource_urls):
            if not url:
                continue
            if urlsplit(url).scheme:
                found = _first_query_value(url, GROUP_PARAM_CANDIDATES)
            else:
                match = GROUP_SERIALS_IN_TEXT.search(url)
                found = match.group(1) if match else None
            if found:
                return found
        return None

    def resolve(self) -> SerialContext:
        if self.page_url and not self.page_url.startswith(self.host_prefix):
            logger.info("Page %s is not on the platform; nothing detected", self.page_url)
            return SerialContext()
        structure = _first_query_value(self.page_url, (STRUCTURE_PARAM,))
        group = _first_query_value(self.page_url, GROUP_PARAM_CANDIDATES)
        if not group:
            group = self._group_from_resources()
        if not structure:
            match = STRUCTURE_SERIAL_IN_TEXT.search(self.page_text)
            structure = match.group(0) if match else None
        if not group:
            match = GROUP_SERIAL_IN_TEXT.search(self.page_text)
            group = match.group(0) if match else None
        logger.debug("Detected group=%s structure=%s", group, structure)
        return SerialContext(
            group_serial=group,
            structure_serial=structure,
            group_detected=group is not None,
            structure_detected=structure is not None,
        )


class FallbackContextResolver:
    """Detected serials win; configured defaults fill the gaps."""

    def __init__(
        self,
        primary: ContextResolver,
        default_group_serial: str = "",
        default_structure_serial: str = "",
    ) -> None:
        self.primary = primary
        self.default_group_serial = default_group_serial
        self.default_structure_serial = default_structure_serial

    def resolve(self) -> SerialContext:
        detected = self.primary.resolve()
        return SerialContext(
            group_serial=detected.group_serial or self.default_group_serial or None,
            structure_serial=detected.structure_serial
            or self.default_structure_serial
            or None,
            group_detected=bool(detected.group_serial),
            structure_detected=bool(detected.structure_serial),
        )


__all__ = [
    "ContextResolver",
    "FallbackContextResolver",
    "PageContextResolver",
    "SerialContext",
    "StaticContextResolver",
]
