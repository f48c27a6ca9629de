"""Response envelopes for the two platform listing endpoints.

The platform wraps every listing in ``{"data": {...}}``. Each endpoint gets
an explicit envelope type whose ``from_payload`` constructor validates the
structure and converts raw entries into pipeline records. Any structural
mismatch raises ``ProtocolError`` instead of silently defaulting.

Group listing::

    {"data": {"userGroups": [...], "pagination": {"totalPage": 3}}}

Submission listing::

    {"data": {"userSubmissions": [...]}}
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from submission_report.exceptions import ProtocolError
from submission_report.pipeline.models import (
    Attachment,
    GroupMember,
    Score,
    SubmissionRecord,
)

from .paginated import normalize_total_page


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _data_section(payload: Any, endpoint: str) -> Mapping[str, Any]:
    if not isinstance(payload, Mapping):
        raise ProtocolError(
            f"{endpoint} response is not a JSON object",
            context={"endpoint": endpoint, "type": type(payload).__name__},
        )
    data = payload.get("data")
    if not isinstance(data, Mapping):
        raise ProtocolError(
            f"{endpoint} response has no 'data' object", context={"endpoint": endpoint}
        )
    return data


def _list_field(data: Mapping[str, Any], key: str, endpoint: str) -> list[Any]:
    entries = data.get(key)
    if not isinstance(entries, list):
        raise ProtocolError(
            f"{endpoint} response field 'data.{key}' is not a list",
            context={"endpoint": endpoint, "field": key},
        )
    for position, entry in enumerate(entries):
        if not isinstance(entry, Mapping):
            raise ProtocolError(
                f"{endpoint} entry {position} in 'data.{key}' is not an object",
                context={"endpoint": endpoint, "field": key, "position": position},
            )
    return entries


def parse_group_member(entry: Mapping[str, Any]) -> GroupMember:
    """Convert one ``userGroups`` entry; ``userName`` backs up a missing ``name``."""
    return GroupMember(
        user_serial=_text(entry.get("userSerial")),
        group_serial=_text(entry.get("groupSerial")),
        name=_text(entry.get("name") or entry.get("userName")),
        email=_text(entry.get("email")),
    )


def _parse_score(value: Any) -> Score | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float, str)):
        return value
    raise ProtocolError(
        "submission score has an unexpected type",
        context={"type": type(value).__name__},
    )


def _parse_attachments(value: Any) -> tuple[Attachment, ...]:
    if value is None:
        return ()
    if not isinstance(value, list):
        raise ProtocolError(
            "submission attachments are not a list",
            context={"type": type(value).__name__},
        )
    attachments = []
    for position, item in enumerate(value):
        if not isinstance(item, Mapping):
            raise ProtocolError(
                f"attachment {position} is not an object", context={"position": position}
            )
        url = item.get("URL", item.get("url"))
        attachments.append(Attachment(url=_text(url), type=_text(item.get("type"))))
    return tuple(attachments)


def parse_submission(entry: Mapping[str, Any]) -> SubmissionRecord:
    """Convert one ``userSubmissions`` entry; its ``submissions`` list holds the files.

    An empty or zero ``submittedAt`` means the entry was never submitted.
    """
    submitted_at = entry.get("submittedAt")
    if isinstance(submitted_at, bool) or submitted_at in ("", 0):
        submitted_at = None
    elif submitted_at is not None and not isinstance(submitted_at, (str, int, float)):
        raise ProtocolError(
            "submission submittedAt has an unexpected type",
            context={"type": type(submitted_at).__name__},
        )
    return SubmissionRecord(
        user_serial=_text(entry.get("userSerial")),
        description=_text(entry.get("description")),
        score=_parse_score(entry.get("score")),
        submitted_at=submitted_at,
        attachments=_parse_attachments(entry.get("submissions")),
        feedback=_text(entry.get("feedback")),
    )


@dataclass(frozen=True)
class UserGroupEnvelope:
    """Parsed page of the group listing endpoint."""

    members: tuple[GroupMember, ...]
    total_page: int

    @classmethod
    def from_payload(cls, payload: Any) -> "UserGroupEnvelope":
        """Validate a raw group listing payload.

        A missing ``pagination`` object or ``totalPage`` value counts as a
        single page; a ``pagination`` value that is not an object is a
        protocol error.
        """
        endpoint = "user-group"
        data = _data_section(payload, endpoint)
        entries = _list_field(data, "userGroups", endpoint)
        pagination = data.get("pagination")
        if pagination is None:
            total_page = 1
        elif isinstance(pagination, Mapping):
            total_page = normalize_total_page(pagination.get("totalPage"))
        else:
            raise ProtocolError(
                "user-group response field 'data.pagination' is not an object",
                context={"endpoint": endpoint},
            )
        return cls(
            members=tuple(parse_group_member(e) for e in entries),
            total_page=total_page,
        )


@dataclass(frozen=True)
class SubmissionEnvelope:
    """Parsed response of the submission listing endpoint."""

    submissions: tuple[SubmissionRecord, ...]

    @classmethod
    def from_payload(cls, payload: Any) -> "SubmissionEnvelope":
        endpoint = "user-submission"
        data = _data_section(payload, endpoint)
        entries = _list_field(data, "userSubmissions", endpoint)
        return cls(submissions=tuple(parse_submission(e) for e in entries))


__all__ = [
    "SubmissionEnvelope",
    "UserGroupEnvelope",
    "parse_group_member",
    "parse_submission",
]
