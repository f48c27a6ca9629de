"""Central application exception hierarchy.

This module defines the base application exception ``AppError`` and the
specialized subclasses raised by the report pipeline: missing run context
(``ConfigError``), failed HTTP requests (``NetworkError``), malformed
platform responses (``ProtocolError``), nothing to report
(``EmptyDataError``) and overlapping runs (``RunInProgressError``). Using a
centralized hierarchy makes error handling, logging and testing consistent.
"""

from __future__ import annotations

from typing import Any, Mapping


class AppError(Exception):
    """Base exception for all application-level errors.

    Parameters
    ----------
    code : str
        Machine-readable error code (e.g., ``'NETWORK_ERROR'``).
    message : str
        Human-readable message describing the error.
    context : Mapping[str, Any] | None, optional
        Optional structured context for logging.
    transient : bool, optional
        Whether the error is temporary and a later run may succeed.

    Attributes
    ----------
    code : str
        Stable machine-readable error code.
    message : str
        Human-readable message.
    context : dict
        Structured, non-sensitive context for logging.
    transient : bool
        True if the error is transient.

    Examples
    --------
    >>> e = AppError('CODE', 'message', context={'k': 'v'}, transient=True)
    >>> e.code
    'CODE'
    """

    __slots__ = ("code", "message", "context", "transient")

    def __init__(
        self,
        code: str,
        message: str,
        *,
        context: Mapping[str, Any] | None = None,
        transient: bool = False,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.context = dict(context or {})
        self.transient = bool(transient)

    def __str__(self) -> str:
        """Return a compact string representation of the error."""
        return f"{self.code}: {self.message}"

    def to_dict(self) -> dict[str, Any]:
        """Return a log-safe dictionary representation of the error."""
        return {
            "error_code": self.code,
            "message": self.message,
            "context": self.context,
            "is_transient": self.transient,
        }


class ConfigError(AppError):
    """Raised when required run context or configuration is missing or invalid."""

    def __init__(
        self, message: str, *, context: Mapping[str, Any] | None = None
    ) -> None:
        super().__init__("CONFIG_ERROR", message, context=context, transient=False)


class NetworkError(AppError):
    """Raised when a platform request does not return a success status.

    Parameters
    ----------
    message : str
        Human-readable message.
    status : int | None, optional
        HTTP status code of the failed response, if one was received.
    context : Mapping[str, Any] | None, optional
        Optional structured context for logging.
    """

    __slots__ = ("status",)

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        merged = dict(context or {})
        if status is not None:
            merged.setdefault("status", status)
        super().__init__("NETWORK_ERROR", message, context=merged, transient=True)
        self.status = status


class ProtocolError(AppError):
    """Raised when a platform response does not match the expected envelope."""

    def __init__(
        self, message: str, *, context: Mapping[str, Any] | None = None
    ) -> None:
        super().__init__("PROTOCOL_ERROR", message, context=context, transient=False)


class EmptyDataError(AppError):
    """Raised when a run or an export resolves zero records."""

    def __init__(
        self, message: str, *, context: Mapping[str, Any] | None = None
    ) -> None:
        super().__init__("EMPTY_DATA_ERROR", message, context=context, transient=False)


class RunInProgressError(AppError):
    """Raised when a run is requested while another run is still in flight."""

    def __init__(
        self, message: str, *, context: Mapping[str, Any] | None = None
    ) -> None:
        super().__init__(
            "RUN_IN_PROGRESS_ERROR", message, context=context, transient=True
        )
