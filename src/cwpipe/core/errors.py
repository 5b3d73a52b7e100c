"""
Error hierarchy for cwpipe.

Every error raised by the library derives from ``CwpipeError`` and carries an
``ErrorContext`` describing where it happened (group, stream) along with a
category and severity usable by callers for routing or alerting.

Two families exist:
- Service errors, raised by ``LogsClient`` implementations when the remote
  log service rejects a call.
- Session errors, raised by writers, readers and groups.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class ErrorCategory(str, Enum):
    SERVICE = "service"
    SESSION = "session"
    CANCELLED = "cancelled"
    CONSISTENCY = "consistency"


class ErrorSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorContext(BaseModel):
    """Structured context captured when an error is created."""

    error_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    category: ErrorCategory = ErrorCategory.SESSION
    severity: ErrorSeverity = ErrorSeverity.MEDIUM
    group_name: str | None = None
    stream_name: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class CwpipeError(Exception):
    """Base class for all cwpipe errors."""

    default_category = ErrorCategory.SESSION
    default_severity = ErrorSeverity.MEDIUM

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        severity: ErrorSeverity | None = None,
        cause: BaseException | None = None,
        group_name: str | None = None,
        stream_name: str | None = None,
        **metadata: Any,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.context = ErrorContext(
            category=category or self.default_category,
            severity=severity or self.default_severity,
            group_name=group_name,
            stream_name=stream_name,
            metadata=metadata,
        )
        if cause is not None:
            self.__cause__ = cause

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "error_type": type(self).__name__,
            "message": self.message,
            "context": self.context.model_dump(mode="json"),
        }
        if self.__cause__ is not None:
            data["cause"] = f"{type(self.__cause__).__name__}: {self.__cause__}"
        return data


# Service errors


class LogServiceError(CwpipeError):
    """The remote log service rejected a call.

    ``code`` is the service's error code (e.g. ``ThrottlingException``) when
    one is known.
    """

    default_category = ErrorCategory.SERVICE

    def __init__(self, message: str, *, code: str | None = None, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.code = code


class ResourceAlreadyExistsError(LogServiceError):
    default_severity = ErrorSeverity.LOW


class InvalidSequenceTokenError(LogServiceError):
    """The supplied sequence token is stale.

    Recovered locally by retrying the same batch with
    ``expected_sequence_token``.
    """

    default_category = ErrorCategory.CONSISTENCY
    default_severity = ErrorSeverity.LOW

    def __init__(
        self,
        message: str,
        *,
        expected_sequence_token: str | None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.expected_sequence_token = expected_sequence_token


class OperationCancelledError(LogServiceError):
    """A remote call was abandoned because the session's cancel event fired."""

    default_category = ErrorCategory.CANCELLED


# Session errors


class ClosedSessionError(CwpipeError):
    """Write attempted on a closed writer or read on a closed reader."""

    def __init__(self, message: str = "write to closed session", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)


class StreamCreationError(CwpipeError):
    default_severity = ErrorSeverity.HIGH


class TokenBootstrapError(CwpipeError):
    default_severity = ErrorSeverity.HIGH


class SubmissionError(CwpipeError):
    """A batch could not be appended to the stream."""

    default_severity = ErrorSeverity.HIGH


class PartialRejectionError(SubmissionError):
    """The batch was accepted but some records were individually rejected."""

    def __init__(self, rejected_info: dict[str, Any], **kwargs: Any) -> None:
        parts = []
        if rejected_info.get("tooNewLogEventStartIndex") is not None:
            parts.append(
                f"too new from index {rejected_info['tooNewLogEventStartIndex']}"
            )
        if rejected_info.get("tooOldLogEventEndIndex") is not None:
            parts.append(f"too old up to index {rejected_info['tooOldLogEventEndIndex']}")
        if rejected_info.get("expiredLogEventEndIndex") is not None:
            parts.append(f"expired up to index {rejected_info['expiredLogEventEndIndex']}")
        detail = ", ".join(parts) or "unspecified"
        super().__init__(f"log events rejected: {detail}", **kwargs)
        self.rejected_info = dict(rejected_info)


class ReadError(CwpipeError):
    """Polling a stream for new events failed."""


__all__ = [
    "ClosedSessionError",
    "CwpipeError",
    "ErrorCategory",
    "ErrorContext",
    "ErrorSeverity",
    "InvalidSequenceTokenError",
    "LogServiceError",
    "OperationCancelledError",
    "PartialRejectionError",
    "ReadError",
    "ResourceAlreadyExistsError",
    "StreamCreationError",
    "SubmissionError",
    "TokenBootstrapError",
]
