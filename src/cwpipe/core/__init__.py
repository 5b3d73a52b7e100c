from .buffer import EventBuffer, LogRecord
from .client import (
    Boto3LogsClient,
    GetLogEventsResult,
    LogsClient,
    PutLogEventsResult,
)
from .errors import (
    ClosedSessionError,
    CwpipeError,
    ErrorCategory,
    ErrorContext,
    ErrorSeverity,
    InvalidSequenceTokenError,
    LogServiceError,
    OperationCancelledError,
    PartialRejectionError,
    ReadError,
    ResourceAlreadyExistsError,
    StreamCreationError,
    SubmissionError,
    TokenBootstrapError,
)
from .flush import FlushEngine
from .group import Group, StreamLocks
from .reader import Reader
from .settings import Settings
from .writer import Writer, split_lines

__all__ = [
    "Boto3LogsClient",
    "ClosedSessionError",
    "CwpipeError",
    "ErrorCategory",
    "ErrorContext",
    "ErrorSeverity",
    "EventBuffer",
    "FlushEngine",
    "GetLogEventsResult",
    "Group",
    "InvalidSequenceTokenError",
    "LogRecord",
    "LogServiceError",
    "LogsClient",
    "OperationCancelledError",
    "PartialRejectionError",
    "PutLogEventsResult",
    "ReadError",
    "Reader",
    "ResourceAlreadyExistsError",
    "Settings",
    "StreamCreationError",
    "StreamLocks",
    "SubmissionError",
    "TokenBootstrapError",
    "Writer",
    "split_lines",
]
