"""
cwpipe: pipe byte streams into CloudWatch Logs streams and back.

A ``Group`` opens ``Writer`` sessions that turn written bytes into ordered,
rate-limited log event batches, and ``Reader`` sessions that poll a stream
and expose its messages as bytes.

Example:
    import asyncio
    from cwpipe import Group

    async def main() -> None:
        group = Group.from_settings("my-app")
        async with await group.create("worker-1") as writer:
            writer.write(b"started\\n")

    asyncio.run(main())
"""

from __future__ import annotations

from ._version import __version__
from .core.buffer import LogRecord
from .core.client import Boto3LogsClient, LogsClient
from .core.errors import (
    ClosedSessionError,
    CwpipeError,
    LogServiceError,
    PartialRejectionError,
    ReadError,
    StreamCreationError,
    SubmissionError,
    TokenBootstrapError,
)
from .core.group import Group
from .core.reader import Reader
from .core.settings import Settings
from .core.writer import Writer
from .metrics.metrics import MetricsCollector

__all__ = [
    "Boto3LogsClient",
    "ClosedSessionError",
    "CwpipeError",
    "Group",
    "LogRecord",
    "LogServiceError",
    "LogsClient",
    "MetricsCollector",
    "PartialRejectionError",
    "ReadError",
    "Reader",
    "Settings",
    "StreamCreationError",
    "SubmissionError",
    "TokenBootstrapError",
    "Writer",
    "__version__",
    "VERSION",
]

VERSION = __version__
