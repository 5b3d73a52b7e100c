"""
Staging area for log records awaiting submission.

``EventBuffer`` is the only state shared between the producer side of a
writer (``write`` calls, possibly from several threads) and its consumer side
(the flush loop). Producers append; the consumer drains everything at once.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass


@dataclass
class LogRecord:
    """One line of input destined for a log stream.

    Observer callbacks may adjust a record before it is staged; after staging
    it is treated as read-only.
    """

    message: bytes
    timestamp_millis: int

    def to_event(self) -> dict[str, object]:
        """Render as a ``PutLogEvents`` input event."""
        return {
            "timestamp": self.timestamp_millis,
            "message": self.message.decode("utf-8", errors="replace"),
        }


class EventBuffer:
    """Ordered, thread-safe list of pending ``LogRecord`` items."""

    __slots__ = ("_lock", "_records")

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._records: list[LogRecord] = []

    def add(self, record: LogRecord) -> None:
        with self._lock:
            self._records.append(record)

    def drain(self) -> list[LogRecord]:
        """Detach and return every staged record, leaving the buffer empty."""
        with self._lock:
            records, self._records = self._records, []
        return records

    def has_more(self) -> bool:
        # Unlocked read; liveness hint only
        return bool(self._records)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
