"""
Byte-stream writer for a single log stream.

A ``Writer`` turns arbitrary bytes into log records, one per line, and
submits them in batches at the stream's rate limit. Writers are created by
``Group.create``.

Example:
    writer = await group.create("web-1", on_event=tag_record)
    writer.write(b"GET / 200\\nGET /health 200\\n")
    await writer.close()

``write`` only stages records in memory. A background task submits whatever
is staged on every tick of the flush ticker. If a submission fails the writer
becomes permanently unusable: the background task stops, and ``write``,
``flush`` and ``close`` all raise the error that caused it.
"""

from __future__ import annotations

import asyncio
import time
import types
from typing import Callable

from ..metrics.metrics import MetricsCollector
from . import diagnostics
from .buffer import LogRecord
from .client import LogsClient
from .errors import ClosedSessionError, CwpipeError
from .flush import FlushEngine
from .throttle import Ticker

Clock = Callable[[], float]
RecordCallback = Callable[[LogRecord], None]


def split_lines(data: bytes) -> list[bytes]:
    """Split ``data`` after each newline.

    A trailing fragment without a newline is returned as its own line; it is
    not held back to be joined with later input.
    """
    *complete, tail = data.split(b"\n")
    lines = [line + b"\n" for line in complete]
    if tail:
        lines.append(tail)
    return lines


class Writer:
    """Exclusive append session onto one log stream."""

    def __init__(
        self,
        client: LogsClient,
        group_name: str,
        stream_name: str,
        *,
        flush_interval_seconds: float,
        sequence_token: str | None = None,
        cancel_event: asyncio.Event | None = None,
        metrics: MetricsCollector | None = None,
        on_event: RecordCallback | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._group_name = group_name
        self._stream_name = stream_name
        self._engine = FlushEngine(
            client,
            group_name,
            stream_name,
            sequence_token=sequence_token,
            cancel_event=cancel_event,
            metrics=metrics,
        )
        self._ticker = Ticker(flush_interval_seconds)
        self._closing = asyncio.Event()
        self._closed = False
        self._task: asyncio.Task[None] | None = None
        self._clock: Clock = clock or time.time
        self._on_event = on_event

    @property
    def group_name(self) -> str:
        return self._group_name

    @property
    def stream_name(self) -> str:
        return self._stream_name

    @property
    def sequence_token(self) -> str | None:
        return self._engine.sequence_token

    @property
    def error(self) -> CwpipeError | None:
        """The sticky error, or ``None`` while the writer is healthy."""
        return self._engine.error

    @property
    def closed(self) -> bool:
        return self._closed

    def has_more(self) -> bool:
        return self._engine.has_more()

    def pending(self) -> int:
        """Number of records staged but not yet submitted."""
        return self._engine.staged()

    def write(self, data: bytes) -> int:
        """Stage one record per line of ``data``.

        Returns the number of bytes consumed, line terminators included.
        Safe to call from any thread; never performs I/O.
        """
        if self._closed:
            raise ClosedSessionError(
                group_name=self._group_name, stream_name=self._stream_name
            )
        error = self._engine.error
        if error is not None:
            raise error

        consumed = 0
        for line in split_lines(bytes(data)):
            record = LogRecord(
                message=line,
                timestamp_millis=int(self._clock() * 1000),
            )
            if self._on_event is not None:
                self._on_event(record)
            self._engine.stage(record)
            consumed += len(line)
        return consumed

    async def flush(self) -> None:
        """Submit everything staged now, outside the ticker schedule."""
        if self._closed:
            raise ClosedSessionError(
                group_name=self._group_name, stream_name=self._stream_name
            )
        await self._engine.flush_batch()

    def start(self) -> None:
        """Start the background flush task. Called once by the group."""
        if self._task is None:
            self._task = asyncio.create_task(
                self._run(), name=f"cwpipe-writer:{self._stream_name}"
            )

    async def _run(self) -> None:
        while not self._closing.is_set():
            try:
                await asyncio.wait_for(
                    self._closing.wait(), timeout=self._ticker.next_delay()
                )
                return
            except asyncio.TimeoutError:
                pass
            try:
                await self._engine.flush_batch()
            except CwpipeError:
                diagnostics.warn(
                    "writer",
                    "flush loop stopped",
                    group=self._group_name,
                    stream=self._stream_name,
                )
                return

    async def close(self) -> None:
        """Stop accepting writes and submit whatever is still staged.

        Waits for ticks while records remain, so the final batches respect the
        stream's rate limit. Raises the sticky error if any submission failed.
        """
        self._closed = True
        self._closing.set()
        try:
            while self._engine.has_more() and self._engine.error is None:
                await self._ticker.tick()
                try:
                    await self._engine.flush_batch()
                except CwpipeError:
                    break
        finally:
            self._ticker.stop()
            if self._task is not None:
                await asyncio.gather(self._task, return_exceptions=True)

        error = self._engine.error
        if error is not None:
            raise error

    async def __aenter__(self) -> Writer:
        return self

    async def __aexit__(
        self,
        _exc_type: type[BaseException] | None,
        _exc: BaseException | None,
        _tb: types.TracebackType | None,
    ) -> None:
        await self.close()
