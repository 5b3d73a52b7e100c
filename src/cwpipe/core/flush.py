"""
Batch submission and the sequence-token protocol.

``FlushEngine`` owns every piece of per-stream mutable state a writer needs:
the staging buffer, the current sequence token and the sticky error. Nothing
else reads or writes them directly, and all submissions go through
``flush_batch`` under a single lock, so token transitions for one stream are
totally ordered.

Submission protocol for one batch:

1. Append with the current token.
2. If the service reports the token as stale, adopt the token it expected and
   resend the same batch at once. There is no retry cap; under sustained
   contention from other writers on the same stream this can loop for as long
   as the contention lasts.
3. Any other failure is terminal.
4. An accepted batch with individually rejected records is terminal.
5. Otherwise adopt the returned next token.

A terminal failure is stored as the sticky error. Once set, the engine never
contacts the service again and every caller sees that same exception object.
"""

from __future__ import annotations

import asyncio

from ..metrics.metrics import MetricsCollector
from . import diagnostics
from .buffer import EventBuffer, LogRecord
from .client import LogsClient, call_cancellable
from .errors import (
    CwpipeError,
    InvalidSequenceTokenError,
    PartialRejectionError,
    SubmissionError,
)


class FlushEngine:
    """Owned state and submission logic for one writer session."""

    def __init__(
        self,
        client: LogsClient,
        group_name: str,
        stream_name: str,
        *,
        sequence_token: str | None = None,
        cancel_event: asyncio.Event | None = None,
        metrics: MetricsCollector | None = None,
    ) -> None:
        self._client = client
        self._group_name = group_name
        self._stream_name = stream_name
        self._sequence_token = sequence_token
        self._cancel_event = cancel_event
        self._metrics = metrics
        self._buffer = EventBuffer()
        self._error: CwpipeError | None = None
        self._lock = asyncio.Lock()

    @property
    def sequence_token(self) -> str | None:
        return self._sequence_token

    @property
    def error(self) -> CwpipeError | None:
        return self._error

    def stage(self, record: LogRecord) -> None:
        self._buffer.add(record)

    def has_more(self) -> bool:
        return self._buffer.has_more()

    def staged(self) -> int:
        return len(self._buffer)

    async def flush_batch(self) -> None:
        """Submit everything currently staged as one batch.

        Raises the sticky error if this or an earlier flush failed.
        """
        async with self._lock:
            if self._error is not None:
                raise self._error
            records = self._buffer.drain()
            if not records:
                return
            try:
                await self._submit(records)
            except CwpipeError as exc:
                self._error = exc
                diagnostics.warn(
                    "writer",
                    "batch submission failed; writer is now unusable",
                    group=self._group_name,
                    stream=self._stream_name,
                    records=len(records),
                    error=str(exc),
                )
                if self._metrics is not None:
                    await self._metrics.record_submission_failure(self._stream_name)
                raise

    async def _submit(self, records: list[LogRecord]) -> None:
        events = [record.to_event() for record in records]
        while True:
            try:
                result = await call_cancellable(
                    self._client.put_log_events(
                        self._group_name,
                        self._stream_name,
                        events,
                        self._sequence_token,
                    ),
                    self._cancel_event,
                )
            except InvalidSequenceTokenError as exc:
                diagnostics.debug(
                    "writer",
                    "stale sequence token; retrying batch",
                    stream=self._stream_name,
                    expected=exc.expected_sequence_token,
                )
                self._sequence_token = exc.expected_sequence_token
                if self._metrics is not None:
                    await self._metrics.record_token_renewal(self._stream_name)
                continue
            except Exception as exc:  # noqa: BLE001
                raise SubmissionError(
                    f"could not put log events: {exc}",
                    cause=exc,
                    group_name=self._group_name,
                    stream_name=self._stream_name,
                ) from exc
            break

        if result.rejected_info:
            raise PartialRejectionError(
                result.rejected_info,
                group_name=self._group_name,
                stream_name=self._stream_name,
            )

        self._sequence_token = result.next_sequence_token
        if self._metrics is not None:
            await self._metrics.record_batch_submitted(self._stream_name, len(records))
