"""
Byte-stream reader for a single log stream.

The reader polls the stream from its head at the read rate limit and exposes
the concatenated event messages as a byte stream. Polling starts when the
reader is opened and stops at the first failure or at ``close``.
"""

from __future__ import annotations

import asyncio
import types

from . import diagnostics
from .client import LogsClient, call_cancellable
from .errors import ClosedSessionError, CwpipeError, ReadError
from .throttle import Ticker


class Reader:
    def __init__(
        self,
        client: LogsClient,
        group_name: str,
        stream_name: str,
        *,
        poll_interval_seconds: float,
        cancel_event: asyncio.Event | None = None,
    ) -> None:
        self._client = client
        self._group_name = group_name
        self._stream_name = stream_name
        self._cancel_event = cancel_event
        self._ticker = Ticker(poll_interval_seconds)
        self._next_token: str | None = None
        self._data = bytearray()
        self._available = asyncio.Event()
        self._closing = asyncio.Event()
        self._closed = False
        self._error: CwpipeError | None = None
        self._task: asyncio.Task[None] | None = None

    @property
    def stream_name(self) -> str:
        return self._stream_name

    @property
    def error(self) -> CwpipeError | None:
        return self._error

    def start(self) -> None:
        if self._task is None:
            self._task = asyncio.create_task(
                self._run(), name=f"cwpipe-reader:{self._stream_name}"
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
                await self._poll()
            except CwpipeError as exc:
                self._error = exc
                self._available.set()
                diagnostics.warn(
                    "reader",
                    "poll failed; reader stopped",
                    group=self._group_name,
                    stream=self._stream_name,
                    error=str(exc),
                )
                return

    async def _poll(self) -> None:
        try:
            result = await call_cancellable(
                self._client.get_log_events(
                    self._group_name, self._stream_name, self._next_token
                ),
                self._cancel_event,
            )
        except Exception as exc:  # noqa: BLE001
            raise ReadError(
                f"could not get log events: {exc}",
                cause=exc,
                group_name=self._group_name,
                stream_name=self._stream_name,
            ) from exc

        for event in result.events:
            self._data.extend(str(event.get("message", "")).encode("utf-8"))
        if result.next_forward_token is not None:
            self._next_token = result.next_forward_token
        if self._data:
            self._available.set()

    async def read(self, size: int = -1) -> bytes:
        """Return up to ``size`` bytes (all available when negative).

        Waits until data arrives. Returns ``b""`` once the reader is closed and
        everything received has been consumed.
        """
        while True:
            if self._data:
                if size < 0 or size >= len(self._data):
                    chunk = bytes(self._data)
                    self._data.clear()
                else:
                    chunk = bytes(self._data[:size])
                    del self._data[:size]
                return chunk
            if self._error is not None:
                raise self._error
            if self._closed:
                return b""
            self._available.clear()
            await self._available.wait()

    async def close(self) -> None:
        if self._closed:
            raise ClosedSessionError(
                "reader already closed",
                group_name=self._group_name,
                stream_name=self._stream_name,
            )
        self._closed = True
        self._closing.set()
        self._available.set()
        self._ticker.stop()
        if self._task is not None:
            await asyncio.gather(self._task, return_exceptions=True)

    async def __aenter__(self) -> Reader:
        return self

    async def __aexit__(
        self,
        _exc_type: type[BaseException] | None,
        _exc: BaseException | None,
        _tb: types.TracebackType | None,
    ) -> None:
        if not self._closed:
            await self.close()
