"""
Log group: the factory for writer and reader sessions.

Opening a writer creates the remote stream. When the stream already exists
the writer must instead learn the stream's current upload sequence token,
which the service may not report immediately after creation; that lookup is
retried a few times with linear backoff. Creation and lookup for a given
stream name run under a lock owned by the group, so concurrent callers for
the same stream are serialised while different streams proceed
independently.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from ..metrics.metrics import MetricsCollector
from . import diagnostics
from .client import Boto3LogsClient, LogsClient, call_cancellable
from .errors import (
    OperationCancelledError,
    ResourceAlreadyExistsError,
    StreamCreationError,
    TokenBootstrapError,
)
from .reader import Reader
from .settings import Settings
from .writer import RecordCallback, Writer


class StreamLocks:
    """Per-stream-name locks, created on first use.

    Locks are never evicted; the registry lives as long as its group and
    holds one lock per stream name the group has opened.
    """

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}

    def get(self, stream_name: str) -> asyncio.Lock:
        lock = self._locks.get(stream_name)
        if lock is None:
            lock = self._locks[stream_name] = asyncio.Lock()
        return lock

    @asynccontextmanager
    async def hold(self, stream_name: str) -> AsyncIterator[None]:
        async with self.get(stream_name):
            yield

    def __len__(self) -> int:
        return len(self._locks)


class Group:
    """A remote log group and the authority for creating its streams."""

    def __init__(
        self,
        client: LogsClient,
        group_name: str,
        *,
        settings: Settings | None = None,
        metrics: MetricsCollector | None = None,
    ) -> None:
        self._client = client
        self._group_name = group_name
        self._settings = settings or Settings()
        self._metrics = metrics
        self._locks = StreamLocks()

    @classmethod
    def from_settings(
        cls,
        group_name: str,
        settings: Settings | None = None,
    ) -> Group:
        """Build a group backed by boto3, configured from ``settings``."""
        settings = settings or Settings()
        metrics = MetricsCollector(enabled=settings.enable_metrics)
        return cls(
            Boto3LogsClient.from_settings(settings.aws),
            group_name,
            settings=settings,
            metrics=metrics,
        )

    @property
    def name(self) -> str:
        return self._group_name

    @property
    def metrics(self) -> MetricsCollector | None:
        return self._metrics

    async def create(
        self,
        stream_name: str,
        *,
        from_token: str | None = None,
        on_event: RecordCallback | None = None,
        now: float | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> Writer:
        """Open a writer on ``stream_name``, creating the stream if needed.

        Args:
            stream_name: Stream to append to.
            from_token: Sequence token to start from, overriding the one
                discovered for an existing stream.
            on_event: Called with each record before it is staged.
            now: Freeze record timestamps at this epoch time (tests).
            cancel_event: When set, outstanding remote calls are abandoned.

        Raises:
            StreamCreationError: the stream could not be created.
            TokenBootstrapError: the stream exists but its sequence token
                could not be read.
        """
        async with self._locks.hold(stream_name):
            token, bootstrapped = await self._establish(stream_name, cancel_event)

        writer = Writer(
            self._client,
            self._group_name,
            stream_name,
            flush_interval_seconds=self._settings.writer.flush_interval_seconds,
            sequence_token=from_token if from_token is not None else token,
            cancel_event=cancel_event,
            metrics=self._metrics,
            on_event=on_event,
            clock=(lambda: now) if now is not None else None,
        )
        writer.start()
        if self._metrics is not None:
            await self._metrics.record_session_opened(bootstrapped=bootstrapped)
        return writer

    def open(
        self,
        stream_name: str,
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> Reader:
        """Open a reader that polls ``stream_name`` from its head.

        Must be called from a running event loop.
        """
        reader = Reader(
            self._client,
            self._group_name,
            stream_name,
            poll_interval_seconds=self._settings.reader.poll_interval_seconds,
            cancel_event=cancel_event,
        )
        reader.start()
        return reader

    async def _establish(
        self, stream_name: str, cancel_event: asyncio.Event | None
    ) -> tuple[str | None, bool]:
        try:
            await call_cancellable(
                self._client.create_log_stream(self._group_name, stream_name),
                cancel_event,
            )
        except ResourceAlreadyExistsError:
            pass
        except Exception as exc:  # noqa: BLE001
            raise StreamCreationError(
                f"could not create the log stream: {exc}",
                cause=exc,
                group_name=self._group_name,
                stream_name=stream_name,
            ) from exc
        else:
            return None, False

        token = await self._sequence_token_with_backoff(stream_name, cancel_event)
        return token, True

    async def _sequence_token_with_backoff(
        self, stream_name: str, cancel_event: asyncio.Event | None
    ) -> str | None:
        policy = self._settings.bootstrap
        last_error = TokenBootstrapError(
            "sequence token lookup not attempted",
            group_name=self._group_name,
            stream_name=stream_name,
        )
        for attempt in range(1, policy.max_attempts + 1):
            try:
                return await self._sequence_token(stream_name, cancel_event)
            except OperationCancelledError as exc:
                raise TokenBootstrapError(
                    "sequence token lookup cancelled",
                    cause=exc,
                    group_name=self._group_name,
                    stream_name=stream_name,
                ) from exc
            except TokenBootstrapError as exc:
                last_error = exc
                diagnostics.warn(
                    "group",
                    "sequence token lookup failed",
                    stream=stream_name,
                    attempt=attempt,
                    error=str(exc),
                )
            await asyncio.sleep(attempt * policy.backoff_seconds)

        diagnostics.warn(
            "group",
            "sequence token lookup gave up",
            stream=stream_name,
            attempts=policy.max_attempts,
        )
        raise last_error

    async def _sequence_token(
        self, stream_name: str, cancel_event: asyncio.Event | None
    ) -> str | None:
        try:
            streams = await call_cancellable(
                self._client.describe_log_streams(self._group_name, stream_name),
                cancel_event,
            )
        except OperationCancelledError:
            raise
        except Exception as exc:  # noqa: BLE001
            raise TokenBootstrapError(
                f"couldn't get log stream description: {exc}",
                cause=exc,
                group_name=self._group_name,
                stream_name=stream_name,
            ) from exc

        if not streams:
            raise TokenBootstrapError(
                f"log stream data missing for {stream_name}",
                group_name=self._group_name,
                stream_name=stream_name,
            )
        # Prefix matches may include other streams; prefer the exact name
        for description in streams:
            if description.get("logStreamName") == stream_name:
                return description.get("uploadSequenceToken")
        return streams[0].get("uploadSequenceToken")
