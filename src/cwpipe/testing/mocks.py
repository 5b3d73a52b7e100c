"""
In-memory log service double.

``FakeLogsClient`` implements ``LogsClient`` with the service's sequencing
rules: every successful append issues a new upload sequence token, and an
append carrying any other token is rejected with the expected one. Failures
can be scripted per operation, and every call is recorded.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any

from ..core.client import GetLogEventsResult, PutLogEventsResult
from ..core.errors import (
    InvalidSequenceTokenError,
    ResourceAlreadyExistsError,
)


@dataclass
class FakeStream:
    name: str
    upload_sequence_token: str | None = None
    events: list[dict[str, Any]] = field(default_factory=list)
    batches: list[list[dict[str, Any]]] = field(default_factory=list)


class FakeLogsClient:
    """Scriptable ``LogsClient`` for tests.

    Scripted outcomes are consumed in order, one per call:
    - ``create_errors``: exceptions raised by ``create_log_stream``
    - ``describe_errors``: exceptions raised by ``describe_log_streams``
    - ``put_errors``: exceptions raised by ``put_log_events``
    - ``rejections``: ``rejectedLogEventsInfo`` dicts returned by otherwise
      successful appends
    An entry of ``None`` means "behave normally" for that call.
    """

    def __init__(self, *, latency: float = 0.0) -> None:
        self.latency = latency
        self.streams: dict[tuple[str, str], FakeStream] = {}
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.create_errors: list[Exception | None] = []
        self.describe_errors: list[Exception | None] = []
        self.put_errors: list[Exception | None] = []
        self.rejections: list[dict[str, Any] | None] = []
        self._issued = 0

    def calls_to(self, operation: str) -> list[dict[str, Any]]:
        return [kwargs for name, kwargs in self.calls if name == operation]

    def stream(self, group_name: str, stream_name: str) -> FakeStream:
        return self.streams[(group_name, stream_name)]

    def add_stream(
        self, group_name: str, stream_name: str, *, token: str | None = None
    ) -> FakeStream:
        stream = FakeStream(stream_name, upload_sequence_token=token)
        self.streams[(group_name, stream_name)] = stream
        return stream

    def advance_token(self, group_name: str, stream_name: str) -> str:
        """Simulate another producer appending to the stream."""
        token = self._next_token()
        self.stream(group_name, stream_name).upload_sequence_token = token
        return token

    def _next_token(self) -> str:
        self._issued += 1
        return f"token-{self._issued}"

    async def _enter(self, operation: str, **kwargs: Any) -> None:
        self.calls.append((operation, kwargs))
        if self.latency:
            await asyncio.sleep(self.latency)
        else:
            await asyncio.sleep(0)

    @staticmethod
    def _scripted(outcomes: list[Any]) -> Any:
        return outcomes.pop(0) if outcomes else None

    async def create_log_stream(self, group_name: str, stream_name: str) -> None:
        await self._enter(
            "create_log_stream", group_name=group_name, stream_name=stream_name
        )
        error = self._scripted(self.create_errors)
        if error is not None:
            raise error
        if (group_name, stream_name) in self.streams:
            raise ResourceAlreadyExistsError(
                "The specified log stream already exists",
                code="ResourceAlreadyExistsException",
            )
        self.add_stream(group_name, stream_name)

    async def describe_log_streams(
        self, group_name: str, stream_name_prefix: str
    ) -> list[dict[str, Any]]:
        await self._enter(
            "describe_log_streams",
            group_name=group_name,
            stream_name_prefix=stream_name_prefix,
        )
        error = self._scripted(self.describe_errors)
        if error is not None:
            raise error
        return [
            {
                "logStreamName": stream.name,
                "uploadSequenceToken": stream.upload_sequence_token,
            }
            for (group, name), stream in sorted(self.streams.items())
            if group == group_name and name.startswith(stream_name_prefix)
        ]

    async def put_log_events(
        self,
        group_name: str,
        stream_name: str,
        events: list[dict[str, Any]],
        sequence_token: str | None,
    ) -> PutLogEventsResult:
        await self._enter(
            "put_log_events",
            group_name=group_name,
            stream_name=stream_name,
            events=list(events),
            sequence_token=sequence_token,
        )
        error = self._scripted(self.put_errors)
        if error is not None:
            raise error
        stream = self.stream(group_name, stream_name)
        if sequence_token != stream.upload_sequence_token:
            raise InvalidSequenceTokenError(
                "The given sequenceToken is invalid",
                expected_sequence_token=stream.upload_sequence_token,
                code="InvalidSequenceTokenException",
            )
        rejected = self._scripted(self.rejections)
        stream.upload_sequence_token = self._next_token()
        if rejected is None:
            stream.events.extend(events)
            stream.batches.append(list(events))
        return PutLogEventsResult(
            next_sequence_token=stream.upload_sequence_token,
            rejected_info=rejected,
        )

    async def get_log_events(
        self,
        group_name: str,
        stream_name: str,
        next_token: str | None,
    ) -> GetLogEventsResult:
        await self._enter(
            "get_log_events",
            group_name=group_name,
            stream_name=stream_name,
            next_token=next_token,
        )
        stream = self.stream(group_name, stream_name)
        start = int(next_token.split("/")[-1]) if next_token else 0
        return GetLogEventsResult(
            events=list(stream.events[start:]),
            next_forward_token=f"f/{len(stream.events)}",
        )
