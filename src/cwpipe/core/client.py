"""
Remote log service boundary.

``LogsClient`` is the async protocol the rest of the package consumes. It
exposes exactly the calls the writer, reader and group need, and reports
failures with the service error types from ``errors``:

- ``ResourceAlreadyExistsError`` from ``create_log_stream``
- ``InvalidSequenceTokenError`` (carrying the expected token) from
  ``put_log_events``
- ``LogServiceError`` for everything else

``Boto3LogsClient`` implements the protocol over a boto3 ``logs`` client,
running the blocking SDK calls in worker threads.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Awaitable, Protocol, TypeVar, runtime_checkable

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .errors import (
    InvalidSequenceTokenError,
    LogServiceError,
    OperationCancelledError,
    ResourceAlreadyExistsError,
)
from .settings import AwsSettings

T = TypeVar("T")


@dataclass
class PutLogEventsResult:
    next_sequence_token: str | None
    rejected_info: dict[str, Any] | None = None


@dataclass
class GetLogEventsResult:
    events: list[dict[str, Any]] = field(default_factory=list)
    next_forward_token: str | None = None


@runtime_checkable
class LogsClient(Protocol):
    async def create_log_stream(self, group_name: str, stream_name: str) -> None:
        ...

    async def describe_log_streams(
        self, group_name: str, stream_name_prefix: str
    ) -> list[dict[str, Any]]:
        ...

    async def put_log_events(
        self,
        group_name: str,
        stream_name: str,
        events: list[dict[str, Any]],
        sequence_token: str | None,
    ) -> PutLogEventsResult:
        ...

    async def get_log_events(
        self,
        group_name: str,
        stream_name: str,
        next_token: str | None,
    ) -> GetLogEventsResult:
        ...


async def call_cancellable(
    call: Awaitable[T], cancel_event: asyncio.Event | None
) -> T:
    """Await ``call`` unless ``cancel_event`` fires first.

    When the event wins, the call is abandoned and ``OperationCancelledError``
    is raised. Calls running in a worker thread cannot be interrupted; their
    result is discarded.
    """
    if cancel_event is None:
        return await call
    task = asyncio.ensure_future(call)
    if cancel_event.is_set():
        task.cancel()
        raise OperationCancelledError("operation cancelled")
    waiter = asyncio.ensure_future(cancel_event.wait())
    try:
        done, _ = await asyncio.wait(
            {task, waiter}, return_when=asyncio.FIRST_COMPLETED
        )
    finally:
        waiter.cancel()
        if not task.done():
            task.cancel()
    if task in done:
        return task.result()
    raise OperationCancelledError("operation cancelled")


def translate_client_error(exc: Exception) -> LogServiceError:
    """Map a botocore exception onto the package's service errors."""
    if isinstance(exc, ClientError):
        error = exc.response.get("Error", {})
        code = error.get("Code", "")
        message = error.get("Message") or str(exc)
        if code == "ResourceAlreadyExistsException":
            return ResourceAlreadyExistsError(message, code=code, cause=exc)
        if code == "InvalidSequenceTokenException":
            # Modeled exception fields are hoisted to the top level of the
            # response; older stubs keep them under "Error".
            expected = exc.response.get("expectedSequenceToken")
            if expected is None:
                expected = error.get("expectedSequenceToken")
            return InvalidSequenceTokenError(
                message, expected_sequence_token=expected, code=code, cause=exc
            )
        return LogServiceError(message, code=code or None, cause=exc)
    return LogServiceError(str(exc), cause=exc)


class Boto3LogsClient:
    """``LogsClient`` backed by a boto3 CloudWatch Logs client."""

    def __init__(self, client: Any) -> None:
        self._client = client

    @classmethod
    def from_settings(cls, settings: AwsSettings | None = None) -> Boto3LogsClient:
        settings = settings or AwsSettings()
        kwargs: dict[str, Any] = {}
        if settings.region:
            kwargs["region_name"] = settings.region
        if settings.endpoint_url:
            kwargs["endpoint_url"] = settings.endpoint_url
        return cls(boto3.client("logs", **kwargs))

    async def _call(self, method: str, **kwargs: Any) -> dict[str, Any]:
        try:
            response: dict[str, Any] = await asyncio.to_thread(
                getattr(self._client, method), **kwargs
            )
        except (ClientError, BotoCoreError) as exc:
            raise translate_client_error(exc) from exc
        return response

    async def create_log_stream(self, group_name: str, stream_name: str) -> None:
        await self._call(
            "create_log_stream",
            logGroupName=group_name,
            logStreamName=stream_name,
        )

    async def describe_log_streams(
        self, group_name: str, stream_name_prefix: str
    ) -> list[dict[str, Any]]:
        response = await self._call(
            "describe_log_streams",
            logGroupName=group_name,
            logStreamNamePrefix=stream_name_prefix,
        )
        return list(response.get("logStreams", []))

    async def put_log_events(
        self,
        group_name: str,
        stream_name: str,
        events: list[dict[str, Any]],
        sequence_token: str | None,
    ) -> PutLogEventsResult:
        kwargs: dict[str, Any] = {
            "logGroupName": group_name,
            "logStreamName": stream_name,
            "logEvents": events,
        }
        if sequence_token:
            kwargs["sequenceToken"] = sequence_token
        response = await self._call("put_log_events", **kwargs)
        return PutLogEventsResult(
            next_sequence_token=response.get("nextSequenceToken"),
            rejected_info=response.get("rejectedLogEventsInfo"),
        )

    async def get_log_events(
        self,
        group_name: str,
        stream_name: str,
        next_token: str | None,
    ) -> GetLogEventsResult:
        kwargs: dict[str, Any] = {
            "logGroupName": group_name,
            "logStreamName": stream_name,
            "startFromHead": True,
        }
        if next_token:
            kwargs["nextToken"] = next_token
        response = await self._call("get_log_events", **kwargs)
        return GetLogEventsResult(
            events=list(response.get("events", [])),
            next_forward_token=response.get("nextForwardToken"),
        )
