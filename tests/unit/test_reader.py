from __future__ import annotations

import asyncio

import pytest

from cwpipe.core.errors import ClosedSessionError, LogServiceError, ReadError
from cwpipe.core.group import Group
from cwpipe.core.settings import Settings
from cwpipe.testing import FakeLogsClient

GROUP = "test-group"


async def test_reader_returns_messages_in_order(
    group: Group, client: FakeLogsClient
) -> None:
    stream = client.add_stream(GROUP, "app")
    stream.events.extend(
        [
            {"timestamp": 1, "message": "first\n"},
            {"timestamp": 2, "message": "second\n"},
        ]
    )

    reader = group.open("app")
    data = await asyncio.wait_for(reader.read(), timeout=1.0)
    assert data == b"first\nsecond\n"
    await reader.close()


async def test_reader_follows_new_events(group: Group, client: FakeLogsClient) -> None:
    client.add_stream(GROUP, "app")
    reader = group.open("app")

    writer = await group.create("app")
    writer.write(b"hello\n")
    await writer.close()

    data = await asyncio.wait_for(reader.read(), timeout=1.0)
    assert data == b"hello\n"

    # The forward token is carried between polls
    await asyncio.sleep(0.03)
    tokens = [c["next_token"] for c in client.calls_to("get_log_events")]
    assert tokens[0] is None
    assert tokens[-1] == "f/1"
    await reader.close()


async def test_read_with_size_returns_partial_chunks(
    group: Group, client: FakeLogsClient
) -> None:
    stream = client.add_stream(GROUP, "app")
    stream.events.append({"timestamp": 1, "message": "abcdef"})

    reader = group.open("app")
    assert await asyncio.wait_for(reader.read(4), timeout=1.0) == b"abcd"
    assert await reader.read(4) == b"ef"
    await reader.close()


async def test_read_after_close_returns_eof(group: Group, client: FakeLogsClient) -> None:
    client.add_stream(GROUP, "app")
    reader = group.open("app")
    pending = asyncio.create_task(reader.read())
    await asyncio.sleep(0.02)

    await reader.close()

    assert await asyncio.wait_for(pending, timeout=1.0) == b""
    assert await reader.read() == b""
    with pytest.raises(ClosedSessionError):
        await reader.close()


async def test_poll_failure_is_raised_from_read(settings: Settings) -> None:
    class _FailingClient(FakeLogsClient):
        async def get_log_events(self, group_name, stream_name, next_token):
            raise LogServiceError("gone", code="ResourceNotFoundException")

    failing = Group(_FailingClient(), GROUP, settings=settings)
    reader = failing.open("missing")

    with pytest.raises(ReadError) as exc_info:
        await asyncio.wait_for(reader.read(), timeout=1.0)
    assert isinstance(exc_info.value.__cause__, LogServiceError)
    assert reader.error is exc_info.value
    await reader.close()


async def test_reader_context_manager(group: Group, client: FakeLogsClient) -> None:
    client.add_stream(GROUP, "app")
    async with group.open("app") as reader:
        assert reader.stream_name == "app"
    assert await reader.read() == b""
