"""
Testing utilities for code built on cwpipe.

Example:
    from cwpipe import Group
    from cwpipe.testing import FakeLogsClient

    async def test_ships_lines():
        client = FakeLogsClient()
        writer = await Group(client, "app").create("web-1")
        writer.write(b"hello\\n")
        await writer.close()
        assert client.stream("app", "web-1").events[0]["message"] == "hello\\n"
"""

from .helpers import freeze_time, wait_until
from .mocks import FakeLogsClient, FakeStream

__all__ = ["FakeLogsClient", "FakeStream", "freeze_time", "wait_until"]
