"""Async test helpers."""

from __future__ import annotations

import asyncio
from typing import Any, Callable


async def wait_until(
    predicate: Callable[[], bool],
    *,
    timeout: float = 2.0,
    interval: float = 0.005,
) -> None:
    """Poll ``predicate`` until it holds; raise ``AssertionError`` on timeout."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not met before timeout")
        await asyncio.sleep(interval)


def freeze_time(now: float) -> dict[str, Any]:
    """Create options that stamp every record with ``now`` (epoch seconds).

    Example:
        writer = await group.create("web-1", **freeze_time(1_700_000_000.0))
    """
    return {"now": now}
