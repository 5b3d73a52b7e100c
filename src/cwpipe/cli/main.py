"""
Command-line entry point for cwpipe.

    some-command | cwpipe write my-group my-stream
    cwpipe read my-group my-stream

AWS credentials and region come from the usual boto3 sources; cwpipe's own
settings come from ``CWPIPE_*`` environment variables.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import Sequence

from .. import __version__
from ..core import diagnostics
from ..core.group import Group
from ..core.settings import Settings


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cwpipe",
        description="Pipe byte streams into CloudWatch Logs and back.",
    )
    parser.add_argument("--version", action="version", version=__version__)
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Emit internal diagnostics to stderr",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    write = sub.add_parser("write", help="Append stdin lines to a log stream")
    write.add_argument("group", help="Log group name")
    write.add_argument("stream", help="Log stream name")
    write.add_argument(
        "--tee",
        action="store_true",
        help="Also copy stdin to stdout",
    )

    read = sub.add_parser("read", help="Print a log stream to stdout")
    read.add_argument("group", help="Log group name")
    read.add_argument("stream", help="Log stream name")
    return parser


async def _write(group: Group, stream: str, *, tee: bool) -> None:
    stdin = sys.stdin.buffer
    writer = await group.create(stream)
    try:
        while True:
            line = await asyncio.to_thread(stdin.readline)
            if not line:
                break
            writer.write(line)
            if tee:
                sys.stdout.buffer.write(line)
                sys.stdout.buffer.flush()
    finally:
        await writer.close()


async def _read(group: Group, stream: str) -> None:
    async with group.open(stream) as reader:
        while True:
            data = await reader.read()
            if not data:
                break
            sys.stdout.buffer.write(data)
            sys.stdout.buffer.flush()


async def main(argv: Sequence[str] | None = None) -> int:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)
    try:
        settings = Settings()
        if args.verbose:
            logging.basicConfig(level=logging.DEBUG, stream=sys.stderr)
            diagnostics.set_enabled(True)
        group = Group.from_settings(args.group, settings)
        if args.command == "write":
            await _write(group, args.stream, tee=args.tee)
        else:
            await _read(group, args.stream)
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cli_main() -> int:
    """CLI main function for non-async entry."""
    try:
        return asyncio.run(main())
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(cli_main())
