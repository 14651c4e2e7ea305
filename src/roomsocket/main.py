#!/usr/bin/env python3
"""
Room Socket Client Command Line

Connects to a room-aware socket server, joins rooms, sends one message and
prints whatever arrives until the listening window closes.

Usage:
    room-socket-client --room lobby --message '{"text": "hi"}'
    room-socket-client --target ws://localhost:3000/ws --broadcast \\
        --message '{"text": "hello everyone"}' --duration 10
"""

import argparse
import asyncio
import json
import logging
import sys

from .client import ReceiveErrorPolicy, SocketClient
from .errors import SocketConnectionError
from .events import LoggingSocketClientEvents
from .protocol import DEFAULT_KEYS, LEGACY_KEYS

logger = logging.getLogger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Talk to a room-aware socket server"
    )
    parser.add_argument(
        "--origin",
        default="http://localhost:3000",
        help="Origin sent with the handshake",
    )
    parser.add_argument(
        "--target",
        default="ws://localhost:3000/ws",
        help="WebSocket URL of the server",
    )
    parser.add_argument(
        "--room",
        action="append",
        default=[],
        help="Room to join (repeatable); the message is sent to each room",
    )
    parser.add_argument(
        "--message",
        type=json.loads,
        help="JSON object to send",
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--broadcast",
        action="store_true",
        help="Send the message to every connected peer",
    )
    mode.add_argument(
        "--raw",
        action="store_true",
        help="Send and receive plain JSON without protocol keys",
    )
    parser.add_argument(
        "--legacy-keys",
        action="store_true",
        help="Use the GmWsType/GmWsRoom key names",
    )
    parser.add_argument(
        "--stop-on-error",
        action="store_true",
        help="Stop receiving after the first receive error",
    )
    parser.add_argument(
        "--duration",
        type=float,
        default=5.0,
        help="Seconds to listen before disconnecting",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level",
    )
    return parser.parse_args(argv)


async def run_client(args: argparse.Namespace) -> None:
    """
    Run one client session.

    Args:
        args: Parsed command line arguments

    Raises:
        SocketConnectionError: If the server cannot be reached
    """
    client = SocketClient(
        args.origin,
        args.target,
        LoggingSocketClientEvents(),
        keys=LEGACY_KEYS if args.legacy_keys else DEFAULT_KEYS,
        receive_error_policy=(
            ReceiveErrorPolicy.STOP
            if args.stop_on_error
            else ReceiveErrorPolicy.CONTINUE
        ),
    )
    await client.connect()

    if args.raw:
        receiver = asyncio.create_task(client.receive_raw())
    else:
        receiver = asyncio.create_task(client.receive_structured())

    try:
        if not args.raw:
            for room in args.room:
                await client.join(room)

        if args.message is not None:
            if args.raw:
                await client.send_raw(args.message)
            elif args.broadcast or not args.room:
                await client.broadcast(args.message)
            else:
                for room in args.room:
                    await client.send_to_room(room, args.message)

        await asyncio.sleep(args.duration)
    finally:
        if not args.raw:
            for room in args.room:
                await client.leave(room)
        await client.disconnect()
        await receiver


def main(argv=None):
    """Main entry point for the room socket client."""
    args = parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        asyncio.run(run_client(args))
    except SocketConnectionError as e:
        logger.error("%s", e)
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nExiting...")
        sys.exit(0)


if __name__ == "__main__":
    main()
