"""Command-line viewer for the mail queue stream."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import Any, Mapping, Optional, TextIO

import aiohttp

from .config import DEFAULT_ORIGIN, RECONNECT_INTERVAL_S, ViewerConfig, endpoint_from_origin
from .dispatcher import delivered_action, remove_action
from .render import describe_change, describe_message
from .session import ViewerSession
from .store import CHANGE_SYNC, StoreChange

logger = logging.getLogger(__name__)

_LOG_LEVELS = [logging.WARNING, logging.INFO, logging.DEBUG]


async def run_watch(
    config: ViewerConfig,
    output: TextIO,
    *,
    max_changes: Optional[int] = None,
    http_session: aiohttp.ClientSession | None = None,
) -> int:
    """Mirror the queue and print one line per change until stopped."""

    done = asyncio.Event()
    seen = 0
    session = ViewerSession(config, http_session=http_session)

    def on_change(change: StoreChange) -> None:
        nonlocal seen
        output.write(describe_change(change, len(session.store)) + "\n")
        output.flush()
        seen += 1
        if max_changes is not None and seen >= max_changes:
            done.set()

    session.store.subscribe(on_change)
    async with session:
        await done.wait()
    return 0


async def run_action(
    config: ViewerConfig,
    descriptor: Mapping[str, Any],
    *,
    http_session: aiohttp.ClientSession | None = None,
) -> int:
    """Connect once, send ``descriptor`` and disconnect.

    Returns 0 when the frame went out and 1 when no transport could be
    opened; the server never acknowledges actions.
    """

    session = ViewerSession(config, http_session=http_session)
    try:
        await session.connection.connect()
        sent = await session.dispatcher.dispatch(descriptor)
    finally:
        await session.close()
    if not sent:
        logger.warning("could not reach %s, action not sent", config.endpoint)
    return 0 if sent else 1


async def run_show(
    config: ViewerConfig,
    message_id: str,
    output: TextIO,
    *,
    timeout_s: float = 10.0,
    include_html: bool = False,
    http_session: aiohttp.ClientSession | None = None,
) -> int:
    """Print the details of one message from the first full sync.

    Returns 1 when the server cannot be reached, sends no sync within
    ``timeout_s`` or the message is not queued.
    """

    synced = asyncio.Event()
    session = ViewerSession(config, http_session=http_session)

    def on_change(change: StoreChange) -> None:
        if change.kind == CHANGE_SYNC:
            synced.set()

    session.store.subscribe(on_change)
    try:
        if not await session.connection.connect():
            logger.warning("could not reach %s", config.endpoint)
            return 1
        try:
            await asyncio.wait_for(synced.wait(), timeout=timeout_s)
        except asyncio.TimeoutError:
            logger.warning("no sync from %s within %ss", config.endpoint, timeout_s)
            return 1
    finally:
        await session.close()

    record = session.store.get(message_id)
    if record is None:
        output.write(f"{message_id}: not in queue\n")
        return 1
    output.write(describe_message(message_id, record, include_html=include_html) + "\n")
    return 0


def _configure_logging(verbosity: int) -> None:
    level = _LOG_LEVELS[min(verbosity, len(_LOG_LEVELS) - 1)]
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def _build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--origin",
        default=DEFAULT_ORIGIN,
        help="Origin of the queue server page, e.g. http://localhost:8080",
    )
    common.add_argument(
        "--reconnect-interval",
        type=float,
        default=RECONNECT_INTERVAL_S,
        help="Seconds between reconnect checks",
    )
    common.add_argument("-v", "--verbose", action="count", default=0, help="Increase log verbosity")

    parser = argparse.ArgumentParser(description="Live viewer for a mock mail queue")
    subparsers = parser.add_subparsers(dest="command", required=True)

    watch_parser = subparsers.add_parser("watch", parents=[common], help="Stream queue changes")
    watch_parser.add_argument(
        "--max-changes",
        type=int,
        default=None,
        help="Exit after this many queue changes",
    )

    remove_parser = subparsers.add_parser("remove", parents=[common], help="Remove a queued message")
    remove_parser.add_argument("id", help="Message id")

    deliver_parser = subparsers.add_parser(
        "deliver", parents=[common], help="Fire the delivered webhook for a message"
    )
    deliver_parser.add_argument("id", help="Message id")
    deliver_parser.add_argument("--legacy", action="store_true", help="Use the legacy webhook format")

    show_parser = subparsers.add_parser("show", parents=[common], help="Print one queued message")
    show_parser.add_argument("id", help="Message id")
    show_parser.add_argument("--html", action="store_true", help="Include the HTML body")
    show_parser.add_argument(
        "--timeout",
        type=float,
        default=10.0,
        help="Seconds to wait for the queue snapshot",
    )
    return parser


def main(argv: list[str] | None = None, output: TextIO | None = None) -> int:
    """Entry point for CLI commands."""

    parser = _build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    if args.reconnect_interval <= 0:
        parser.error("--reconnect-interval must be positive")
    if args.command == "watch" and args.max_changes is not None and args.max_changes < 1:
        parser.error("--max-changes must be at least 1")
    config = ViewerConfig(origin=args.origin, reconnect_interval_s=args.reconnect_interval)
    try:
        endpoint_from_origin(config.origin, config.ws_path)
    except ValueError as exc:
        parser.error(str(exc))

    if args.command == "watch":
        try:
            return asyncio.run(run_watch(config, output or sys.stdout, max_changes=args.max_changes))
        except KeyboardInterrupt:
            return 0
    if args.command == "show":
        return asyncio.run(
            run_show(
                config,
                args.id,
                output or sys.stdout,
                timeout_s=args.timeout,
                include_html=args.html,
            )
        )
    if args.command == "remove":
        return asyncio.run(run_action(config, remove_action(args.id)))
    return asyncio.run(run_action(config, delivered_action(args.id, legacy=args.legacy)))


if __name__ == "__main__":  # pragma: no cover - convenience execution
    raise SystemExit(main())
