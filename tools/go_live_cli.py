"""
Command-line driver for the go-live flow.

Creates a broadcast through the running API, prints where to point the encoder,
polls check-and-go-live until the broadcast is live (or declared live), then
keeps running until Ctrl-C, which ends the broadcast.

Usage:
    python -m tools.go_live_cli --base-url http://127.0.0.1:8000 --token <session jwt>

The stream key is only printed with --show-key.
"""

from __future__ import annotations

import argparse
import asyncio
import os
import sys

from loguru import logger

from app.client.go_live_poller import GoLiveOutcome, GoLivePoller
from app.client.live_api_client import LiveApiClient, LiveApiError


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Create a live broadcast and take it live")
    parser.add_argument("--base-url", default=os.environ.get("GOLIVE_API_URL", "http://127.0.0.1:8000"))
    parser.add_argument(
        "--token",
        default=os.environ.get("GOLIVE_SESSION_TOKEN"),
        help="App session token (defaults to $GOLIVE_SESSION_TOKEN)",
    )
    parser.add_argument("--title")
    parser.add_argument("--description")
    parser.add_argument("--privacy", choices=["public", "unlisted", "private"])
    parser.add_argument("--interval", type=float, help="Seconds between go-live checks")
    parser.add_argument("--max-cycles", type=int, help="Number of go-live checks before giving up")
    parser.add_argument(
        "--confirm-cycles",
        type=int,
        default=6,
        help="Status checks after an assumed go-live",
    )
    parser.add_argument("--show-key", action="store_true", help="Print the stream key")
    return parser


def _print_update(outcome: GoLiveOutcome) -> None:
    platform = outcome.platform_state or "-"
    print(f"[{outcome.ui_state}] platform={platform} checks={outcome.cycles} {outcome.message}")


async def run(args: argparse.Namespace) -> int:
    client = LiveApiClient(args.base_url, args.token)

    try:
        created = await client.create_live(
            title=args.title, description=args.description, privacy=args.privacy
        )
    except LiveApiError as e:
        print(f"Could not create the live stream: {e.message}", file=sys.stderr)
        return 1

    print(f"Broadcast: {created.broadcast_id}")
    print(f"Ingest URL: {created.ingest_url}")
    if args.show_key:
        print(f"Stream key: {created.stream_key}")
    print("Start streaming to the ingest URL now.")

    poller = GoLivePoller(
        client,
        created.broadcast_id,
        interval=args.interval,
        max_cycles=args.max_cycles,
        on_update=_print_update,
        confirm_cycles=args.confirm_cycles,
    )

    try:
        if created.auto_live_enabled:
            await poller.wait()
        else:
            print("Auto go-live is disabled on the server; transition the broadcast manually.")

        print("Press Ctrl-C to end the broadcast.")
        await asyncio.Event().wait()
    finally:
        poller.stop()
        try:
            ended = await client.end_live(created.broadcast_id)
            print(ended.message)
        except LiveApiError as e:
            logger.warning("Ending broadcast {} failed: {}", created.broadcast_id, e.message)

    return 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    if not args.token:
        print("A session token is required (--token or $GOLIVE_SESSION_TOKEN)", file=sys.stderr)
        return 2

    try:
        return asyncio.run(run(args))
    except KeyboardInterrupt:
        return 0


if __name__ == "__main__":
    sys.exit(main())
