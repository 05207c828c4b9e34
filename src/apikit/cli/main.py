# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""apikit CLI."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Any

from ..config import ApiSettings, load_settings
from ..errors import ChannelError
from ..http import Endpoint, HttpMethod
from ..log import setup_logging
from ..runtime import ApiKit
from ..streaming import ChannelEventKind, ChannelEvents

CLI_TEXT_TRUNCATION_BYTES = 4096


def _pair(raw: str, sep: str) -> tuple[str, str]:
    key, found, value = raw.partition(sep)
    if not found or not key.strip():
        raise argparse.ArgumentTypeError(f"expected KEY{sep}VALUE, got {raw!r}")
    return key.strip(), value.strip() if sep == ":" else value


def _query_pair(raw: str) -> tuple[str, str]:
    return _pair(raw, "=")


def _header_pair(raw: str) -> tuple[str, str]:
    return _pair(raw, ":")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="apikit", description="Typed HTTP and WebSocket client")
    parser.add_argument("--log-level", default=None, help="Logging level (default: APIKIT_LOG_LEVEL or WARNING)")
    parser.add_argument(
        "--ignore-ssl-errors",
        action="store_true",
        help="Skip TLS verification (useful for lab/self-signed targets)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    req = sub.add_parser("request", help="Send one request and print the JSON response")
    req.add_argument("method", type=str.upper, choices=[m.value for m in HttpMethod])
    req.add_argument("path", help="Path appended to the base URL, e.g. /users/42")
    req.add_argument("--base-url", default=None, help="Override APIKIT_BASE_URL")
    req.add_argument("--query", "-q", action="append", type=_query_pair, default=[], metavar="KEY=VALUE")
    req.add_argument("--header", "-H", action="append", type=_header_pair, default=[], metavar="NAME:VALUE")
    req.add_argument("--data", "-d", default=None, help="Request body (sent verbatim)")
    req.add_argument("--json", action="store_true", help="Print the response as indented JSON")

    stream = sub.add_parser("stream", help="Open a WebSocket, send messages and print replies")
    stream.add_argument("url", help="ws:// or wss:// address")
    stream.add_argument("--send", "-s", action="append", default=[], metavar="TEXT")
    stream.add_argument("--count", "-n", type=int, default=1, help="Messages to print before disconnecting")
    return parser


def _truncate_text_bytes(text: str, max_bytes: int) -> str:
    raw = text.encode("utf-8")
    if len(raw) <= max_bytes:
        return text
    suffix = "...[truncated]"
    keep = max_bytes - len(suffix.encode("utf-8"))
    if keep <= 0:
        return suffix[:max_bytes]
    return raw[:keep].decode("utf-8", errors="ignore") + suffix


def _print_value(value: Any, *, pretty: bool) -> None:
    if isinstance(value, str):
        print(_truncate_text_bytes(value, CLI_TEXT_TRUNCATION_BYTES))
        return
    json.dump(value, sys.stdout, indent=2 if pretty else None, sort_keys=pretty)
    sys.stdout.write("\n")


async def run_request(args: argparse.Namespace, settings: ApiSettings) -> int:
    endpoint = Endpoint.custom(
        args.path,
        args.method,
        query=args.query,
        body=args.data,
        headers=dict(args.header),
    )
    async with ApiKit(settings=settings, base_url=args.base_url) as kit:
        result = await kit.request(endpoint, Any)
    if not result.ok:
        print(f"error: {result.error}", file=sys.stderr)
        return 1
    _print_value(result.value, pretty=args.json)
    return 0


async def run_stream(args: argparse.Namespace, settings: ApiSettings) -> int:
    events = ChannelEvents()
    async with ApiKit(settings=settings) as kit:
        channel = kit.channel(events)
        if not await channel.connect(args.url):
            event = await events.get()
            print(f"error: could not connect: {event.cause}", file=sys.stderr)
            return 1
        for text in args.send:
            try:
                await channel.send(text)
            except ChannelError as exc:
                print(f"error: {exc}", file=sys.stderr)
                return 1

        received = 0
        async for event in events:
            if event.kind is ChannelEventKind.MESSAGE:
                print(_truncate_text_bytes(event.text or "", CLI_TEXT_TRUNCATION_BYTES))
                received += 1
                if received >= args.count:
                    break
            elif event.kind is ChannelEventKind.DISCONNECT:
                if event.cause is not None:
                    print(f"error: {event.cause}", file=sys.stderr)
                    return 1
                break
        await channel.disconnect()
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    settings = load_settings()
    if args.ignore_ssl_errors:
        settings.verify_ssl = False

    if args.command == "request":
        return asyncio.run(run_request(args, settings))
    return asyncio.run(run_stream(args, settings))


if __name__ == "__main__":
    raise SystemExit(main())
