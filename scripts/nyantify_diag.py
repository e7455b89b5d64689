"""Nyantify MCP diagnostics CLI."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys

from nyantify_mcp.config import NyantifySettings
from nyantify_mcp.delivery import BarkClient, DeliveryError, Notification, NotificationSink
from nyantify_mcp.focus import FocusProbe, create_focus_probe, platform_family, resolve_allow_list


def load_probe(settings: NyantifySettings) -> FocusProbe:
    return create_focus_probe(timeout=settings.focus_timeout_seconds)


def load_sink(settings: NyantifySettings) -> NotificationSink:
    if not settings.bark_key:
        print("Bark key missing: set BARK_KEY", file=sys.stderr)
        raise SystemExit(1)
    return BarkClient(settings.bark_key, settings.bark_base_url, timeout=settings.bark_timeout_seconds)


async def _probe_focus(probe: FocusProbe) -> tuple[str | None, str | None]:
    return await probe.current_foreground_id(), await probe.current_foreground_name()


def cmd_probe(args: argparse.Namespace) -> None:
    settings = NyantifySettings()
    probe = load_probe(settings)
    allow_list = resolve_allow_list(settings.ide_bundle_ids)
    foreground_id, foreground_name = asyncio.run(_probe_focus(probe))

    payload = {
        "platform": platform_family(),
        "probe": type(probe).__name__,
        "foreground_id": foreground_id,
        "foreground_name": foreground_name,
        "allow_listed": foreground_id is not None and foreground_id in allow_list,
    }
    print(json.dumps(payload, indent=2))


def cmd_allowlist(args: argparse.Namespace) -> None:
    settings = NyantifySettings()
    allow_list = resolve_allow_list(settings.ide_bundle_ids)
    payload = {
        "platform": platform_family(),
        "overridden": bool(settings.ide_bundle_ids),
        "identifiers": sorted(allow_list),
    }
    print(json.dumps(payload, indent=2))


def cmd_send(args: argparse.Namespace) -> None:
    settings = NyantifySettings()
    sink = load_sink(settings)
    notification = Notification(
        title=args.title,
        body=args.body,
        level=args.level,
        group="nyantify-diagnostics",
    )
    try:
        asyncio.run(sink.deliver(notification))
    except DeliveryError as exc:
        print(f"Delivery failed: {exc}", file=sys.stderr)
        raise SystemExit(1)
    print(json.dumps({"sent": True, "title": args.title}, indent=2))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Nyantify MCP diagnostics")
    sub = parser.add_subparsers(dest="cmd")

    p_probe = sub.add_parser("probe", help="Show the focused application and whether it is allow-listed")
    p_probe.set_defaults(func=cmd_probe)

    p_allowlist = sub.add_parser("allowlist", help="Print the effective IDE allow-list")
    p_allowlist.set_defaults(func=cmd_allowlist)

    p_send = sub.add_parser("send", help="Send a test notification through Bark")
    p_send.add_argument("--title", default="Nyantify")
    p_send.add_argument("--body", default="Test notification from nyantify_diag")
    p_send.add_argument(
        "--level",
        choices=["active", "timeSensitive", "passive"],
        default="active",
        help="Notification level (default: active)",
    )
    p_send.set_defaults(func=cmd_send)

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not hasattr(args, "func"):
        parser.print_help()
        return
    args.func(args)


if __name__ == "__main__":
    main()
