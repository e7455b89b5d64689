"""FastMCP server bootstrap for Nyantify."""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Optional

from fastmcp import Context, FastMCP

from . import __version__
from .config import NyantifySettings, get_settings
from .delivery import BarkClient, NotificationSink
from .focus import FocusProbe, create_focus_probe, platform_family, resolve_allow_list
from .gate import NotificationGate
from .tools import register_tools
from .tracking import TaskRegistry


class MissingCredentialError(RuntimeError):
    """Raised when the Bark key needed to deliver notifications is not configured."""


def configure_logging(level: str) -> None:
    """Configure root logging for the Nyantify server.

    Logs go to stderr so the stdio transport on stdout stays clean.
    """

    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="[%(asctime)s] [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )


def create_server(
    settings: Optional[NyantifySettings] = None,
    *,
    registry: TaskRegistry | None = None,
    probe: FocusProbe | None = None,
    sink: NotificationSink | None = None,
) -> FastMCP:
    """Instantiate the FastMCP server with the task tools and status resource."""

    settings = settings or get_settings()

    if sink is None:
        if not settings.bark_key:
            raise MissingCredentialError("BARK_KEY environment variable is required")
        sink = BarkClient(
            settings.bark_key,
            settings.bark_base_url,
            timeout=settings.bark_timeout_seconds,
        )

    if registry is None:
        registry = TaskRegistry(settings.min_duration_ms)
    if probe is None:
        probe = create_focus_probe(timeout=settings.focus_timeout_seconds)
    allow_list = resolve_allow_list(settings.ide_bundle_ids)
    gate = NotificationGate(
        probe=probe,
        sink=sink,
        allow_list=allow_list,
        language=settings.language,
        project_label=settings.project_label,
    )

    server = FastMCP(
        name="Nyantify MCP",
        version=__version__,
        instructions=(
            "Nyantify tells the user when long-running work finishes. Call start_task "
            "before a lengthy operation and end_task when it completes; a push "
            "notification is sent only if the task was slow and the user is not "
            "looking at their editor. Use notify for urgent messages."
        ),
    )

    handles = register_tools(server, settings=settings, registry=registry, gate=gate)

    def build_status(request_id: str | None = None) -> dict[str, Any]:
        running = [
            {
                "task_id": task.id,
                "task_name": task.name,
                "started_at": task.started_at.isoformat(),
                "elapsed_ms": registry.elapsed_ms(task),
            }
            for task in registry.list_running()
        ]

        payload = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "server_version": __version__,
            "log_level": settings.log_level,
            "language": settings.language,
            "threshold_seconds": settings.min_duration_seconds,
            "focus": {
                "platform": platform_family(),
                "probe": type(probe).__name__,
                "allow_list_size": len(allow_list),
                "allow_list_overridden": bool(settings.ide_bundle_ids),
            },
            "delivery": {
                "sink": type(sink).__name__,
                "base_url": settings.bark_base_url,
                "counters": gate.stats,
            },
            "tasks": {
                "count": len(running),
                "running": running,
            },
            "request_id": request_id,
        }
        return payload

    @server.resource(
        "resource://nyantify/status",
        name="nyantify_status",
        title="Nyantify MCP Status",
        description="Provides running tasks and notification counters for the Nyantify server.",
        mime_type="application/json",
        tags={"status", "health"},
    )
    def status_resource(context: Context) -> str:
        """Return a JSON string summarizing basic runtime state."""

        return json.dumps(build_status(getattr(context, "request_id", None)))

    setattr(server, "nyantify_settings", settings)
    setattr(server, "registry", registry)
    setattr(server, "gate", gate)
    setattr(server, "tool_handles", handles)
    setattr(server, "build_status", build_status)
    return server


def main() -> None:
    """Entry point for running the Nyantify MCP server via CLI."""

    settings = get_settings()
    configure_logging(settings.log_level)
    log = logging.getLogger(__name__)

    try:
        server = create_server(settings)
    except MissingCredentialError as exc:
        log.error("Cannot start Nyantify MCP server: %s", exc)
        raise SystemExit(1) from exc

    log.info(
        "Launching Nyantify MCP server",
        extra={
            "version": __version__,
            "log_level": settings.log_level,
            "threshold_seconds": settings.min_duration_seconds,
            "language": settings.language,
        },
    )
    server.run()


if __name__ == "__main__":
    main()
