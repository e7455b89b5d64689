"""Tool registration for Nyantify MCP."""

import logging
from dataclasses import dataclass
from typing import Any, Literal

from fastmcp import Context, FastMCP
from fastmcp.exceptions import ToolError

from ..config import NyantifySettings
from ..delivery import DeliveryError, Notification
from ..gate import NotificationGate
from ..tracking import DuplicateTaskError, Task, TaskRegistry

NOTIFY_DEFAULT_GROUP = "nyantify-notifications"
NOTIFY_DEFAULT_LEVEL = "timeSensitive"


@dataclass(slots=True)
class ToolHandles:
    start_task: Any
    end_task: Any
    cancel_task: Any
    list_tasks: Any
    notify: Any
    registry: TaskRegistry
    gate: NotificationGate


def register_tools(
    server: FastMCP,
    *,
    settings: NyantifySettings,
    registry: TaskRegistry,
    gate: NotificationGate,
) -> ToolHandles:
    """Register Nyantify's MCP tools on the server."""

    def _task_summary(task: Task) -> dict[str, Any]:
        return {
            "task_id": task.id,
            "task_name": task.name,
            "started_at": task.started_at.isoformat(),
            "elapsed_ms": registry.elapsed_ms(task),
            "metadata": task.metadata,
        }

    def _start_task(
        task_id: str,
        task_name: str,
        metadata: dict[str, Any] | None = None,
        context: Context | None = None,
    ) -> dict[str, Any]:
        """Begin tracking a potentially long-running task."""

        try:
            task = registry.start(task_id, task_name, metadata)
        except DuplicateTaskError as exc:
            _emit_log(context, "warning", "Duplicate task start rejected", extra={"task_id": task_id})
            raise ToolError(str(exc)) from exc

        _emit_log(
            context,
            "info",
            "Started task",
            extra={"task_id": task_id, "task_name": task_name},
        )
        return {
            "task_id": task.id,
            "task_name": task.name,
            "status": "started",
            "started_at": task.started_at.isoformat(),
            "message": f'Task "{task.name}" ({task.id}) started tracking.',
        }

    async def _end_task(
        task_id: str,
        force_notify: bool = False,
        context: Context | None = None,
    ) -> dict[str, Any]:
        """Finish a tracked task and notify the user if they are away from their IDE."""

        result = registry.end(task_id, force_notify=force_notify)
        if result is None:
            _emit_log(context, "info", "Task not found", extra={"task_id": task_id})
            return {
                "task_id": task_id,
                "found": False,
                "message": f"Task {task_id} not found.",
            }

        duration = gate.format_duration(result)
        try:
            outcome = await gate.process(result, force_notify=force_notify)
        except DeliveryError as exc:
            _emit_log(
                context,
                "error",
                "Notification delivery failed",
                extra={"task_id": task_id, "error": str(exc)},
            )
            raise ToolError(
                f'Task "{result.name}" completed in {duration}, '
                f"but the notification could not be sent: {exc}"
            ) from exc

        if outcome.decision == "delivered":
            app = outcome.foreground_name or outcome.foreground_id or "an unknown application"
            message = (
                f'Task "{result.name}" completed in {duration}. '
                f"Notification sent (you were using {app})."
            )
        elif outcome.decision == "suppressed":
            message = (
                f'Task "{result.name}" completed in {duration}. '
                "No notification needed (you're focused on IDE)."
            )
        else:
            message = (
                f'Task "{result.name}" completed in {duration}. '
                "No notification needed (task finished quickly)."
            )

        _emit_log(
            context,
            "info",
            "Task ended",
            extra={
                "task_id": task_id,
                "duration_ms": result.duration_ms,
                "decision": outcome.decision,
            },
        )
        return {
            "task_id": result.id,
            "task_name": result.name,
            "found": True,
            "duration_ms": result.duration_ms,
            "duration": duration,
            "should_notify": result.should_notify,
            "notification": outcome.decision,
            "foreground_app": outcome.foreground_name or outcome.foreground_id,
            "message": message,
        }

    def _cancel_task(task_id: str, context: Context | None = None) -> dict[str, Any]:
        """Stop tracking a task without sending any notification."""

        cancelled = registry.cancel(task_id)
        _emit_log(
            context,
            "info",
            "Cancel task",
            extra={"task_id": task_id, "cancelled": cancelled},
        )
        return {
            "task_id": task_id,
            "cancelled": cancelled,
            "message": (
                f"Task {task_id} cancelled." if cancelled else f"Task {task_id} not found."
            ),
        }

    def _list_tasks(context: Context | None = None) -> list[dict[str, Any]]:
        """List tasks that are currently being tracked."""

        tasks = [_task_summary(task) for task in registry.list_running()]
        _emit_log(context, "debug", "Listing running tasks", extra={"count": len(tasks)})
        return tasks

    async def _notify(
        title: str,
        body: str,
        subtitle: str | None = None,
        sound: str | None = None,
        group: str | None = None,
        level: Literal["active", "timeSensitive", "passive"] | None = None,
        url: str | None = None,
        badge: int | None = None,
        context: Context | None = None,
    ) -> dict[str, Any]:
        """Send a notification right away, regardless of task state or focus."""

        try:
            notification = Notification(
                title=title,
                body=body,
                subtitle=subtitle,
                sound=sound,
                group=group or NOTIFY_DEFAULT_GROUP,
                level=level or NOTIFY_DEFAULT_LEVEL,
                url=url,
                badge=badge,
            )
        except ValueError as exc:
            raise ToolError(f"Invalid notification: {exc}") from exc

        try:
            await gate.send_now(notification)
        except DeliveryError as exc:
            _emit_log(context, "error", "Immediate notification failed", extra={"error": str(exc)})
            raise ToolError(f"Failed to send notification: {exc}") from exc

        _emit_log(context, "info", "Sent notification", extra={"group": notification.group})
        return {"sent": True, "title": title, "message": f'Notification sent: "{title}"'}

    tool_start = server.tool(
        name="start_task",
        description=(
            "Start tracking a new task. Call this when beginning a potentially "
            "long-running operation."
        ),
    )(_start_task)

    tool_end = server.tool(
        name="end_task",
        description=(
            "End a tracked task. If the task took longer than "
            f"{settings.min_duration_seconds}s and the user is not focused on an IDE, "
            "a notification will be sent via Bark. Set force_notify to notify regardless."
        ),
    )(_end_task)

    tool_cancel = server.tool(
        name="cancel_task",
        description="Stop tracking a task without sending a notification.",
    )(_cancel_task)

    tool_list = server.tool(
        name="list_tasks",
        description="List tasks currently being tracked with their elapsed time.",
    )(_list_tasks)

    tool_notify = server.tool(
        name="notify",
        description=(
            "Send an immediate notification via Bark. Use this for urgent messages "
            "that require user attention or decision-making."
        ),
    )(_notify)

    return ToolHandles(
        start_task=tool_start,
        end_task=tool_end,
        cancel_task=tool_cancel,
        list_tasks=tool_list,
        notify=tool_notify,
        registry=registry,
        gate=gate,
    )


__all__ = ["register_tools", "ToolHandles", "NOTIFY_DEFAULT_GROUP", "NOTIFY_DEFAULT_LEVEL"]

logger = logging.getLogger(__name__)


def _emit_log(
    context: Context | None,
    level: str,
    message: str,
    *,
    extra: dict[str, Any] | None = None,
) -> None:
    """Best-effort logging that prefers the MCP context logger when available."""

    payload = extra or {}

    if context is not None:
        ctx_logger = getattr(context, "logger", None)
        if ctx_logger is not None:
            log_method = getattr(ctx_logger, level, None)
            if callable(log_method):
                log_method(message, extra=payload)
                return

    fallback = getattr(logger, level, logger.info)
    fallback(message, extra=payload)
