"""Decide whether a finished task deserves a push notification."""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from typing import Iterable, Literal

from .delivery import DeliveryError, Notification, NotificationSink
from .focus import FocusProbe
from .i18n import format_duration, get_translations
from .tracking import TaskResult

logger = logging.getLogger(__name__)

TASK_NOTIFICATION_GROUP = "nyantify-tasks"
TASK_NOTIFICATION_LEVEL = "timeSensitive"

GateDecision = Literal["skipped", "suppressed", "delivered"]


@dataclass(slots=True)
class GateOutcome:
    decision: GateDecision
    foreground_id: str | None = None
    foreground_name: str | None = None
    notification: Notification | None = None

    @property
    def delivered(self) -> bool:
        return self.decision == "delivered"


class NotificationGate:
    """Turn a task result plus the user's focus into a deliver/suppress outcome.

    The focus probe is a best-effort signal. When it fails or cannot answer,
    the gate assumes the user is away from their editor and notifies.
    """

    def __init__(
        self,
        *,
        probe: FocusProbe,
        sink: NotificationSink,
        allow_list: Iterable[str],
        language: str = "en",
        project_label: str | None = None,
    ) -> None:
        self._probe = probe
        self._sink = sink
        self._allow_list = frozenset(allow_list)
        self._strings = get_translations(language)
        self._language = language
        self._project_label = project_label
        self._stats: Counter[str] = Counter()

    @property
    def allow_list(self) -> frozenset[str]:
        return self._allow_list

    @property
    def probe(self) -> FocusProbe:
        return self._probe

    @property
    def language(self) -> str:
        return self._language

    @property
    def stats(self) -> dict[str, int]:
        return dict(self._stats)

    def format_duration(self, result: TaskResult) -> str:
        return format_duration(result.duration_seconds, self._language)

    async def _foreground_id(self) -> str | None:
        try:
            return await self._probe.current_foreground_id() or None
        except Exception as exc:
            logger.warning(
                "Focus detection failed; treating user as away from IDE",
                extra={"error": str(exc)},
            )
            return None

    async def _foreground_name(self) -> str | None:
        try:
            return await self._probe.current_foreground_name() or None
        except Exception as exc:
            logger.debug("Could not resolve foreground application name", extra={"error": str(exc)})
            return None

    def build_notification(self, result: TaskResult, foreground_name: str | None = None) -> Notification:
        subtitle_parts = []
        if self._project_label:
            subtitle_parts.append(self._project_label)
        if foreground_name:
            subtitle_parts.append(f"{self._strings.you_were_using}: {foreground_name}")

        return Notification(
            title=self._strings.task_completed,
            body=self._strings.finished_after.format(
                name=result.name, duration=self.format_duration(result)
            ),
            subtitle=" · ".join(subtitle_parts) or None,
            group=TASK_NOTIFICATION_GROUP,
            level=TASK_NOTIFICATION_LEVEL,
        )

    async def process(self, result: TaskResult, *, force_notify: bool = False) -> GateOutcome:
        """Notify about ``result`` unless it was short or the user is looking at an IDE.

        Raises ``DeliveryError`` if the sink fails. The task has already been
        removed from the registry at this point and stays removed.
        """

        if not (result.should_notify or force_notify):
            self._stats["skipped"] += 1
            return GateOutcome(decision="skipped")

        foreground_id = await self._foreground_id()
        if foreground_id is not None and foreground_id in self._allow_list and not force_notify:
            self._stats["suppressed"] += 1
            logger.info(
                "Notification suppressed; IDE is focused",
                extra={"task_id": result.id, "foreground_id": foreground_id},
            )
            return GateOutcome(decision="suppressed", foreground_id=foreground_id)

        if getattr(self._probe, "name_matches_id", False):
            foreground_name = foreground_id
        else:
            foreground_name = await self._foreground_name()
        notification = self.build_notification(result, foreground_name)
        try:
            await self._sink.deliver(notification)
        except DeliveryError:
            self._stats["failed"] += 1
            raise

        self._stats["delivered"] += 1
        logger.info(
            "Task notification delivered",
            extra={
                "task_id": result.id,
                "foreground_id": foreground_id,
                "forced": force_notify,
            },
        )
        return GateOutcome(
            decision="delivered",
            foreground_id=foreground_id,
            foreground_name=foreground_name,
            notification=notification,
        )

    async def send_now(self, notification: Notification) -> None:
        """Deliver ``notification`` immediately with no duration or focus checks."""

        try:
            await self._sink.deliver(notification)
        except DeliveryError:
            self._stats["failed"] += 1
            raise
        self._stats["sent_now"] += 1
        logger.info("Immediate notification delivered", extra={"group": notification.group})


__all__ = [
    "GateDecision",
    "GateOutcome",
    "NotificationGate",
    "TASK_NOTIFICATION_GROUP",
    "TASK_NOTIFICATION_LEVEL",
]
