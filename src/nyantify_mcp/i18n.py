"""Localized strings for notification text."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

Language = Literal["en", "zh", "ja"]


@dataclass(frozen=True, slots=True)
class Translations:
    task_completed: str
    you_were_using: str
    finished_after: str
    seconds: str
    minutes: str


TRANSLATIONS: dict[str, Translations] = {
    "en": Translations(
        task_completed="Task Completed",
        you_were_using="You were using",
        finished_after='"{name}" finished after {duration}',
        seconds="s",
        minutes="min",
    ),
    "zh": Translations(
        task_completed="任务完成",
        you_were_using="你正在使用",
        finished_after="「{name}」已完成，耗时 {duration}",
        seconds="秒",
        minutes="分钟",
    ),
    "ja": Translations(
        task_completed="タスク完了",
        you_were_using="使用中のアプリ",
        finished_after="「{name}」が {duration} で完了しました",
        seconds="秒",
        minutes="分",
    ),
}


def get_translations(language: str = "en") -> Translations:
    try:
        return TRANSLATIONS[language]
    except KeyError as exc:
        raise ValueError(
            f"Unsupported language '{language}'. Must be one of {sorted(TRANSLATIONS)}"
        ) from exc


def format_duration(seconds: int, language: str = "en") -> str:
    """Render whole seconds as ``45s``, ``1min`` or ``2min5s`` using localized units."""

    if seconds < 0:
        raise ValueError("Duration must be non-negative")
    strings = get_translations(language)
    if seconds < 60:
        return f"{seconds}{strings.seconds}"
    minutes, remainder = divmod(seconds, 60)
    if remainder == 0:
        return f"{minutes}{strings.minutes}"
    return f"{minutes}{strings.minutes}{remainder}{strings.seconds}"


__all__ = ["Language", "TRANSLATIONS", "Translations", "format_duration", "get_translations"]
