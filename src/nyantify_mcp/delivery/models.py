"""Notification payload model."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

NotificationLevel = Literal["active", "timeSensitive", "passive"]


class Notification(BaseModel):
    """A single push notification to hand to a delivery sink."""

    model_config = ConfigDict(frozen=True)

    body: str = Field(..., description="Main notification text.")
    title: str | None = Field(default=None, description="Notification title.")
    subtitle: str | None = Field(default=None, description="Secondary line under the title.")
    sound: str | None = Field(default=None, description="Name of the sound to play.")
    group: str | None = Field(default=None, description="Group used to collapse notifications.")
    level: NotificationLevel | None = Field(
        default=None,
        description="Interruption level: active, timeSensitive or passive.",
    )
    url: str | None = Field(default=None, description="URL opened when the notification is tapped.")
    icon: str | None = Field(default=None, description="URL of a custom icon.")
    call: str | None = Field(default=None, description="Set to '1' to ring repeatedly.")
    badge: int | None = Field(default=None, description="Badge number for the app icon.")
    copy_text: str | None = Field(
        default=None, description="Text placed on the clipboard when the notification is copied."
    )

    @field_validator("body")
    @classmethod
    def _require_body(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Notification body must not be empty")
        return value

    @field_validator("title", "subtitle", "sound", "group", "url", "icon", "call", "copy_text", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


__all__ = ["Notification", "NotificationLevel"]
