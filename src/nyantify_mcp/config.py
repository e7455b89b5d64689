"""Configuration management for Nyantify MCP."""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class NyantifySettings(BaseSettings):
    """Runtime configuration sourced from environment variables and optional .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    bark_key: str | None = Field(default=None, validation_alias="BARK_KEY")
    bark_base_url: str = Field(default="https://api.day.app", validation_alias="BARK_BASE_URL")
    bark_timeout_seconds: float = Field(default=10.0, validation_alias="BARK_TIMEOUT_SECONDS")
    min_duration_seconds: int = Field(default=60, validation_alias="MIN_DURATION_SECONDS")
    ide_bundle_ids: Annotated[tuple[str, ...], NoDecode] = Field(
        default=(), validation_alias="IDE_BUNDLE_IDS"
    )
    language: Literal["en", "zh", "ja"] = Field(default="en", validation_alias="NYANTIFY_LANGUAGE")
    project_label: str | None = Field(default=None, validation_alias="NYANTIFY_PROJECT_LABEL")
    focus_timeout_seconds: float = Field(
        default=2.0, validation_alias="NYANTIFY_FOCUS_TIMEOUT_SECONDS"
    )
    log_level: str = Field(default="INFO", validation_alias="NYANTIFY_LOG_LEVEL")

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        normalized = value.strip().upper()
        if normalized not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}:
            raise ValueError(
                "NYANTIFY_LOG_LEVEL must be one of CRITICAL, ERROR, WARNING, INFO, DEBUG"
            )
        return normalized

    @field_validator("bark_key", "project_label", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value.strip() if isinstance(value, str) else value

    @field_validator("bark_base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.strip().rstrip("/")

    @field_validator("ide_bundle_ids", mode="before")
    @classmethod
    def _parse_ide_bundle_ids(cls, value):
        if value is None or value == "":
            return ()
        if isinstance(value, (list, tuple)):
            return tuple(str(item).strip() for item in value if str(item).strip())
        if isinstance(value, str):
            return tuple(part.strip() for part in value.split(",") if part.strip())
        raise TypeError("IDE_BUNDLE_IDS must be a list of identifiers or a comma-separated string")

    @field_validator("min_duration_seconds")
    @classmethod
    def _validate_min_duration(cls, value: int) -> int:
        if value < 0:
            raise ValueError("MIN_DURATION_SECONDS must be >= 0")
        return value

    @field_validator("focus_timeout_seconds", "bark_timeout_seconds")
    @classmethod
    def _validate_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("Timeouts must be greater than zero")
        return value

    @property
    def min_duration_ms(self) -> int:
        return self.min_duration_seconds * 1000


@lru_cache(maxsize=1)
def get_settings() -> NyantifySettings:
    """Return cached settings instance."""

    return NyantifySettings()


__all__ = ["NyantifySettings", "get_settings"]
