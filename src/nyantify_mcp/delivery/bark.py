"""Bark push notification transport."""

from __future__ import annotations

import logging
from typing import Callable, Protocol
from urllib.parse import quote

import httpx

from .models import Notification

logger = logging.getLogger(__name__)

DEFAULT_BARK_BASE_URL = "https://api.day.app"

# notification attribute -> Bark query parameter
_QUERY_FIELDS = {
    "sound": "sound",
    "group": "group",
    "level": "level",
    "url": "url",
    "icon": "icon",
    "call": "call",
    "badge": "badge",
    "copy_text": "copy",
}


class DeliveryError(RuntimeError):
    """Raised when a notification could not be delivered."""


class NotificationSink(Protocol):
    """Protocol for anything that can deliver a notification."""

    async def deliver(self, notification: Notification) -> None:
        ...


class BarkClient:
    """Deliver notifications through a Bark server with a single GET request."""

    def __init__(
        self,
        key: str,
        base_url: str = DEFAULT_BARK_BASE_URL,
        *,
        timeout: float = 10.0,
        client_factory: Callable[[], httpx.AsyncClient] | None = None,
    ) -> None:
        if not key:
            raise ValueError("Bark key must not be empty")
        self._key = key
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._client_factory = client_factory or self._default_client_factory

    def _default_client_factory(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._timeout)

    @property
    def base_url(self) -> str:
        return self._base_url

    def build_url(self, notification: Notification) -> str:
        parts = [self._key]
        if notification.title:
            parts.append(notification.title)
        if notification.subtitle:
            parts.append(notification.subtitle)
        parts.append(notification.body)
        return f"{self._base_url}/" + "/".join(quote(part, safe="") for part in parts)

    @staticmethod
    def build_params(notification: Notification) -> dict[str, str]:
        params: dict[str, str] = {}
        for attribute, param in _QUERY_FIELDS.items():
            value = getattr(notification, attribute)
            if value is not None:
                params[param] = str(value)
        return params

    async def deliver(self, notification: Notification) -> None:
        url = self.build_url(notification)
        params = self.build_params(notification)
        try:
            async with self._client_factory() as client:
                response = await client.get(url, params=params or None)
        except httpx.HTTPError as exc:
            logger.error(
                "Bark request failed",
                extra={"base_url": self._base_url, "error": str(exc)},
            )
            raise DeliveryError(f"Bark request failed: {exc}") from exc

        if not response.is_success:
            logger.error(
                "Bark API returned an error",
                extra={"base_url": self._base_url, "status_code": response.status_code},
            )
            raise DeliveryError(
                f"Bark API error: {response.status_code} {response.reason_phrase}".rstrip()
            )

        logger.debug("Bark notification delivered", extra={"group": notification.group})


class FakeNotificationSink:
    """Test double that records deliveries and optionally fails."""

    def __init__(self, error: Exception | None = None) -> None:
        self._error = error
        self._delivered: list[Notification] = []

    async def deliver(self, notification: Notification) -> None:
        if self._error is not None:
            raise self._error
        self._delivered.append(notification)

    @property
    def delivered(self) -> list[Notification]:
        return self._delivered


__all__ = [
    "BarkClient",
    "DEFAULT_BARK_BASE_URL",
    "DeliveryError",
    "FakeNotificationSink",
    "NotificationSink",
]
