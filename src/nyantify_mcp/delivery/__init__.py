"""Notification delivery transports."""

from .bark import (
    DEFAULT_BARK_BASE_URL,
    BarkClient,
    DeliveryError,
    FakeNotificationSink,
    NotificationSink,
)
from .models import Notification, NotificationLevel

__all__ = [
    "BarkClient",
    "DEFAULT_BARK_BASE_URL",
    "DeliveryError",
    "FakeNotificationSink",
    "Notification",
    "NotificationLevel",
    "NotificationSink",
]
