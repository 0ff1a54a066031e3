"""Application notifications – alerts on provisioning failures."""
from mp_access.application.notifications.channel import (
    AlertMessage,
    InMemoryNotificationChannel,
    NotificationChannel,
)

__all__ = ["AlertMessage", "InMemoryNotificationChannel", "NotificationChannel"]
