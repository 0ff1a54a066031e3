"""Application notifications – alert message model and channel protocol."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Protocol, runtime_checkable

__all__ = [
    "AlertMessage",
    "InMemoryNotificationChannel",
    "NotificationChannel",
]


@dataclass(frozen=True)
class AlertMessage:
    """An alert published to a topic.

    ``endpoint`` is the recipient address declared on the ``alert_topic``
    entity (e-mail address, webhook URL, …).
    """

    topic: str
    subject: str
    body: str
    endpoint: str | None = None
    severity: str = "error"
    attributes: dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))


@runtime_checkable
class NotificationChannel(Protocol):
    """Port: deliver alert messages keyed by topic."""

    async def publish(self, message: AlertMessage) -> None: ...


class InMemoryNotificationChannel:
    """Fake NotificationChannel that captures published alerts."""

    def __init__(self) -> None:
        self.sent: list[AlertMessage] = []

    async def publish(self, message: AlertMessage) -> None:
        self.sent.append(message)

    def for_topic(self, topic: str) -> list[AlertMessage]:
        return [m for m in self.sent if m.topic == topic]

    def reset(self) -> None:
        self.sent.clear()

    @property
    def count(self) -> int:
        return len(self.sent)
