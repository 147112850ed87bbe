"""Notification dispatch to employees.

Delivery is best-effort: :func:`notify_best_effort` logs and swallows every
failure so that a notifier outage never undoes a committed transition.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

import httpx

from custody.exceptions import CollaboratorError

if TYPE_CHECKING:
    from custody.config import Settings

logger = logging.getLogger(__name__)


@runtime_checkable
class NotificationDispatcher(Protocol):
    """Interface for push-notification delivery."""

    async def send(self, user_id: uuid.UUID, title: str, body: str) -> None:
        """Deliver a notification to a user."""
        ...


class LoggingNotificationDispatcher:
    """Writes notifications to the application log. Used when no webhook is configured."""

    async def send(self, user_id: uuid.UUID, title: str, body: str) -> None:
        logger.info("Notification to %s: %s | %s", user_id, title, body)


@dataclass
class SentNotification:
    user_id: uuid.UUID
    title: str
    body: str


class InMemoryNotificationDispatcher:
    """Records notifications instead of delivering them."""

    def __init__(self) -> None:
        self.sent: list[SentNotification] = []

    async def send(self, user_id: uuid.UUID, title: str, body: str) -> None:
        self.sent.append(SentNotification(user_id=user_id, title=title, body=body))

    def for_user(self, user_id: uuid.UUID) -> list[SentNotification]:
        return [n for n in self.sent if n.user_id == user_id]


class WebhookNotificationDispatcher:
    """Posts notifications as JSON to a push gateway."""

    def __init__(self, url: str, timeout: float = 5.0, client: httpx.AsyncClient | None = None) -> None:
        self._url = url
        self._timeout = timeout
        self._client = client

    async def send(self, user_id: uuid.UUID, title: str, body: str) -> None:
        payload = {"user_id": str(user_id), "title": title, "body": body}
        try:
            if self._client is not None:
                resp = await self._client.post(self._url, json=payload, timeout=self._timeout)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    resp = await client.post(self._url, json=payload)
            resp.raise_for_status()
        except httpx.HTTPError as exc:
            raise CollaboratorError(f"Notification delivery failed: {exc}") from exc


def build_notification_dispatcher(settings: Settings) -> NotificationDispatcher:
    """Pick the dispatcher implementation from settings."""
    if settings.notification_webhook_url:
        return WebhookNotificationDispatcher(
            settings.notification_webhook_url,
            timeout=settings.notification_timeout_seconds,
        )
    return LoggingNotificationDispatcher()


async def notify_best_effort(
    dispatcher: NotificationDispatcher,
    user_id: uuid.UUID,
    title: str,
    body: str,
) -> bool:
    """Send a notification, logging instead of raising on failure.

    Returns whether the dispatcher accepted the message.
    """
    try:
        await dispatcher.send(user_id, title, body)
    except Exception:
        logger.exception("Failed to notify user %s (%s)", user_id, title)
        return False
    return True
