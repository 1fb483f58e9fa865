"""
Notification Dispatch

Fire-and-forget delivery of lifecycle events. Lifecycle code calls
``notify`` after its transaction has committed; a failure here is logged
and never reaches the caller.
"""

import logging
from enum import Enum
from typing import Any, Protocol

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class NotificationEvent(str, Enum):
    """Events the lifecycle emits."""

    BOOKING_CONFIRMED = "booking_confirmed"
    JOB_CLAIMED = "job_claimed"
    CARE_SUMMARY = "care_summary"
    SHIFT_COMPLETED = "shift_completed"


class Notification(BaseModel):
    """One outbound notification."""

    event: NotificationEvent
    recipient: str
    payload: dict[str, Any] = Field(default_factory=dict)


class Notifier(Protocol):
    def send(self, notification: Notification) -> None: ...


class CeleryNotifier:
    """Queues notifications on the Celery notifications queue."""

    def send(self, notification: Notification) -> None:
        from workers.tasks.notification_tasks import dispatch_notification

        dispatch_notification.delay(
            notification.event.value,
            notification.recipient,
            notification.payload,
        )


class LoggingNotifier:
    """Logs notifications instead of delivering them."""

    def send(self, notification: Notification) -> None:
        logger.info(f"Notification {notification.event.value} -> {notification.recipient}")


def notify(notifier: Notifier | None, notification: Notification) -> bool:
    """
    Deliver a notification without letting a failure propagate.

    Returns True when the notifier accepted it.
    """
    if notifier is None:
        return False
    try:
        notifier.send(notification)
        return True
    except Exception as e:
        logger.error(
            f"Notification {notification.event.value} to {notification.recipient} failed: {e}"
        )
        return False
