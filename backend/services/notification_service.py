"""Notification sink used by the alert engine and purchase hooks.

Delivery (email, push, websocket) is handled elsewhere; the core only
records notifications.
"""

import logging
from typing import Any, Protocol

from sqlalchemy.orm import Session

from models import Notification, NotificationType

logger = logging.getLogger(__name__)


class NotificationSink(Protocol):
    """Receives notifications addressed to users."""

    def notify(
        self,
        db: Session,
        user_id: str,
        type: NotificationType,
        title: str,
        body: str,
        data: dict[str, Any] | None = None,
    ) -> None:
        """Record a notification. Participates in the caller's transaction."""
        ...


class DatabaseNotificationSink:
    """Writes notifications to the ``notifications`` table (flush, no commit)."""

    def notify(
        self,
        db: Session,
        user_id: str,
        type: NotificationType,
        title: str,
        body: str,
        data: dict[str, Any] | None = None,
    ) -> None:
        notification = Notification(
            user_id=user_id,
            type=type,
            title=title,
            body=body,
            data_json=data,
        )
        db.add(notification)
        db.flush()
        logger.debug("Queued %s notification for user %s", type.value, user_id)
