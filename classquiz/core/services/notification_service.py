"""Service for notification records created as side effects of other operations."""

from __future__ import annotations

import logging

from classquiz.constants.storage_constants import NOTIFICATIONS_KEY
from classquiz.core.identifiers import new_id, utc_now
from classquiz.core.models import Notification
from classquiz.core.store import CollectionStore

logger = logging.getLogger(__name__)


class NotificationService:
    """Creates and reads per-user notifications, kept newest-first."""

    def __init__(self, store: CollectionStore) -> None:
        self._store = store

    def create(self, user_id: str, title: str, message: str, link: str | None = None) -> Notification:
        notifications = self._store.load(NOTIFICATIONS_KEY, Notification.from_record)
        notification = Notification(
            id=new_id("notif"),
            user_id=user_id,
            title=title,
            message=message,
            link=link,
            is_read=False,
            created_at=utc_now(),
        )
        self._store.save(NOTIFICATIONS_KEY, [notification, *notifications])
        logger.debug("Notified %s: %s", user_id, title)
        return notification

    def get_for_user(self, user_id: str) -> list[Notification]:
        return [n for n in self._store.load(NOTIFICATIONS_KEY, Notification.from_record) if n.user_id == user_id]

    def mark_as_read(self, notification_id: str, user_id: str) -> None:
        notifications = self._store.load(NOTIFICATIONS_KEY, Notification.from_record)
        target = next(
            (n for n in notifications if n.id == notification_id and n.user_id == user_id),
            None,
        )
        if target is None:
            return
        target.is_read = True
        self._store.save(NOTIFICATIONS_KEY, notifications)

    def mark_all_as_read(self, user_id: str) -> None:
        notifications = self._store.load(NOTIFICATIONS_KEY, Notification.from_record)
        for notification in notifications:
            if notification.user_id == user_id:
                notification.is_read = True
        self._store.save(NOTIFICATIONS_KEY, notifications)
