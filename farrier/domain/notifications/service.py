"""Notification service - inbox operations and publishing to live streams"""

import logging

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import Notification, User
from ...services.notification_hub import NotificationHub, notification_hub
from .repository import NOTIFICATIONS_PAGE_SIZE, NotificationRepository

logger = logging.getLogger(__name__)


def notification_payload(notification: Notification) -> dict:
    creator = notification.creator
    return {
        "id": notification.id,
        "message": notification.message,
        "type": notification.type,
        "related_id": notification.related_id,
        "read": notification.read,
        "creator_id": notification.creator_id,
        "creator_name": (creator.full_name or creator.email) if creator else None,
        "created_at": notification.created_at,
    }


def publish_notifications(notifications: list[Notification], hub: NotificationHub = notification_hub) -> None:
    """Push committed notifications to any open streams of their recipients"""
    for notification in notifications:
        payload = notification_payload(notification)
        if payload["created_at"] is not None:
            payload["created_at"] = payload["created_at"].isoformat()
        hub.publish(notification.recipient_id, payload)


class NotificationService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = NotificationRepository()

    def list_notifications(self, user: User, page: int = 1, include_read: bool = True) -> dict:
        page = max(page, 1)
        items, total = self.repo.list_for_recipient(self.db, user.id, page, include_read)
        return {
            "items": [notification_payload(n) for n in items],
            "total": total,
            "page": page,
            "page_size": NOTIFICATIONS_PAGE_SIZE,
        }

    def unread_count(self, user: User) -> dict:
        return {"unread": self.repo.unread_count(self.db, user.id)}

    def _get(self, notification_id: int, user: User) -> Notification:
        notification = self.repo.get_for_recipient(self.db, notification_id, user.id)
        if not notification:
            raise HTTPException(status_code=404, detail="Notification not found")
        return notification

    def mark_read(self, notification_id: int, user: User) -> dict:
        notification = self._get(notification_id, user)
        notification.read = True
        self.db.commit()
        return notification_payload(notification)

    def mark_all_read(self, user: User) -> dict:
        updated = self.repo.mark_all_read(self.db, user.id)
        self.db.commit()
        return {"updated": updated}

    def delete_notification(self, notification_id: int, user: User) -> dict:
        """Soft delete; the row stays for audit"""
        notification = self._get(notification_id, user)
        notification.is_deleted = True
        self.db.commit()
        return {"message": "Notification deleted"}
