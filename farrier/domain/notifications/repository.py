"""Notification repository"""

from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import Notification

NOTIFICATIONS_PAGE_SIZE = 25


class NotificationRepository:
    @staticmethod
    def _visible(db: Session, recipient_id: str):
        return db.query(Notification).filter(
            Notification.recipient_id == recipient_id,
            Notification.is_deleted.is_(False),
        )

    @classmethod
    def list_for_recipient(
        cls, db: Session, recipient_id: str, page: int, include_read: bool
    ) -> tuple[list[Notification], int]:
        query = cls._visible(db, recipient_id)
        if not include_read:
            query = query.filter(Notification.read.is_(False))
        total = query.count()
        items = (
            query.options(joinedload(Notification.creator))
            .order_by(Notification.created_at.desc(), Notification.id.desc())
            .offset((page - 1) * NOTIFICATIONS_PAGE_SIZE)
            .limit(NOTIFICATIONS_PAGE_SIZE)
            .all()
        )
        return items, total

    @classmethod
    def unread_count(cls, db: Session, recipient_id: str) -> int:
        return cls._visible(db, recipient_id).filter(Notification.read.is_(False)).count()

    @classmethod
    def get_for_recipient(cls, db: Session, notification_id: int, recipient_id: str) -> Optional[Notification]:
        return cls._visible(db, recipient_id).filter(Notification.id == notification_id).first()

    @classmethod
    def mark_all_read(cls, db: Session, recipient_id: str) -> int:
        return (
            cls._visible(db, recipient_id)
            .filter(Notification.read.is_(False))
            .update({Notification.read: True}, synchronize_session=False)
        )
