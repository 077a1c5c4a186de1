"""Note service - notes with @mentions of users and horses"""

import logging

from fastapi import HTTPException
from sqlalchemy.orm import Session, joinedload

from ...models import Horse, Note, NoteMention, Notification, User
from ...services.mentions import build_notification_message, extract_mentions, strip_mentions
from ...services.notification_hub import NotificationHub, notification_hub
from ..notifications.service import publish_notifications
from .schemas import NoteCreate

logger = logging.getLogger(__name__)

NOTES_PAGE_SIZE = 20
MENTION_NOTIFICATION_TYPE = "mention"


def note_payload(note: Note) -> dict:
    return {
        "id": note.id,
        "user_id": note.user_id,
        "author_name": note.author.full_name if note.author else None,
        "content": note.content,
        "mentions": note.mentions,
        "created_at": note.created_at,
    }


class NoteService:
    def __init__(self, db: Session, hub: NotificationHub = notification_hub):
        self.db = db
        self.hub = hub

    def _resolve_entity_type(self, entity_id: str):
        """Mentions carry no type; users are checked before horses"""
        if self.db.query(User.id).filter(User.id == entity_id).first():
            return "user"
        if entity_id.isdigit() and self.db.query(Horse.id).filter(Horse.id == int(entity_id)).first():
            return "horse"
        return None

    def create_note(self, data: NoteCreate, author: User) -> Note:
        """
        Store the note with its mention tokens rewritten to plain names and
        notify each mentioned user once.
        """
        mentions = extract_mentions(data.content)
        note = Note(user_id=author.id, content=strip_mentions(data.content))
        self.db.add(note)
        self.db.flush()

        message = build_notification_message(data.content)
        notifications = []
        for mention in mentions:
            entity_type = self._resolve_entity_type(mention.entity_id)
            if entity_type is None:
                logger.warning(f"⚠️ Note mentions unknown entity {mention.entity_id}, ignoring")
                continue
            self.db.add(
                NoteMention(
                    note_id=note.id,
                    entity_type=entity_type,
                    entity_id=mention.entity_id,
                    display_name=mention.display_name,
                )
            )
            if entity_type == "user":
                notification = Notification(
                    recipient_id=mention.entity_id,
                    creator_id=author.id,
                    message=message,
                    type=MENTION_NOTIFICATION_TYPE,
                    related_id=str(note.id),
                )
                self.db.add(notification)
                notifications.append(notification)

        self.db.commit()
        self.db.refresh(note)
        publish_notifications(notifications, self.hub)
        logger.info(f"📝 Note {note.id} saved by {author.id}, {len(notifications)} user(s) notified")
        return note

    def list_notes(self, page: int = 1) -> dict:
        page = max(page, 1)
        query = self.db.query(Note)
        total = query.count()
        notes = (
            query.options(joinedload(Note.author), joinedload(Note.mentions))
            .order_by(Note.created_at.desc(), Note.id.desc())
            .offset((page - 1) * NOTES_PAGE_SIZE)
            .limit(NOTES_PAGE_SIZE)
            .all()
        )
        return {
            "items": [note_payload(n) for n in notes],
            "total": total,
            "page": page,
            "page_size": NOTES_PAGE_SIZE,
        }

    def get_note(self, note_id: int) -> Note:
        note = self.db.query(Note).filter(Note.id == note_id).first()
        if not note:
            raise HTTPException(status_code=404, detail="Note not found")
        return note

    def delete_note(self, note_id: int, user: User) -> dict:
        note = self.get_note(note_id)
        if note.user_id != user.id and not user.is_admin:
            raise HTTPException(status_code=403, detail="Only the author can delete this note")
        self.db.delete(note)
        self.db.commit()
        return {"message": "Note deleted"}
