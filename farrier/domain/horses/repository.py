"""Horse repository - Database operations for horses"""

from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from ...models import Horse, Note, NoteMention, Shoeing

HORSES_PAGE_SIZE = 25
BULK_FETCH_SIZE = 1000


class HorseRepository:
    """Repository for horse database operations"""

    @staticmethod
    def search_horses(
        db: Session, search: Optional[str], page: int, status: Optional[str]
    ) -> tuple[list[Horse], int]:
        query = db.query(Horse)
        if status:
            query = query.filter(Horse.status == status)
        if search:
            pattern = f"%{search.strip()}%"
            query = query.filter(or_(Horse.name.ilike(pattern), Horse.barn_trainer.ilike(pattern)))
        total = query.count()
        items = (
            query.order_by(Horse.name, Horse.id)
            .offset((page - 1) * HORSES_PAGE_SIZE)
            .limit(HORSES_PAGE_SIZE)
            .all()
        )
        return items, total

    @staticmethod
    def get_all_horses(db: Session) -> list[Horse]:
        """Every horse, fetched in fixed-size pages"""
        horses: list[Horse] = []
        offset = 0
        while True:
            batch = db.query(Horse).order_by(Horse.id).offset(offset).limit(BULK_FETCH_SIZE).all()
            horses.extend(batch)
            if len(batch) < BULK_FETCH_SIZE:
                return horses
            offset += BULK_FETCH_SIZE

    @staticmethod
    def get_horse_by_id(db: Session, horse_id: int) -> Optional[Horse]:
        return db.query(Horse).filter(Horse.id == horse_id).first()

    @staticmethod
    def get_shoeings(db: Session, horse_id: int) -> list[Shoeing]:
        return (
            db.query(Shoeing)
            .filter(Shoeing.horse_id == horse_id)
            .order_by(Shoeing.date_of_service.desc(), Shoeing.id.desc())
            .all()
        )

    @staticmethod
    def get_note_mentions(db: Session, horse_id: int) -> list[NoteMention]:
        return (
            db.query(NoteMention)
            .options(joinedload(NoteMention.note).joinedload(Note.author))
            .join(Note, Note.id == NoteMention.note_id)
            .filter(NoteMention.entity_type == "horse", NoteMention.entity_id == str(horse_id))
            .order_by(Note.created_at.desc(), Note.id.desc())
            .all()
        )

    @staticmethod
    def clear_new_horse_flags(db: Session, horse_id: int) -> int:
        """Mark every record of the horse as reviewed; the caller commits"""
        return (
            db.query(Shoeing)
            .filter(Shoeing.horse_id == horse_id, Shoeing.is_new_horse.is_(True))
            .update({Shoeing.is_new_horse: False}, synchronize_session=False)
        )
