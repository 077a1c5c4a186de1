"""Horse service - Business logic for horse operations"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import HORSE_ACCEPTED, HORSE_PENDING, Customer, Horse, Shoeing, User
from ...services.mentions import emphasize_names, render_for_horse
from ...shared.validators import format_price
from ..customers.repository import CustomerRepository
from .repository import HORSES_PAGE_SIZE, HorseRepository
from .schemas import HorseCreate, HorseUpdate

logger = logging.getLogger(__name__)


class HorseService:
    """Service layer for horse business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = HorseRepository()

    def list_horses(
        self, search: Optional[str] = None, page: int = 1, status: Optional[str] = HORSE_ACCEPTED
    ) -> dict:
        page = max(page, 1)
        items, total = self.repo.search_horses(self.db, search, page, status)
        return {"items": items, "total": total, "page": page, "page_size": HORSES_PAGE_SIZE}

    def list_pending_horses(self) -> list[Horse]:
        return self.db.query(Horse).filter(Horse.status == HORSE_PENDING).order_by(Horse.created_at).all()

    def get_all_horses(self) -> list[Horse]:
        return self.repo.get_all_horses(self.db)

    def get_horse(self, horse_id: int) -> Horse:
        horse = self.repo.get_horse_by_id(self.db, horse_id)
        if not horse:
            raise HTTPException(status_code=404, detail="Horse not found")
        return horse

    def create_horse(self, data: HorseCreate, user: User) -> Horse:
        """Horses added by non-admins wait for review"""
        status = HORSE_ACCEPTED if user.is_admin else HORSE_PENDING
        horse = Horse(**data.model_dump(), status=status, created_by=user.id)
        self.db.add(horse)
        self.db.commit()
        self.db.refresh(horse)
        logger.info(f"🐴 Created horse '{horse.composite_name}' ({status}) by {user.id}")
        return horse

    def update_horse(self, horse_id: int, data: HorseUpdate, user: User) -> Horse:
        """An admin edit also counts as reviewing the horse"""
        horse = self.get_horse(horse_id)
        for key, value in data.model_dump(exclude_unset=True).items():
            if value is not None:
                setattr(horse, key, value)
        if user.is_admin:
            self.repo.clear_new_horse_flags(self.db, horse_id)
        self.db.commit()
        self.db.refresh(horse)
        return horse

    def delete_horse(self, horse_id: int) -> dict:
        horse = self.get_horse(horse_id)
        self.db.delete(horse)
        self.db.commit()
        logger.info(f"🗑️ Deleted horse {horse_id}")
        return {"message": "Horse deleted"}

    def accept_horse(self, horse_id: int) -> Horse:
        horse = self.get_horse(horse_id)
        horse.status = HORSE_ACCEPTED
        cleared = self.repo.clear_new_horse_flags(self.db, horse_id)
        self.db.commit()
        self.db.refresh(horse)
        logger.info(f"✅ Horse {horse_id} accepted, {cleared} shoeing(s) marked reviewed")
        return horse

    def list_horse_customers(self, horse_id: int) -> list[Customer]:
        self.get_horse(horse_id)
        return CustomerRepository.get_linked_customers(self.db, horse_id)

    def list_horse_shoeings(self, horse_id: int) -> list[dict]:
        """Service history, most recent first"""
        self.get_horse(horse_id)
        return [self._history_entry(s) for s in self.repo.get_shoeings(self.db, horse_id)]

    @staticmethod
    def _history_entry(shoeing: Shoeing) -> dict:
        return {
            "id": shoeing.id,
            "date_of_service": shoeing.date_of_service,
            "location": shoeing.location,
            "base_service": shoeing.base_service,
            "front_add_ons": shoeing.front_add_ons,
            "hind_add_ons": shoeing.hind_add_ons,
            "total_cost": format_price(shoeing.total_cost),
            "status": shoeing.status,
            "description": shoeing.description,
        }

    def list_horse_notes(self, horse_id: int) -> list[dict]:
        """Notes that mention the horse, emphasising only this horse's name"""
        self.get_horse(horse_id)
        notes = []
        for mention in self.repo.get_note_mentions(self.db, horse_id):
            note = mention.note
            names = [m.display_name for m in note.mentions]
            message = emphasize_names(note.content, names)
            notes.append(
                {
                    "id": note.id,
                    "author_name": note.author.full_name if note.author else None,
                    "message": render_for_horse(message, mention.display_name),
                    "created_at": note.created_at,
                }
            )
        return notes
