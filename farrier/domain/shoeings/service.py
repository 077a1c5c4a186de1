"""Service record service - creation, listing and deletion of shoeings"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import HORSE_PENDING, SHOEING_PENDING, Horse, Shoeing, User
from ...shared.validators import format_amount
from ..reference.service import ReferenceService
from .repository import SHOEINGS_PAGE_SIZE, ShoeingRepository
from .schemas import ShoeingCreate

logger = logging.getLogger(__name__)


class ShoeingService:
    """Service layer for service record business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ShoeingRepository()
        self.prices = ReferenceService(db)

    def _price(self, product_name: str, location: str) -> float:
        amount = self.prices.price_for(product_name, location)
        if amount is None:
            logger.warning(f"⚠️ No price for '{product_name}' at '{location}', using 0")
            return 0.0
        return amount

    def _add_on_cost(self, add_ons: list[str], location: str) -> float:
        return sum(self._price(name, location) for name in add_ons)

    def create_shoeing(self, data: ShoeingCreate, user: User) -> Shoeing:
        """
        Record a service. Component costs come from the location's price list
        and the total is their sum.
        """
        horse = self.db.query(Horse).filter(Horse.id == data.horse_id).first()
        if not horse:
            raise HTTPException(status_code=404, detail="Horse not found")

        base_cost = self._price(data.base_service, data.location) if data.base_service else 0.0
        front_cost = self._add_on_cost(data.front_add_ons, data.location)
        hind_cost = self._add_on_cost(data.hind_add_ons, data.location)

        shoeing = Shoeing(
            horse_id=horse.id,
            horse_name=horse.composite_name,
            date_of_service=data.date_of_service,
            location=data.location,
            base_service=data.base_service,
            front_add_ons=", ".join(data.front_add_ons) or None,
            hind_add_ons=", ".join(data.hind_add_ons) or None,
            cost_of_service=format_amount(base_cost),
            cost_of_front_add_ons=format_amount(front_cost),
            cost_of_hind_add_ons=format_amount(hind_cost),
            total_cost=format_amount(base_cost + front_cost + hind_cost),
            description=data.description,
            other_custom_services=data.other_custom_services,
            shoe_notes=data.shoe_notes,
            customer_name=data.customer_name or None,
            status=SHOEING_PENDING,
            is_new_horse=horse.status == HORSE_PENDING,
            user_id=user.id,
        )
        self.db.add(shoeing)
        self.db.commit()
        self.db.refresh(shoeing)
        logger.info(
            f"📥 Shoeing {shoeing.id} recorded for '{shoeing.horse_name}' by {user.id}, total {shoeing.total_cost}"
        )
        return shoeing

    def list_shoeings(
        self,
        status: Optional[str] = None,
        horse_id: Optional[int] = None,
        search: Optional[str] = None,
        page: int = 1,
    ) -> dict:
        page = max(page, 1)
        items, total = self.repo.search_shoeings(self.db, status, horse_id, search, page)
        return {"items": items, "total": total, "page": page, "page_size": SHOEINGS_PAGE_SIZE}

    def get_shoeing(self, shoeing_id: int) -> Shoeing:
        shoeing = self.repo.get_shoeing_by_id(self.db, shoeing_id)
        if not shoeing:
            raise HTTPException(status_code=404, detail="Shoeing not found")
        return shoeing

    def delete_shoeing(self, shoeing_id: int, confirm: bool = False) -> dict:
        """Permanently delete a record. Requires explicit confirmation."""
        if not confirm:
            raise HTTPException(
                status_code=400, detail="Deleting a shoeing is permanent. Pass confirm=true to proceed."
            )
        shoeing = self.get_shoeing(shoeing_id)
        self.db.delete(shoeing)
        self.db.commit()
        logger.info(f"🗑️ Shoeing {shoeing_id} permanently deleted")
        return {"message": "Shoeing deleted"}
