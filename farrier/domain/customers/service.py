"""Customer service - Business logic for customer operations"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...models import Customer, Horse
from .repository import CUSTOMERS_PAGE_SIZE, CustomerRepository
from .schemas import CustomerCreate, CustomerUpdate

logger = logging.getLogger(__name__)


class CustomerService:
    """Service layer for customer business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = CustomerRepository()

    def list_customers(self, search: Optional[str] = None, page: int = 1) -> dict:
        page = max(page, 1)
        items, total = self.repo.search_customers(self.db, search, page)
        return {"items": items, "total": total, "page": page, "page_size": CUSTOMERS_PAGE_SIZE}

    def get_customer(self, customer_id: int) -> Customer:
        customer = self.repo.get_customer_by_id(self.db, customer_id)
        if not customer:
            raise HTTPException(status_code=404, detail="Customer not found")
        return customer

    def create_customer(self, data: CustomerCreate) -> Customer:
        logger.info(f"📥 Creating customer '{data.display_name}'")
        return self.repo.create_customer(self.db, **data.model_dump())

    def update_customer(self, customer_id: int, data: CustomerUpdate) -> Customer:
        customer = self.get_customer(customer_id)
        return self.repo.update_customer(self.db, customer, **data.model_dump(exclude_unset=True))

    def delete_customer(self, customer_id: int) -> dict:
        customer = self.get_customer(customer_id)
        self.repo.delete_customer(self.db, customer)
        logger.info(f"🗑️ Deleted customer {customer_id}")
        return {"message": "Customer deleted"}

    def list_customer_horses(self, customer_id: int) -> list[Horse]:
        self.get_customer(customer_id)
        return self.repo.get_linked_horses(self.db, customer_id)

    def _get_horse(self, horse_id: int) -> Horse:
        horse = self.db.query(Horse).filter(Horse.id == horse_id).first()
        if not horse:
            raise HTTPException(status_code=404, detail="Horse not found")
        return horse

    def link_horse(self, customer_id: int, horse_id: int) -> dict:
        """Link a horse to a customer; linking twice is a no-op"""
        self.get_customer(customer_id)
        self._get_horse(horse_id)

        if self.repo.get_link(self.db, customer_id, horse_id):
            return {"message": "Horse already linked", "created": False}

        self.repo.add_link(self.db, customer_id, horse_id)
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to link horse {horse_id} to customer {customer_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to link horse") from e

        logger.info(f"🔗 Linked horse {horse_id} to customer {customer_id}")
        return {"message": "Horse linked", "created": True}

    def unlink_horse(self, customer_id: int, horse_id: int) -> dict:
        link = self.repo.get_link(self.db, customer_id, horse_id)
        if not link:
            raise HTTPException(status_code=404, detail="Link not found")
        self.db.delete(link)
        self.db.commit()
        return {"message": "Horse unlinked"}

    def stage_link_by_display_name(self, display_name: str, horse_id: int) -> Customer:
        """
        Find the local customer for an accounting display name (creating it if
        needed) and stage a link to the horse when one is missing. Nothing is
        committed here.
        """
        customer = self.repo.get_customer_by_display_name(self.db, display_name)
        if customer is None:
            customer = Customer(display_name=display_name.strip())
            self.db.add(customer)
            self.db.flush()
            logger.info(f"🆕 Created local customer '{customer.display_name}'")

        if not self.repo.get_link(self.db, customer.id, horse_id):
            self.repo.add_link(self.db, customer.id, horse_id)
            self.db.flush()
        return customer
