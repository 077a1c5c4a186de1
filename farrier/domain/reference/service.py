"""Reference data service - service locations and their price lists"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import Location, Price
from ...shared.validators import ensure_valid_color
from .repository import ReferenceRepository
from .schemas import LocationCreate, LocationUpdate, PriceUpsert

logger = logging.getLogger(__name__)


class ReferenceService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = ReferenceRepository()

    # Locations

    def list_locations(self) -> list[Location]:
        return self.repo.get_locations(self.db)

    def get_location(self, location_id: int) -> Location:
        location = self.repo.get_location(self.db, location_id)
        if not location:
            raise HTTPException(status_code=404, detail="Location not found")
        return location

    def create_location(self, data: LocationCreate) -> Location:
        if self.repo.get_location_by_name(self.db, data.service_location):
            raise HTTPException(status_code=400, detail="Location already exists")
        location = Location(
            service_location=data.service_location,
            location_color=ensure_valid_color(data.location_color),
        )
        self.db.add(location)
        self.db.commit()
        self.db.refresh(location)
        logger.info(f"📍 Created location '{location.service_location}'")
        return location

    def update_location(self, location_id: int, data: LocationUpdate) -> Location:
        location = self.get_location(location_id)
        for key, value in data.model_dump(exclude_unset=True).items():
            if value is not None:
                setattr(location, key, value)
        self.db.commit()
        self.db.refresh(location)
        return location

    def delete_location(self, location_id: int) -> dict:
        location = self.get_location(location_id)
        self.db.delete(location)
        self.db.commit()
        return {"message": "Location deleted"}

    # Prices

    def list_prices(self, location: Optional[str] = None) -> list[Price]:
        return self.repo.get_prices(self.db, location)

    def upsert_price(self, data: PriceUpsert) -> Price:
        """Set the price of a product at a location, creating the row if needed"""
        price = self.repo.get_price(self.db, data.product_name, data.location)
        if price is None:
            price = Price(product_name=data.product_name, location=data.location)
            self.db.add(price)
        price.product_type = data.product_type
        price.amount = data.amount
        self.db.commit()
        self.db.refresh(price)
        return price

    def delete_price(self, price_id: int) -> dict:
        price = self.repo.get_price_by_id(self.db, price_id)
        if not price:
            raise HTTPException(status_code=404, detail="Price not found")
        self.db.delete(price)
        self.db.commit()
        return {"message": "Price deleted"}

    def price_for(self, product_name: str, location: str) -> Optional[float]:
        """Price of a product at a location, or None when it has no price there"""
        price = self.repo.get_price(self.db, product_name.strip(), location)
        if price is None:
            return None
        return float(price.amount)
