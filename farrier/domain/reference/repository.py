"""Reference data repository"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import Location, Price


class ReferenceRepository:
    @staticmethod
    def get_locations(db: Session) -> list[Location]:
        return db.query(Location).order_by(Location.service_location).all()

    @staticmethod
    def get_location(db: Session, location_id: int) -> Optional[Location]:
        return db.query(Location).filter(Location.id == location_id).first()

    @staticmethod
    def get_location_by_name(db: Session, name: str) -> Optional[Location]:
        return db.query(Location).filter(Location.service_location == name).first()

    @staticmethod
    def get_prices(db: Session, location: Optional[str] = None) -> list[Price]:
        query = db.query(Price)
        if location:
            query = query.filter(Price.location == location)
        return query.order_by(Price.location, Price.product_type, Price.product_name).all()

    @staticmethod
    def get_price(db: Session, product_name: str, location: str) -> Optional[Price]:
        return (
            db.query(Price)
            .filter(Price.product_name == product_name, Price.location == location)
            .first()
        )

    @staticmethod
    def get_price_by_id(db: Session, price_id: int) -> Optional[Price]:
        return db.query(Price).filter(Price.id == price_id).first()
