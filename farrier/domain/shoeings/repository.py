"""Service record repository"""

from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from ...models import Shoeing

SHOEINGS_PAGE_SIZE = 25
BULK_FETCH_SIZE = 1000


class ShoeingRepository:
    """Repository for service record database operations"""

    @staticmethod
    def get_shoeing_by_id(db: Session, shoeing_id: int) -> Optional[Shoeing]:
        return db.query(Shoeing).filter(Shoeing.id == shoeing_id).first()

    @staticmethod
    def search_shoeings(
        db: Session,
        status: Optional[str],
        horse_id: Optional[int],
        search: Optional[str],
        page: int,
    ) -> tuple[list[Shoeing], int]:
        query = db.query(Shoeing)
        if status:
            query = query.filter(Shoeing.status == status)
        if horse_id is not None:
            query = query.filter(Shoeing.horse_id == horse_id)
        if search:
            pattern = f"%{search.strip()}%"
            query = query.filter(
                or_(
                    Shoeing.horse_name.ilike(pattern),
                    Shoeing.location.ilike(pattern),
                    Shoeing.base_service.ilike(pattern),
                    Shoeing.customer_name.ilike(pattern),
                )
            )
        total = query.count()
        items = (
            query.order_by(Shoeing.date_of_service.desc(), Shoeing.id.desc())
            .offset((page - 1) * SHOEINGS_PAGE_SIZE)
            .limit(SHOEINGS_PAGE_SIZE)
            .all()
        )
        return items, total

    @staticmethod
    def get_by_status(db: Session, status: str) -> list[Shoeing]:
        return (
            db.query(Shoeing)
            .options(joinedload(Shoeing.horse))
            .filter(Shoeing.status == status)
            .order_by(Shoeing.date_of_service, Shoeing.id)
            .all()
        )

    @staticmethod
    def get_siblings(db: Session, horse_ids: set, horse_names: set) -> list[Shoeing]:
        """Every record, in any status, sharing one of the horse references"""
        filters = []
        if horse_ids:
            filters.append(Shoeing.horse_id.in_(horse_ids))
        if horse_names:
            filters.append(Shoeing.horse_name.in_(horse_names))
        if not filters:
            return []
        return db.query(Shoeing).filter(or_(*filters)).order_by(Shoeing.id).all()

    @staticmethod
    def iter_all(db: Session, batch_size: int = BULK_FETCH_SIZE):
        """Yield every record, fetched in fixed-size pages"""
        offset = 0
        while True:
            batch = db.query(Shoeing).order_by(Shoeing.id).offset(offset).limit(batch_size).all()
            yield from batch
            if len(batch) < batch_size:
                return
            offset += batch_size
