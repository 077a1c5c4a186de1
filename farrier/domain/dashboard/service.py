"""Dashboard service - revenue windows and rankings"""

import logging
from datetime import date
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import SHOEING_CANCELLED, SHOEING_REJECTED
from ..shoeings.repository import ShoeingRepository
from . import aggregation

logger = logging.getLogger(__name__)

EXCLUDED_STATUSES = (SHOEING_CANCELLED, SHOEING_REJECTED)


class DashboardService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = ShoeingRepository()

    def _records(self):
        shoeings = (s for s in self.repo.iter_all(self.db) if s.status not in EXCLUDED_STATUSES)
        records, skipped = aggregation.collect(shoeings)
        if skipped:
            logger.info(f"Dashboard skipped {skipped} record(s) without a date or base cost")
        return records, skipped

    def revenue_summary(self, today: Optional[date] = None) -> dict:
        records, skipped = self._records()
        windows = aggregation.revenue_windows(records, today or date.today())
        return {**windows, "record_count": len(records), "skipped": skipped}

    def rankings(
        self,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        limit: int = aggregation.DEFAULT_RANK_LIMIT,
    ) -> dict:
        if date_from and date_to and date_from > date_to:
            raise HTTPException(status_code=400, detail="'from' must be on or before 'to'")
        records, skipped = self._records()
        selected = aggregation.in_range(records, date_from, date_to)
        return {
            "total_revenue": round(sum(r.revenue for r in selected), 2),
            "services": aggregation.top_services(selected, limit),
            "add_ons": aggregation.top_add_ons(selected, limit),
            "products": aggregation.top_products(selected, limit),
            "locations": aggregation.revenue_by_location(selected),
            "customers": aggregation.top_customers(selected, limit),
            "record_count": len(selected),
            "skipped": skipped,
        }
