"""Dashboard router"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import require_admin
from ...database import get_db
from ...models import User
from .schemas import Rankings, RevenueSummary
from .service import DashboardService

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


def get_dashboard_service(db: Session = Depends(get_db)) -> DashboardService:
    return DashboardService(db)


@router.get("/revenue", response_model=RevenueSummary)
async def revenue_summary(
    current_user: User = Depends(require_admin),
    service: DashboardService = Depends(get_dashboard_service),
):
    """7-day, month-to-date and quarter-to-date revenue against the previous period"""
    return service.revenue_summary()


@router.get("/rankings", response_model=Rankings)
async def rankings(
    date_from: Optional[date] = Query(None, alias="from"),
    date_to: Optional[date] = Query(None, alias="to"),
    limit: int = Query(5, ge=1, le=50),
    current_user: User = Depends(require_admin),
    service: DashboardService = Depends(get_dashboard_service),
):
    return service.rankings(date_from, date_to, limit)
