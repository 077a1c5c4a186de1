"""Service record router"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user, require_admin
from ...database import get_db
from ...models import User
from .schemas import ShoeingCreate, ShoeingListResponse, ShoeingResponse
from .service import ShoeingService

router = APIRouter(prefix="/shoeings", tags=["Shoeings"])


def get_shoeing_service(db: Session = Depends(get_db)) -> ShoeingService:
    """Dependency injection for ShoeingService"""
    return ShoeingService(db)


@router.get("", response_model=ShoeingListResponse)
async def list_shoeings(
    status: Optional[str] = Query(None),
    horse_id: Optional[int] = Query(None),
    search: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    current_user: User = Depends(get_current_user),
    service: ShoeingService = Depends(get_shoeing_service),
):
    return service.list_shoeings(status, horse_id, search, page)


@router.post("", response_model=ShoeingResponse)
async def create_shoeing(
    data: ShoeingCreate,
    current_user: User = Depends(get_current_user),
    service: ShoeingService = Depends(get_shoeing_service),
):
    """Submit a service record for approval"""
    return service.create_shoeing(data, current_user)


@router.get("/{shoeing_id}", response_model=ShoeingResponse)
async def get_shoeing(
    shoeing_id: int,
    current_user: User = Depends(get_current_user),
    service: ShoeingService = Depends(get_shoeing_service),
):
    return service.get_shoeing(shoeing_id)


@router.delete("/{shoeing_id}")
async def delete_shoeing(
    shoeing_id: int,
    confirm: bool = Query(False),
    current_user: User = Depends(require_admin),
    service: ShoeingService = Depends(get_shoeing_service),
):
    return service.delete_shoeing(shoeing_id, confirm)
