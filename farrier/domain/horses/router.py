"""Horse router - FastAPI endpoints for horse operations"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user, require_admin
from ...database import get_db
from ...models import HORSE_ACCEPTED, User
from .schemas import (
    HorseCreate,
    HorseCustomerResponse,
    HorseListResponse,
    HorseNoteResponse,
    HorseResponse,
    HorseShoeingResponse,
    HorseUpdate,
)
from .service import HorseService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/horses", tags=["Horses"])


def get_horse_service(db: Session = Depends(get_db)) -> HorseService:
    """Dependency injection for HorseService"""
    return HorseService(db)


@router.get("", response_model=HorseListResponse)
async def list_horses(
    search: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    status: Optional[str] = Query(HORSE_ACCEPTED),
    current_user: User = Depends(get_current_user),
    service: HorseService = Depends(get_horse_service),
):
    """Search horses by name or barn/trainer"""
    return service.list_horses(search, page, status)


@router.get("/all", response_model=list[HorseResponse])
async def get_all_horses(
    current_user: User = Depends(get_current_user),
    service: HorseService = Depends(get_horse_service),
):
    return service.get_all_horses()


@router.get("/pending", response_model=list[HorseResponse])
async def list_pending_horses(
    current_user: User = Depends(require_admin),
    service: HorseService = Depends(get_horse_service),
):
    return service.list_pending_horses()


@router.post("", response_model=HorseResponse)
async def create_horse(
    data: HorseCreate,
    current_user: User = Depends(get_current_user),
    service: HorseService = Depends(get_horse_service),
):
    return service.create_horse(data, current_user)


@router.get("/{horse_id}", response_model=HorseResponse)
async def get_horse(
    horse_id: int,
    current_user: User = Depends(get_current_user),
    service: HorseService = Depends(get_horse_service),
):
    return service.get_horse(horse_id)


@router.put("/{horse_id}", response_model=HorseResponse)
async def update_horse(
    horse_id: int,
    data: HorseUpdate,
    current_user: User = Depends(get_current_user),
    service: HorseService = Depends(get_horse_service),
):
    return service.update_horse(horse_id, data, current_user)


@router.delete("/{horse_id}")
async def delete_horse(
    horse_id: int,
    current_user: User = Depends(require_admin),
    service: HorseService = Depends(get_horse_service),
):
    return service.delete_horse(horse_id)


@router.post("/{horse_id}/accept", response_model=HorseResponse)
async def accept_horse(
    horse_id: int,
    current_user: User = Depends(require_admin),
    service: HorseService = Depends(get_horse_service),
):
    return service.accept_horse(horse_id)


@router.get("/{horse_id}/customers", response_model=list[HorseCustomerResponse])
async def list_horse_customers(
    horse_id: int,
    current_user: User = Depends(get_current_user),
    service: HorseService = Depends(get_horse_service),
):
    return service.list_horse_customers(horse_id)


@router.get("/{horse_id}/shoeings", response_model=list[HorseShoeingResponse])
async def list_horse_shoeings(
    horse_id: int,
    current_user: User = Depends(get_current_user),
    service: HorseService = Depends(get_horse_service),
):
    """Service history for a horse, most recent first"""
    return service.list_horse_shoeings(horse_id)


@router.get("/{horse_id}/notes", response_model=list[HorseNoteResponse])
async def list_horse_notes(
    horse_id: int,
    current_user: User = Depends(get_current_user),
    service: HorseService = Depends(get_horse_service),
):
    return service.list_horse_notes(horse_id)
