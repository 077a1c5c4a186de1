"""Reference data routers - /locations and /prices"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user, require_admin
from ...database import get_db
from ...models import User
from .schemas import LocationCreate, LocationResponse, LocationUpdate, PriceResponse, PriceUpsert
from .service import ReferenceService

locations_router = APIRouter(prefix="/locations", tags=["Locations"])
prices_router = APIRouter(prefix="/prices", tags=["Prices"])


def get_reference_service(db: Session = Depends(get_db)) -> ReferenceService:
    return ReferenceService(db)


@locations_router.get("", response_model=list[LocationResponse])
async def list_locations(
    current_user: User = Depends(get_current_user),
    service: ReferenceService = Depends(get_reference_service),
):
    return service.list_locations()


@locations_router.post("", response_model=LocationResponse)
async def create_location(
    data: LocationCreate,
    current_user: User = Depends(require_admin),
    service: ReferenceService = Depends(get_reference_service),
):
    return service.create_location(data)


@locations_router.put("/{location_id}", response_model=LocationResponse)
async def update_location(
    location_id: int,
    data: LocationUpdate,
    current_user: User = Depends(require_admin),
    service: ReferenceService = Depends(get_reference_service),
):
    return service.update_location(location_id, data)


@locations_router.delete("/{location_id}")
async def delete_location(
    location_id: int,
    current_user: User = Depends(require_admin),
    service: ReferenceService = Depends(get_reference_service),
):
    return service.delete_location(location_id)


@prices_router.get("", response_model=list[PriceResponse])
async def list_prices(
    location: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    service: ReferenceService = Depends(get_reference_service),
):
    """Price list, optionally for one location"""
    return service.list_prices(location)


@prices_router.put("", response_model=PriceResponse)
async def upsert_price(
    data: PriceUpsert,
    current_user: User = Depends(require_admin),
    service: ReferenceService = Depends(get_reference_service),
):
    return service.upsert_price(data)


@prices_router.delete("/{price_id}")
async def delete_price(
    price_id: int,
    current_user: User = Depends(require_admin),
    service: ReferenceService = Depends(get_reference_service),
):
    return service.delete_price(price_id)
