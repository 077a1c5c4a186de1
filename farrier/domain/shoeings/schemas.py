"""Service record ("shoeing") schemas"""

from datetime import date, datetime
from typing import Optional, Union

from pydantic import BaseModel, field_validator


def _split_add_ons(v):
    if v is None:
        return []
    if isinstance(v, str):
        v = v.split(",")
    return [item.strip() for item in v if item and item.strip()]


class ShoeingCreate(BaseModel):
    horse_id: int
    date_of_service: date
    location: str
    base_service: Optional[str] = None
    front_add_ons: list[str] = []
    hind_add_ons: list[str] = []
    description: Optional[str] = None
    other_custom_services: Optional[str] = None
    shoe_notes: Optional[str] = None
    customer_name: Optional[str] = None

    @field_validator("location")
    @classmethod
    def validate_location(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Location is required")
        return v

    @field_validator("front_add_ons", "hind_add_ons", mode="before")
    @classmethod
    def validate_add_ons(cls, v: Union[str, list, None]):
        return _split_add_ons(v)


class ShoeingResponse(BaseModel):
    id: int
    horse_id: Optional[int] = None
    horse_name: Optional[str] = None
    date_of_service: Optional[date] = None
    location: Optional[str] = None
    base_service: Optional[str] = None
    front_add_ons: Optional[str] = None
    hind_add_ons: Optional[str] = None
    cost_of_service: Optional[str] = None
    cost_of_front_add_ons: Optional[str] = None
    cost_of_hind_add_ons: Optional[str] = None
    total_cost: Optional[str] = None
    description: Optional[str] = None
    other_custom_services: Optional[str] = None
    shoe_notes: Optional[str] = None
    status: str
    invoice_number: Optional[str] = None
    invoice_sent_at: Optional[datetime] = None
    is_new_horse: bool = False
    customer_name: Optional[str] = None
    user_id: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ShoeingListResponse(BaseModel):
    items: list[ShoeingResponse]
    total: int
    page: int
    page_size: int
