"""Reference data schemas - locations and per-location prices"""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, field_validator

from ...shared.validators import ensure_valid_color

PRODUCT_TYPES = ("Base Service", "Add-on")


class LocationCreate(BaseModel):
    service_location: str
    location_color: Optional[str] = None

    @field_validator("service_location")
    @classmethod
    def validate_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Location name is required")
        return v

    @field_validator("location_color")
    @classmethod
    def validate_color(cls, v):
        return ensure_valid_color(v)


class LocationUpdate(BaseModel):
    service_location: Optional[str] = None
    location_color: Optional[str] = None

    @field_validator("location_color")
    @classmethod
    def validate_color(cls, v):
        if v is None:
            return v
        return ensure_valid_color(v)


class LocationResponse(BaseModel):
    id: int
    service_location: str
    location_color: str

    class Config:
        from_attributes = True


class PriceUpsert(BaseModel):
    product_name: str
    product_type: str
    location: str
    amount: Decimal

    @field_validator("product_type")
    @classmethod
    def validate_product_type(cls, v):
        if v not in PRODUCT_TYPES:
            raise ValueError(f"Product type must be one of: {', '.join(PRODUCT_TYPES)}")
        return v

    @field_validator("amount")
    @classmethod
    def validate_amount(cls, v):
        if v < 0:
            raise ValueError("Price cannot be negative")
        return v


class PriceResponse(BaseModel):
    id: int
    product_name: str
    product_type: str
    location: str
    amount: float

    class Config:
        from_attributes = True
