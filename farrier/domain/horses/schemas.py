"""Horse domain schemas"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from ...shared.validators import validate_email, validate_us_phone


class HorseCreate(BaseModel):
    name: str
    barn_trainer: Optional[str] = None
    owner_email: Optional[str] = None
    owner_phone: Optional[str] = None
    alert: bool = False
    alert_text: Optional[str] = None
    history: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Horse name is required")
        return v

    @field_validator("owner_email")
    @classmethod
    def validate_owner_email(cls, v):
        return validate_email(v)

    @field_validator("owner_phone")
    @classmethod
    def validate_owner_phone(cls, v):
        if v:
            return validate_us_phone(v)
        return v


class HorseUpdate(BaseModel):
    name: Optional[str] = None
    barn_trainer: Optional[str] = None
    owner_email: Optional[str] = None
    owner_phone: Optional[str] = None
    alert: Optional[bool] = None
    alert_text: Optional[str] = None
    history: Optional[str] = None
    notes_history: Optional[str] = None

    @field_validator("owner_email")
    @classmethod
    def validate_owner_email(cls, v):
        return validate_email(v)

    @field_validator("owner_phone")
    @classmethod
    def validate_owner_phone(cls, v):
        if v:
            return validate_us_phone(v)
        return v


class HorseResponse(BaseModel):
    id: int
    name: str
    barn_trainer: Optional[str] = None
    owner_email: Optional[str] = None
    owner_phone: Optional[str] = None
    status: str
    alert: bool = False
    alert_text: Optional[str] = None
    history: Optional[str] = None
    notes_history: Optional[str] = None
    composite_name: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class HorseListResponse(BaseModel):
    items: list[HorseResponse]
    total: int
    page: int
    page_size: int


class HorseCustomerResponse(BaseModel):
    id: int
    display_name: str
    email: Optional[str] = None

    class Config:
        from_attributes = True


class HorseShoeingResponse(BaseModel):
    id: int
    date_of_service: Optional[date] = None
    location: Optional[str] = None
    base_service: Optional[str] = None
    front_add_ons: Optional[str] = None
    hind_add_ons: Optional[str] = None
    total_cost: str
    status: str
    description: Optional[str] = None


class HorseNoteResponse(BaseModel):
    id: int
    author_name: Optional[str] = None
    message: str
    created_at: Optional[datetime] = None
