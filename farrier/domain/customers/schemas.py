"""Customer domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from ...shared.validators import validate_email, validate_us_phone


class CustomerCreate(BaseModel):
    """Schema for creating a new customer"""

    display_name: str
    company_name: Optional[str] = None
    barn_trainer: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("display_name")
    @classmethod
    def validate_display_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Display name is required")
        return v

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        return validate_email(v)

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        if v:
            return validate_us_phone(v)
        return v


class CustomerUpdate(BaseModel):
    """Schema for updating an existing customer"""

    display_name: Optional[str] = None
    company_name: Optional[str] = None
    barn_trainer: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("display_name")
    @classmethod
    def validate_display_name(cls, v):
        if v is not None and not v.strip():
            raise ValueError("Display name cannot be empty")
        return v.strip() if v else v

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        return validate_email(v)

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        if v:
            return validate_us_phone(v)
        return v


class CustomerResponse(BaseModel):
    id: int
    display_name: str
    company_name: Optional[str] = None
    barn_trainer: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class CustomerListResponse(BaseModel):
    items: list[CustomerResponse]
    total: int
    page: int
    page_size: int


class LinkedHorseResponse(BaseModel):
    id: int
    name: str
    barn_trainer: Optional[str] = None
    status: str

    class Config:
        from_attributes = True
