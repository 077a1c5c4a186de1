"""Approval workflow schemas"""

from datetime import date
from typing import Optional

from pydantic import BaseModel, field_validator

from ...shared.validators import normalize_cost
from ..shoeings.schemas import ShoeingResponse


class PendingShoeing(ShoeingResponse):
    """A pending record as shown in its group, with the name it was grouped under"""

    grouped_customer_name: Optional[str] = None
    customer_inferred: bool = False
    total_cost_display: str


class PendingGroup(BaseModel):
    key: str
    customer_name: Optional[str] = None
    suggested_customer_id: Optional[str] = None
    suggested_customer_name: Optional[str] = None
    total: float
    shoeings: list[PendingShoeing]


class PendingGroupsResponse(BaseModel):
    groups: list[PendingGroup]
    accounting_customers: list[dict] = []
    accounting_error: Optional[str] = None


class AcceptRequest(BaseModel):
    customer_id: str

    @field_validator("customer_id")
    @classmethod
    def validate_customer_id(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("An accounting customer must be selected")
        return v


class AcceptGroupRequest(AcceptRequest):
    shoeing_ids: list[int]

    @field_validator("shoeing_ids")
    @classmethod
    def validate_shoeing_ids(cls, v):
        if not v:
            raise ValueError("No shoeings selected")
        return list(dict.fromkeys(v))


class AcceptResponse(BaseModel):
    invoice_number: Optional[str] = None
    invoice_id: Optional[str] = None
    customer_name: Optional[str] = None
    shoeing_ids: list[int]


class ShoeingEdit(BaseModel):
    date_of_service: Optional[date] = None
    description: Optional[str] = None
    location: Optional[str] = None
    total_cost: Optional[str] = None
    shoe_notes: Optional[str] = None
    other_custom_services: Optional[str] = None

    @field_validator("total_cost")
    @classmethod
    def validate_total_cost(cls, v):
        return normalize_cost(v)
