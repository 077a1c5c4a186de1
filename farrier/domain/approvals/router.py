"""Approval router - admin reconciliation of pending service records"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import require_admin
from ...database import get_db
from ...models import User
from ...routes.quickbooks import get_quickbooks_client
from ...services.quickbooks_service import QuickBooksClient
from ..shoeings.schemas import ShoeingResponse
from .schemas import (
    AcceptGroupRequest,
    AcceptRequest,
    AcceptResponse,
    PendingGroupsResponse,
    ShoeingEdit,
)
from .service import ShoeingApprovalService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/approvals", tags=["Approvals"])


def get_approval_service(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
    accounting: QuickBooksClient = Depends(get_quickbooks_client),
) -> ShoeingApprovalService:
    """Dependency injection for ShoeingApprovalService"""
    return ShoeingApprovalService(db, current_user, accounting)


@router.get("/pending", response_model=PendingGroupsResponse)
async def list_pending_groups(service: ShoeingApprovalService = Depends(get_approval_service)):
    """Pending shoeings grouped by customer, with suggested accounting customers"""
    return await service.list_pending_groups()


@router.post("/group/accept", response_model=AcceptResponse)
async def accept_group(
    data: AcceptGroupRequest,
    service: ShoeingApprovalService = Depends(get_approval_service),
):
    """Invoice every shoeing in a group at once"""
    return await service.accept_group(data.shoeing_ids, data.customer_id)


@router.post("/{shoeing_id}/accept", response_model=AcceptResponse)
async def accept_shoeing(
    shoeing_id: int,
    data: AcceptRequest,
    service: ShoeingApprovalService = Depends(get_approval_service),
):
    return await service.accept(shoeing_id, data.customer_id)


@router.post("/{shoeing_id}/reject", response_model=ShoeingResponse)
async def reject_shoeing(
    shoeing_id: int,
    service: ShoeingApprovalService = Depends(get_approval_service),
):
    return service.reject(shoeing_id)


@router.patch("/{shoeing_id}", response_model=ShoeingResponse)
async def edit_shoeing(
    shoeing_id: int,
    data: ShoeingEdit,
    service: ShoeingApprovalService = Depends(get_approval_service),
):
    return service.edit(shoeing_id, data)


@router.post("/{shoeing_id}/new-horse/accept", response_model=ShoeingResponse)
async def accept_new_horse(
    shoeing_id: int,
    service: ShoeingApprovalService = Depends(get_approval_service),
):
    return service.accept_new_horse(shoeing_id)


@router.post("/{shoeing_id}/new-horse/reject", response_model=ShoeingResponse)
async def reject_new_horse(
    shoeing_id: int,
    service: ShoeingApprovalService = Depends(get_approval_service),
):
    return service.reject_new_horse(shoeing_id)
