"""
Approval service - reconciliation of pending service records

Pending records are grouped by accounting customer, then accepted into an
invoice, rejected back to the submitter, or edited in place. Accepting
writes nothing locally until the invoice call has succeeded.
"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...models import (
    HORSE_ACCEPTED,
    SHOEING_CANCELLED,
    SHOEING_COMPLETED,
    SHOEING_PENDING,
    SHOEING_REJECTED,
    Customer,
    CustomerHorse,
    Notification,
    Shoeing,
    User,
)
from ...services.notification_hub import NotificationHub, notification_hub
from ...services.quickbooks_service import QuickBooksClient, QuickBooksError, accounting_http_error
from ...shared.validators import format_price, parse_cost
from ..customers.service import CustomerService
from ..horses.repository import HorseRepository
from ..notifications.service import publish_notifications
from ..shoeings.repository import ShoeingRepository
from .grouping import NO_CUSTOMER, group_pending, horse_names, suggest_customer_ids
from .schemas import ShoeingEdit

logger = logging.getLogger(__name__)

REJECTED_NOTIFICATION_TYPE = "shoeing_rejected"


def _horse_label(shoeing: Shoeing) -> str:
    if shoeing.horse is not None:
        return shoeing.horse.name
    return shoeing.horse_name or "your horse"


class ShoeingApprovalService:
    """Service layer for the admin approval workflow"""

    def __init__(
        self,
        db: Session,
        user: User,
        accounting: QuickBooksClient,
        hub: NotificationHub = notification_hub,
    ):
        self.db = db
        self.user = user
        self.accounting = accounting
        self.hub = hub
        self.repo = ShoeingRepository()
        self.customers = CustomerService(db)

    # ------------------------------------------------------------------
    # Grouping
    # ------------------------------------------------------------------

    def _linked_customer_names(self, horse_ids: set) -> dict[int, list[str]]:
        if not horse_ids:
            return {}
        rows = (
            self.db.query(CustomerHorse.horse_id, Customer.display_name)
            .join(Customer, Customer.id == CustomerHorse.customer_id)
            .filter(CustomerHorse.horse_id.in_(horse_ids))
            .order_by(CustomerHorse.id)
            .all()
        )
        linked: dict[int, list[str]] = {}
        for horse_id, display_name in rows:
            linked.setdefault(horse_id, []).append(display_name)
        return linked

    def build_groups(self) -> dict:
        pending = self.repo.get_by_status(self.db, SHOEING_PENDING)
        horse_ids = {s.horse_id for s in pending if s.horse_id is not None}
        composite_names = {name for s in pending for name in horse_names(s)}
        siblings = self.repo.get_siblings(self.db, horse_ids, composite_names)
        return group_pending(pending, siblings, self._linked_customer_names(horse_ids))

    async def list_pending_groups(self) -> dict:
        """
        Pending records grouped by customer, each group with a suggested
        accounting customer. Groups are still returned when the accounting
        customer list cannot be loaded.
        """
        groups = self.build_groups()

        accounting_customers: list[dict] = []
        accounting_error = None
        try:
            accounting_customers = await self.accounting.get_customers()
        except QuickBooksError as e:
            logger.warning(f"⚠️ Could not load accounting customers: {e.message}")
            accounting_error = e.message

        suggest_customer_ids(groups, accounting_customers)

        return {
            "groups": [
                {
                    "key": group.key,
                    "customer_name": group.customer_name,
                    "suggested_customer_id": group.suggested_customer_id,
                    "suggested_customer_name": group.suggested_customer_name,
                    "total": sum(parse_cost(e.record.total_cost) or 0.0 for e in group.entries),
                    "shoeings": [
                        {
                            **{c.name: getattr(e.record, c.name) for c in Shoeing.__table__.columns},
                            "grouped_customer_name": e.customer_name,
                            "customer_inferred": e.inferred,
                            "total_cost_display": format_price(e.record.total_cost),
                        }
                        for e in group.entries
                    ],
                }
                for group in groups.values()
            ],
            "accounting_customers": accounting_customers,
            "accounting_error": accounting_error,
        }

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def _get_pending(self, shoeing_id: int) -> Shoeing:
        shoeing = self.repo.get_shoeing_by_id(self.db, shoeing_id)
        if not shoeing:
            raise HTTPException(status_code=404, detail="Shoeing not found")
        if shoeing.status != SHOEING_PENDING:
            raise HTTPException(
                status_code=409, detail=f"Shoeing {shoeing_id} is {shoeing.status}, not pending"
            )
        return shoeing

    def _grouped_name(self, shoeings: list[Shoeing]) -> Optional[str]:
        """Name the records are grouped under, explicit or inferred"""
        wanted = {s.id for s in shoeings}
        for key, group in self.build_groups().items():
            if key == NO_CUSTOMER:
                continue
            if any(entry.record.id in wanted for entry in group.entries):
                return group.customer_name
        return None

    async def accept(self, shoeing_id: int, customer_id: str) -> dict:
        return await self.accept_group([shoeing_id], customer_id)

    async def accept_group(self, shoeing_ids: list[int], customer_id: str) -> dict:
        """
        Invoice every record in one call. On success all of them are completed
        with the same invoice number; on failure none of them change.
        """
        shoeings = [self._get_pending(shoeing_id) for shoeing_id in shoeing_ids]
        if not customer_id:
            raise HTTPException(status_code=400, detail="An accounting customer must be selected")

        logger.info(
            f"🧾 Invoicing shoeings {shoeing_ids} to accounting customer {customer_id} by {self.user.id}"
        )
        try:
            result = await self.accounting.create_invoice(shoeings, customer_id)
        except QuickBooksError as e:
            logger.error(f"❌ Invoice creation failed for shoeings {shoeing_ids}: {e.message}")
            raise accounting_http_error(e) from e

        invoice = result.get("invoice") or {}
        invoice_number = invoice.get("DocNumber") or invoice.get("Id")
        matched = next(
            (c for c in result.get("customers", []) if str(c.get("id")) == str(customer_id)), None
        )
        display_name = (matched or {}).get("display_name") or self._grouped_name(shoeings)

        sent_at = datetime.utcnow()
        try:
            for shoeing in shoeings:
                shoeing.status = SHOEING_COMPLETED
                shoeing.invoice_number = invoice_number
                shoeing.invoice_sent_at = sent_at
                if display_name:
                    shoeing.customer_name = display_name
                    if shoeing.horse_id is not None:
                        self.customers.stage_link_by_display_name(display_name, shoeing.horse_id)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Invoice {invoice_number} created but shoeings could not be updated: {e}")
            raise HTTPException(
                status_code=500,
                detail=f"Invoice {invoice_number} was created but the shoeings could not be updated",
            ) from e

        logger.info(f"✅ Shoeings {shoeing_ids} completed on invoice {invoice_number}")
        return {
            "invoice_number": invoice_number,
            "invoice_id": invoice.get("Id"),
            "customer_name": display_name,
            "shoeing_ids": [s.id for s in shoeings],
        }

    def reject(self, shoeing_id: int) -> Shoeing:
        """Cancel a record and tell the submitter"""
        shoeing = self._get_pending(shoeing_id)
        shoeing.status = SHOEING_CANCELLED
        notification = Notification(
            recipient_id=shoeing.user_id,
            creator_id=self.user.id,
            message=f"Your shoeing request for {_horse_label(shoeing)} has been rejected.",
            type=REJECTED_NOTIFICATION_TYPE,
            related_id=str(shoeing.id),
        )
        self.db.add(notification)
        self.db.commit()
        self.db.refresh(shoeing)
        publish_notifications([notification], self.hub)
        logger.info(f"🚫 Shoeing {shoeing_id} rejected by {self.user.id}")
        return shoeing

    def edit(self, shoeing_id: int, data: ShoeingEdit) -> Shoeing:
        shoeing = self._get_pending(shoeing_id)
        for key, value in data.model_dump(exclude_unset=True).items():
            setattr(shoeing, key, value)
        self.db.commit()
        self.db.refresh(shoeing)
        return shoeing

    def accept_new_horse(self, shoeing_id: int) -> Shoeing:
        """Mark the record's horse as reviewed, whatever the record's status"""
        shoeing = self.repo.get_shoeing_by_id(self.db, shoeing_id)
        if not shoeing:
            raise HTTPException(status_code=404, detail="Shoeing not found")
        if not shoeing.is_new_horse:
            raise HTTPException(status_code=409, detail="Horse has already been reviewed")
        shoeing.is_new_horse = False
        if shoeing.horse is not None:
            shoeing.horse.status = HORSE_ACCEPTED
            HorseRepository.clear_new_horse_flags(self.db, shoeing.horse_id)
        self.db.commit()
        self.db.refresh(shoeing)
        logger.info(f"✅ New horse on shoeing {shoeing_id} accepted")
        return shoeing

    def reject_new_horse(self, shoeing_id: int) -> Shoeing:
        shoeing = self._get_pending(shoeing_id)
        if not shoeing.is_new_horse:
            raise HTTPException(status_code=409, detail="Horse has already been reviewed")
        shoeing.status = SHOEING_REJECTED
        self.db.commit()
        self.db.refresh(shoeing)
        logger.info(f"🚫 New horse on shoeing {shoeing_id} rejected")
        return shoeing
