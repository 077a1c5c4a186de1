"""Customer repository - Database operations for customers"""

from typing import Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from ...models import Customer, CustomerHorse, Horse

CUSTOMERS_PAGE_SIZE = 20


class CustomerRepository:
    """Repository for customer database operations"""

    @staticmethod
    def search_customers(db: Session, search: Optional[str], page: int) -> tuple[list[Customer], int]:
        """One page of customers, newest first, and the total match count"""
        query = db.query(Customer)
        if search:
            pattern = f"%{search.strip()}%"
            query = query.filter(
                or_(
                    Customer.display_name.ilike(pattern),
                    Customer.company_name.ilike(pattern),
                    Customer.barn_trainer.ilike(pattern),
                    Customer.email.ilike(pattern),
                )
            )
        total = query.count()
        items = (
            query.order_by(Customer.created_at.desc(), Customer.id.desc())
            .offset((page - 1) * CUSTOMERS_PAGE_SIZE)
            .limit(CUSTOMERS_PAGE_SIZE)
            .all()
        )
        return items, total

    @staticmethod
    def get_customer_by_id(db: Session, customer_id: int) -> Optional[Customer]:
        return db.query(Customer).filter(Customer.id == customer_id).first()

    @staticmethod
    def get_customer_by_display_name(db: Session, display_name: str) -> Optional[Customer]:
        """Case-insensitive lookup on the accounting display name"""
        return (
            db.query(Customer)
            .filter(func.lower(Customer.display_name) == display_name.strip().lower())
            .order_by(Customer.id)
            .first()
        )

    @staticmethod
    def create_customer(db: Session, **customer_data) -> Customer:
        customer = Customer(**customer_data)
        db.add(customer)
        db.commit()
        db.refresh(customer)
        return customer

    @staticmethod
    def update_customer(db: Session, customer: Customer, **updates) -> Customer:
        """Update a customer with provided fields"""
        for key, value in updates.items():
            if value is not None and hasattr(customer, key):
                setattr(customer, key, value)
        db.commit()
        db.refresh(customer)
        return customer

    @staticmethod
    def delete_customer(db: Session, customer: Customer) -> None:
        db.delete(customer)
        db.commit()

    @staticmethod
    def get_linked_horses(db: Session, customer_id: int) -> list[Horse]:
        return (
            db.query(Horse)
            .join(CustomerHorse, CustomerHorse.horse_id == Horse.id)
            .filter(CustomerHorse.customer_id == customer_id)
            .order_by(Horse.name)
            .all()
        )

    @staticmethod
    def get_linked_customers(db: Session, horse_id: int) -> list[Customer]:
        return (
            db.query(Customer)
            .join(CustomerHorse, CustomerHorse.customer_id == Customer.id)
            .filter(CustomerHorse.horse_id == horse_id)
            .order_by(Customer.display_name)
            .all()
        )

    @staticmethod
    def get_link(db: Session, customer_id: int, horse_id: int) -> Optional[CustomerHorse]:
        return (
            db.query(CustomerHorse)
            .filter(CustomerHorse.customer_id == customer_id, CustomerHorse.horse_id == horse_id)
            .first()
        )

    @staticmethod
    def add_link(db: Session, customer_id: int, horse_id: int) -> CustomerHorse:
        """Stage a link without committing; callers own the transaction"""
        link = CustomerHorse(customer_id=customer_id, horse_id=horse_id)
        db.add(link)
        return link
