"""
Test configuration and fixtures.

Provides:
- In-memory SQLite session per test
- Admin and regular users, switchable per request
- HTTPX AsyncClient against the app with dependency overrides
- A fake accounting client for approval flows
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-farrier-office")
os.environ.setdefault("AUTH_JWT_SECRET", "test-jwt-secret")

from datetime import date  # noqa: E402
from typing import Optional  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from farrier import models_quickbooks  # noqa: E402,F401
from farrier.auth import get_current_user  # noqa: E402
from farrier.database import Base, get_db  # noqa: E402
from farrier.main import app  # noqa: E402
from farrier.models import (  # noqa: E402
    HORSE_ACCEPTED,
    ROLE_ADMIN,
    ROLE_USER,
    SHOEING_PENDING,
    Horse,
    Shoeing,
    User,
)
from farrier.routes.quickbooks import get_quickbooks_client  # noqa: E402
from farrier.services.quickbooks_service import QuickBooksError  # noqa: E402

# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture
def db():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def admin(db) -> User:
    user = User(id="admin-1", email="office@example.com", full_name="Office Admin", role=ROLE_ADMIN)
    db.add(user)
    db.commit()
    return user


@pytest.fixture
def farrier(db) -> User:
    user = User(id="farrier-1", email="sam@example.com", full_name="Sam Smith", role=ROLE_USER)
    db.add(user)
    db.commit()
    return user


@pytest.fixture
def make_horse(db, admin):
    def _make(name: str = "Star", barn: str = "Oak Hill", status: str = HORSE_ACCEPTED) -> Horse:
        horse = Horse(name=name, barn_trainer=barn, status=status, created_by=admin.id)
        db.add(horse)
        db.commit()
        return horse

    return _make


@pytest.fixture
def make_shoeing(db, farrier):
    def _make(
        horse: Optional[Horse] = None,
        horse_name: Optional[str] = None,
        customer_name: Optional[str] = None,
        status: str = SHOEING_PENDING,
        total_cost: str = "100.00",
        service_date: Optional[date] = None,
        **extra,
    ) -> Shoeing:
        user_id = extra.pop("user_id", farrier.id)
        shoeing = Shoeing(
            horse_id=horse.id if horse else None,
            horse_name=horse.composite_name if horse else horse_name,
            date_of_service=service_date or date(2024, 5, 1),
            location="Oak Hill",
            base_service="Full Set",
            cost_of_service=total_cost,
            total_cost=total_cost,
            customer_name=customer_name,
            status=status,
            user_id=user_id,
            **extra,
        )
        db.add(shoeing)
        db.commit()
        return shoeing

    return _make


# =============================================================================
# Accounting
# =============================================================================


class FakeAccounting:
    """Stands in for QuickBooksClient in approval flows"""

    def __init__(self, customers=None):
        self.customers = customers if customers is not None else []
        self.customers_error: Optional[QuickBooksError] = None
        self.invoice_error: Optional[QuickBooksError] = None
        self.invoice_calls = []
        self.doc_number = "1042"

    async def get_customers(self):
        if self.customers_error:
            raise self.customers_error
        return self.customers

    async def create_invoice(self, shoeings, customer_id):
        self.invoice_calls.append(([s.id for s in shoeings], customer_id))
        if self.invoice_error:
            raise self.invoice_error
        return {
            "invoice": {"Id": "901", "DocNumber": self.doc_number},
            "items": [],
            "customers": self.customers,
        }


@pytest.fixture
def accounting() -> FakeAccounting:
    return FakeAccounting(
        customers=[
            {"id": "58", "display_name": "Acme Stables", "email": None},
            {"id": "61", "display_name": "Beta Farms", "email": None},
        ]
    )


# =============================================================================
# HTTP Client
# =============================================================================


class AuthState:
    def __init__(self, user: User):
        self.user = user


@pytest.fixture
def auth(admin) -> AuthState:
    """Current user for requests; tests switch it with auth.user = ..."""
    return AuthState(admin)


@pytest_asyncio.fixture
async def client(db, auth, accounting):
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_current_user] = lambda: auth.user
    app.dependency_overrides[get_quickbooks_client] = lambda: accounting
    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            yield ac
    finally:
        app.dependency_overrides.clear()
