from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base

# Service record lifecycle
SHOEING_PENDING = "pending"
SHOEING_COMPLETED = "completed"
SHOEING_CANCELLED = "cancelled"
SHOEING_REJECTED = "rejected"

HORSE_PENDING = "pending"
HORSE_ACCEPTED = "accepted"

ROLE_ADMIN = "admin"
ROLE_USER = "user"


class User(Base):
    """Profile row linked to an identity-provider account"""

    __tablename__ = "profiles"

    id = Column(String(64), primary_key=True)  # Identity provider subject
    email = Column(String(255), unique=True, index=True, nullable=True)
    full_name = Column(String(255), nullable=True)
    role = Column(String(20), default=ROLE_USER, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


class Customer(Base):
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, index=True)
    # Accounting display name; legacy rows join on it by string
    display_name = Column(String(255), nullable=False, index=True)
    company_name = Column(String(255), nullable=True)
    barn_trainer = Column(String(255), nullable=True)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    horse_links = relationship(
        "CustomerHorse", back_populates="customer", cascade="all, delete-orphan"
    )


class Horse(Base):
    __tablename__ = "horses"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, index=True)
    barn_trainer = Column(String(255), nullable=True)
    owner_email = Column(String(255), nullable=True)
    owner_phone = Column(String(50), nullable=True)
    status = Column(String(20), default=HORSE_PENDING, nullable=False)
    alert = Column(Boolean, default=False, nullable=False)
    alert_text = Column(Text, nullable=True)
    history = Column(Text, nullable=True)
    notes_history = Column(Text, nullable=True)
    created_by = Column(String(64), ForeignKey("profiles.id"), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    customer_links = relationship(
        "CustomerHorse", back_populates="horse", cascade="all, delete-orphan"
    )

    @property
    def composite_name(self) -> str:
        """Legacy "Name - [Barn]" label, used for display and old rows"""
        return f"{self.name} - [{self.barn_trainer or ''}]"


class CustomerHorse(Base):
    """Authoritative many-to-many link between customers and horses"""

    __tablename__ = "customer_horses"
    __table_args__ = (UniqueConstraint("customer_id", "horse_id", name="uq_customer_horse"),)

    id = Column(Integer, primary_key=True, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id", ondelete="CASCADE"), nullable=False)
    horse_id = Column(Integer, ForeignKey("horses.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    customer = relationship("Customer", back_populates="horse_links")
    horse = relationship("Horse", back_populates="customer_links")


class Shoeing(Base):
    """A farrier service record"""

    __tablename__ = "shoeings"

    id = Column(Integer, primary_key=True, index=True)
    horse_id = Column(Integer, ForeignKey("horses.id", ondelete="SET NULL"), nullable=True, index=True)
    horse_name = Column(String(512), nullable=True, index=True)  # "Name - [Barn]"
    date_of_service = Column(Date, nullable=True, index=True)
    location = Column(String(255), nullable=True)
    base_service = Column(String(255), nullable=True)
    front_add_ons = Column(Text, nullable=True)  # comma-separated
    hind_add_ons = Column(Text, nullable=True)
    # Costs are stored as plain numeric strings, without a currency symbol
    cost_of_service = Column(String(32), nullable=True)
    cost_of_front_add_ons = Column(String(32), nullable=True)
    cost_of_hind_add_ons = Column(String(32), nullable=True)
    total_cost = Column(String(32), nullable=True)
    description = Column(Text, nullable=True)
    other_custom_services = Column(Text, nullable=True)
    shoe_notes = Column(Text, nullable=True)
    status = Column(String(20), default=SHOEING_PENDING, nullable=False, index=True)
    invoice_number = Column(String(64), nullable=True)
    invoice_sent_at = Column(DateTime, nullable=True)
    is_new_horse = Column(Boolean, default=False, nullable=False)
    customer_name = Column(String(255), nullable=True)  # Accounting display name
    user_id = Column(String(64), ForeignKey("profiles.id"), nullable=False)  # Submitter
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    horse = relationship("Horse")
    submitter = relationship("User")


class Note(Base):
    __tablename__ = "notes"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(64), ForeignKey("profiles.id"), nullable=False)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    author = relationship("User")
    mentions = relationship("NoteMention", back_populates="note", cascade="all, delete-orphan")


class NoteMention(Base):
    __tablename__ = "note_mentions"

    id = Column(Integer, primary_key=True, index=True)
    note_id = Column(Integer, ForeignKey("notes.id", ondelete="CASCADE"), nullable=False)
    entity_type = Column(String(20), nullable=False)  # user, horse
    entity_id = Column(String(64), nullable=False, index=True)
    display_name = Column(String(255), nullable=False)

    note = relationship("Note", back_populates="mentions")


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    recipient_id = Column(String(64), ForeignKey("profiles.id"), nullable=False, index=True)
    creator_id = Column(String(64), ForeignKey("profiles.id"), nullable=True)
    message = Column(Text, nullable=False)  # may contain <strong> markup
    type = Column(String(50), nullable=False)
    related_id = Column(String(64), nullable=True)
    read = Column(Boolean, default=False, nullable=False)
    is_deleted = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    creator = relationship("User", foreign_keys=[creator_id])


class Location(Base):
    __tablename__ = "locations"

    id = Column(Integer, primary_key=True, index=True)
    service_location = Column(String(255), unique=True, nullable=False)
    location_color = Column(String(7), nullable=False, default="#000000")


class Price(Base):
    __tablename__ = "prices"
    __table_args__ = (UniqueConstraint("product_name", "location", name="uq_price_product_location"),)

    id = Column(Integer, primary_key=True, index=True)
    product_name = Column(String(255), nullable=False, index=True)
    product_type = Column(String(50), nullable=False)  # Base Service, Add-on
    location = Column(String(255), nullable=False)
    amount = Column(Numeric(10, 2), nullable=False, default=0)
