"""
QuickBooks Integration Models
Per-user OAuth tokens for the accounting provider
"""
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


class QuickBooksToken(Base):
    """Store QuickBooks OAuth tokens and company information"""
    __tablename__ = "quickbooks_tokens"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(64), ForeignKey("profiles.id"), nullable=False, unique=True)

    # OAuth tokens (encrypted)
    access_token = Column(Text, nullable=False)
    refresh_token = Column(Text, nullable=False)
    expires_at = Column(DateTime, nullable=False)

    # QuickBooks company info
    realm_id = Column(String(255), nullable=False)  # QuickBooks company ID
    company_name = Column(String(255), nullable=True)

    # Cleared when a refresh fails; the user has to reconnect
    is_connected = Column(Boolean, default=True, nullable=False)

    environment = Column(String(50), default="sandbox")

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    user = relationship("User")
