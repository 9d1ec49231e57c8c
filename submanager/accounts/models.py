"""Database models for accounts."""

import uuid
from datetime import datetime

from sqlalchemy import JSON, Column, Date, DateTime, Index, Integer, String, func
from sqlalchemy.orm import relationship

from submanager.core.database import Base


class Account(Base):
    """A credential-holding account that packages are sold from."""

    __tablename__ = "accounts"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    type = Column(String(20), nullable=False)
    name = Column(String(255), nullable=False)
    details = Column(JSON, nullable=False, default=list)
    # Expiry for subscription accounts; the purchase date for purchase accounts
    subscription_date = Column(Date, nullable=True)
    expiry_date = Column(Date, nullable=True)
    price = Column(JSON, nullable=True)
    linked_packages = Column(Integer, nullable=False, default=0, server_default="0")
    created_at = Column(DateTime, default=datetime.now, nullable=False)

    packages = relationship("Package", back_populates="account", passive_deletes=True)

    __table_args__ = (Index("uq_accounts_name_lower", func.lower(name), unique=True),)
