"""Database models for packages."""

import uuid
from datetime import datetime

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Index, Integer, String, func
from sqlalchemy.orm import relationship

from submanager.core.database import Base


class Package(Base):
    """A sellable offering derived from an account."""

    __tablename__ = "packages"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    account_id = Column(
        String(36), ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    type = Column(String(20), nullable=False)
    name = Column(String(255), nullable=False)
    details = Column(JSON, nullable=False, default=list)
    # A number for purchase packages, a list of {duration, price} tiers otherwise
    price = Column(JSON, nullable=True)
    subscribed_customers = Column(Integer, nullable=False, default=0, server_default="0")
    created_at = Column(DateTime, default=datetime.now, nullable=False)

    account = relationship("Account", back_populates="packages")

    __table_args__ = (Index("uq_packages_name_lower", func.lower(name), unique=True),)
