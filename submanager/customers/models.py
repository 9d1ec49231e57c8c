"""Database models for customers and their subscription history."""

import uuid
from datetime import datetime

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from submanager.core.database import Base


class Customer(Base):
    __tablename__ = "customers"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(255), nullable=False)
    phone = Column(String(32), nullable=False, unique=True)
    # NULL when absent so several customers may have no email
    email = Column(String(255), nullable=True, unique=True)
    created_at = Column(DateTime, default=datetime.now, nullable=False)

    subscriptions = relationship(
        "Subscription",
        back_populates="customer",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by=lambda: [Subscription.start_date.desc(), Subscription.position.desc()],
    )


class Subscription(Base):
    """One entry of a customer's subscription history."""

    __tablename__ = "subscriptions"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    customer_id = Column(
        String(36), ForeignKey("customers.id", ondelete="CASCADE"), nullable=False, index=True
    )
    package_id = Column(
        String(36), ForeignKey("packages.id", ondelete="CASCADE"), nullable=False, index=True
    )
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    duration = Column(Integer, nullable=False, default=0)
    # Persisted default only; the displayed status is recomputed from dates
    status = Column(String(20), nullable=False)
    # Insertion order, breaks ties between entries with the same start date
    position = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=datetime.now, nullable=False)

    customer = relationship("Customer", back_populates="subscriptions")
