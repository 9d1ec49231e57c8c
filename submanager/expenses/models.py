"""Database models for expenses and their categories."""

import uuid
from datetime import datetime

from sqlalchemy import Column, Date, DateTime, Float, Index, String, func

from submanager.core.database import Base


class Expense(Base):
    """Money spent running the business, netted against revenue."""

    __tablename__ = "expenses"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    date = Column(Date, nullable=False, index=True)
    # Category name as entered; not a foreign key
    category = Column(String(100), nullable=False)
    description = Column(String(255), nullable=False, default="")
    amount = Column(Float, nullable=False, default=0)
    created_at = Column(DateTime, default=datetime.now, nullable=False)


class ExpenseCategory(Base):
    __tablename__ = "expense_categories"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(100), nullable=False)
    created_at = Column(DateTime, default=datetime.now, nullable=False)

    __table_args__ = (Index("uq_expense_categories_name_lower", func.lower(name), unique=True),)
