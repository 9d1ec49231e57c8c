"""Database models for the activity log."""

import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import Column, DateTime, String, Text

from submanager.core.database import Base


class ActionType(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    LOGIN = "login"
    LOGOUT = "logout"
    VIEW = "view"


class ObjectType(str, Enum):
    ACCOUNT = "account"
    PACKAGE = "package"
    CUSTOMER = "customer"
    SUBSCRIPTION = "subscription"
    USER = "user"
    SETTINGS = "settings"
    EXPENSE = "expense"
    EXPENSE_CATEGORY = "expense_category"


class ActivityLog(Base):
    """Append-only audit row. The user columns are a snapshot taken at write time."""

    __tablename__ = "activity_logs"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), nullable=False, index=True)
    user_name = Column(String(255), nullable=False)
    user_role = Column(String(20), nullable=False)
    action_type = Column(String(20), nullable=False, index=True)
    object_type = Column(String(20), nullable=False, index=True)
    object_id = Column(String(36), nullable=True)
    object_name = Column(String(255), nullable=True)
    details = Column(Text, nullable=True)
    timestamp = Column(DateTime, default=datetime.now, nullable=False, index=True)
