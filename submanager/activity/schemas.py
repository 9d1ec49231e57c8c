"""Pydantic schemas for the activity log."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from submanager.activity.models import ActionType, ObjectType
from submanager.core.schemas import APIModel


class Actor(BaseModel):
    """Snapshot of the user performing an operation."""

    id: str
    name: str
    role: str

    model_config = ConfigDict(from_attributes=True, frozen=True)


class ActivityLogRead(APIModel):
    id: str
    user_id: str
    user_name: str
    user_role: str
    action_type: ActionType
    object_type: ObjectType
    object_id: Optional[str] = None
    object_name: Optional[str] = None
    details: Optional[str] = None
    timestamp: datetime
