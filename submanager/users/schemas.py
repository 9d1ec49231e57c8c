"""Pydantic schemas for users. Passwords are accepted, never returned."""

from datetime import datetime
from typing import Optional

from pydantic import EmailStr, Field, field_validator

from submanager.core.schemas import APIModel
from submanager.users.models import UserRole

MIN_PASSWORD_LENGTH = 6


class UserCreate(APIModel):
    name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(min_length=MIN_PASSWORD_LENGTH)
    role: UserRole = UserRole.USER

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Name is required")
        return value


class UserUpdate(APIModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(default=None, min_length=MIN_PASSWORD_LENGTH)
    role: Optional[UserRole] = None


class UserRead(APIModel):
    id: str
    name: str
    email: str
    role: UserRole
    created_at: Optional[datetime] = None
    last_login: Optional[datetime] = None
