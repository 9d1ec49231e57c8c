"""Pydantic schemas for authentication."""

from pydantic import Field

from submanager.core.schemas import APIModel
from submanager.users.schemas import UserRead


class LoginRequest(APIModel):
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)


class LoginResponse(APIModel):
    token: str
    user: UserRead
