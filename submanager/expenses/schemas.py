"""Pydantic schemas for expenses and expense categories."""

from datetime import date as Date, datetime
from typing import Optional

from pydantic import Field, field_validator

from submanager.core.schemas import APIModel


def _required_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    value = value.strip()
    if not value:
        raise ValueError("Field is required")
    return value


class ExpenseBase(APIModel):
    date: Date
    category: str = Field(min_length=1, max_length=100)
    description: str = Field(default="", max_length=255)
    amount: float = Field(ge=0)


class ExpenseCreate(ExpenseBase):
    id: Optional[str] = None

    @field_validator("category")
    @classmethod
    def strip_category(cls, value: Optional[str]) -> Optional[str]:
        return _required_text(value)


class ExpenseUpdate(APIModel):
    date: Optional[Date] = None
    category: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=255)
    amount: Optional[float] = Field(default=None, ge=0)

    @field_validator("category")
    @classmethod
    def strip_category(cls, value: Optional[str]) -> Optional[str]:
        return _required_text(value)


class ExpenseRead(ExpenseBase):
    id: str
    created_at: Optional[datetime] = None


class ExpenseCategoryCreate(APIModel):
    id: Optional[str] = None
    name: str = Field(min_length=1, max_length=100)

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: Optional[str]) -> Optional[str]:
        return _required_text(value)


class ExpenseCategoryUpdate(APIModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: Optional[str]) -> Optional[str]:
        return _required_text(value)


class ExpenseCategoryRead(APIModel):
    id: str
    name: str
    created_at: Optional[datetime] = None
