"""Pydantic schemas for customers and subscription history entries."""

from datetime import date, datetime
from typing import List, Optional

from pydantic import EmailStr, Field, field_validator, model_validator

from submanager.core.schemas import APIModel
from submanager.subscriptions.status import SubscriptionStatus


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value.strip() if isinstance(value, str) else value


class SubscriptionInput(APIModel):
    """One history entry as sent by the client.

    ``status`` is never accepted; it is derived from the package type.
    ``end_date`` defaults to start + 30 * duration days (start for purchases).
    """

    id: Optional[str] = None
    package_id: str = Field(min_length=1)
    start_date: date
    duration: int = Field(default=0, ge=0)
    end_date: Optional[date] = None

    @model_validator(mode="after")
    def end_not_before_start(self):
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError("endDate cannot be before startDate")
        return self


class SubscriptionRead(APIModel):
    id: str
    package_id: str
    package_name: Optional[str] = None
    start_date: date
    end_date: date
    duration: int = 0
    status: SubscriptionStatus
    remaining_days: Optional[int] = None


class CustomerCreate(APIModel):
    id: Optional[str] = None
    name: str = Field(min_length=1, max_length=255)
    phone: str = Field(min_length=1)
    country_code: Optional[str] = None
    email: Optional[EmailStr] = None
    subscription_history: Optional[List[SubscriptionInput]] = None

    # Single initial selection, the shape of the original create form
    package_id: Optional[str] = None
    subscription_date: Optional[date] = None
    subscription_duration: int = Field(default=0, ge=0)
    expiry_date: Optional[date] = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Name is required")
        return value

    @field_validator("email", "package_id", "country_code", mode="before")
    @classmethod
    def blank_is_missing(cls, value):
        return _blank_to_none(value)

    def initial_history(self) -> List[SubscriptionInput]:
        if self.subscription_history is not None:
            return self.subscription_history
        if self.package_id:
            return [
                SubscriptionInput(
                    package_id=self.package_id,
                    start_date=self.subscription_date or date.today(),
                    duration=self.subscription_duration,
                    end_date=self.expiry_date,
                )
            ]
        return []


class CustomerUpdate(APIModel):
    """Partial patch; ``subscription_history`` replaces the whole history when sent."""

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    phone: Optional[str] = Field(default=None, min_length=1)
    country_code: Optional[str] = None
    email: Optional[EmailStr] = None
    subscription_history: Optional[List[SubscriptionInput]] = None

    @field_validator("email", "country_code", mode="before")
    @classmethod
    def blank_is_missing(cls, value):
        return _blank_to_none(value)


class CustomerRead(APIModel):
    id: str
    name: str
    phone: str
    email: Optional[str] = None
    created_at: Optional[datetime] = None
    subscription_history: List[SubscriptionRead] = Field(default_factory=list)

    # Mirrors of subscription_history[0]
    package_id: Optional[str] = None
    subscription_duration: Optional[int] = None
    subscription_date: Optional[date] = None
    expiry_date: Optional[date] = None
