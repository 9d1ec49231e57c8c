"""Pydantic schemas for packages."""

from datetime import datetime
from typing import Annotated, List, Optional, Union

from pydantic import Field, field_validator

from submanager.accounts.schemas import Credential, PriceTier
from submanager.core.schemas import APIModel
from submanager.subscriptions.status import PackageType

Price = Union[Annotated[float, Field(ge=0)], List[PriceTier]]


def _strip_name(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    value = value.strip()
    if not value:
        raise ValueError("Name is required")
    return value


class PackageCreate(APIModel):
    """The package type is inherited from its account and cannot be sent."""

    id: Optional[str] = None
    account_id: str = Field(min_length=1)
    name: str = Field(min_length=1, max_length=255)
    details: List[Credential] = Field(default_factory=list)
    price: Optional[Price] = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        return _strip_name(value)


class PackageUpdate(APIModel):
    account_id: Optional[str] = None
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    details: Optional[List[Credential]] = None
    price: Optional[Price] = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: Optional[str]) -> Optional[str]:
        return _strip_name(value)


class PackageRead(APIModel):
    id: str
    account_id: str
    type: PackageType
    name: str
    details: List[Credential] = Field(default_factory=list)
    price: Optional[Price] = None
    subscribed_customers: int = 0
    created_at: Optional[datetime] = None
