"""Pydantic schemas for accounts, and the credential union shared with packages."""

from datetime import date, datetime
from typing import Annotated, Any, List, Literal, Optional, Union

from pydantic import Discriminator, Field, Tag, field_validator, model_validator

from submanager.core.schemas import APIModel
from submanager.subscriptions.status import AccountType


class SubscriptionCredential(APIModel):
    """Login for a subscription-type account or package."""

    kind: Literal["subscription"] = "subscription"
    username: str = ""
    password: str = ""
    note: str = ""


class PurchaseCredential(APIModel):
    """Delivered item for a purchase-type account or package (code, key, link...)."""

    kind: Literal["purchase"] = "purchase"
    type: str = ""
    info: str = ""
    note: str = ""


def credential_kind(value: Any) -> Optional[str]:
    """Tag of a credential; rows stored without one are told apart by their keys."""
    if isinstance(value, dict):
        if value.get("kind"):
            return value["kind"]
        return "purchase" if "info" in value else "subscription"
    return getattr(value, "kind", None)


Credential = Annotated[
    Union[
        Annotated[SubscriptionCredential, Tag("subscription")],
        Annotated[PurchaseCredential, Tag("purchase")],
    ],
    Discriminator(credential_kind),
]


class PriceTier(APIModel):
    duration: int = Field(ge=0, description="Months")
    price: float = Field(ge=0)


def check_details_kind(details: Optional[List[Any]], owner_type: Optional[AccountType]) -> None:
    """Raise ValueError when a credential does not match its owner's type."""
    if not details or owner_type is None:
        return
    expected = AccountType(owner_type).value
    for credential in details:
        if credential.kind != expected:
            raise ValueError(f"{expected} records only accept {expected} credentials")


def _strip_name(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    value = value.strip()
    if not value:
        raise ValueError("Name is required")
    return value


class AccountBase(APIModel):
    type: AccountType
    name: str = Field(min_length=1, max_length=255)
    details: List[Credential] = Field(default_factory=list)
    subscription_date: Optional[date] = None
    expiry_date: Optional[date] = None
    price: Optional[float] = Field(default=None, ge=0)


class AccountCreate(AccountBase):
    id: Optional[str] = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: Optional[str]) -> Optional[str]:
        return _strip_name(value)

    @model_validator(mode="after")
    def details_match_type(self):
        check_details_kind(self.details, self.type)
        return self


class AccountUpdate(APIModel):
    type: Optional[AccountType] = None
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    details: Optional[List[Credential]] = None
    subscription_date: Optional[date] = None
    expiry_date: Optional[date] = None
    price: Optional[float] = Field(default=None, ge=0)

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: Optional[str]) -> Optional[str]:
        return _strip_name(value)


class AccountRead(AccountBase):
    id: str
    linked_packages: int = 0
    created_at: Optional[datetime] = None
