"""Subscription status engine.

Pure date arithmetic over a subscription and its package. Every function takes
an optional ``today`` so callers (and tests) can pin the reference date; the
effective status is always recomputed and never read back from storage.

A month is approximated as 30 days. This is a deliberate simplification: an
expiry date is ``start + 30 * months`` days, not a calendar-month offset.
"""

from datetime import date, datetime, timedelta
from enum import Enum
from typing import Any, Mapping, Optional, Union

DAYS_PER_MONTH = 30

DateLike = Union[date, datetime, str]


class SubscriptionStatus(str, Enum):
    ACTIVE = "active"
    EXPIRED = "expired"
    SOLD = "sold"


class AccountType(str, Enum):
    """Offering kind shared by an account and the packages sold from it."""

    SUBSCRIPTION = "subscription"
    PURCHASE = "purchase"


PackageType = AccountType


def _field(obj: Any, name: str) -> Any:
    """Read a field from a mapping (snake or camel key) or an object."""
    if obj is None:
        return None
    if isinstance(obj, Mapping):
        if name in obj:
            return obj[name]
        head, *rest = name.split("_")
        return obj.get(head + "".join(part.title() for part in rest))
    return getattr(obj, name, None)


def _enum_value(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


def to_date(value: Optional[DateLike]) -> Optional[date]:
    """Coerce an ISO string, datetime or date to a date (time of day dropped)."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _today(today: Optional[DateLike]) -> date:
    return to_date(today) or date.today()


def compute_expiry_date(start_date: DateLike, duration_months: int) -> date:
    """Return start_date + duration_months * 30 days."""
    if duration_months < 0:
        raise ValueError("duration_months must be non-negative")
    return to_date(start_date) + timedelta(days=duration_months * DAYS_PER_MONTH)


def effective_status(subscription: Any, today: Optional[DateLike] = None) -> SubscriptionStatus:
    """Status as displayed: sold stays sold, otherwise expired once end_date has passed.

    end_date is inclusive, so a subscription is still active on its last day.
    """
    if _enum_value(_field(subscription, "status")) == SubscriptionStatus.SOLD.value:
        return SubscriptionStatus.SOLD
    end_date = to_date(_field(subscription, "end_date"))
    if end_date is not None and end_date < _today(today):
        return SubscriptionStatus.EXPIRED
    return SubscriptionStatus.ACTIVE


def remaining_days(
    subscription: Any, package: Any, today: Optional[DateLike] = None
) -> Optional[int]:
    """Whole days left on an active subscription to a subscription-type package.

    A subscription that has not started yet reports its full nominal length.
    """
    if package is None:
        return None
    if _enum_value(_field(package, "type")) != PackageType.SUBSCRIPTION.value:
        return None
    current = _today(today)
    if effective_status(subscription, current) != SubscriptionStatus.ACTIVE:
        return None

    end_date = to_date(_field(subscription, "end_date"))
    start_date = to_date(_field(subscription, "start_date"))
    if end_date is None:
        return None
    if start_date is not None and current < start_date:
        return (end_date - start_date).days
    return max(0, (end_date - current).days)


def initial_status(package_type: Union[PackageType, str]) -> SubscriptionStatus:
    """Persisted status for a new subscription: sold for one-time purchases."""
    if _enum_value(package_type) == PackageType.PURCHASE.value:
        return SubscriptionStatus.SOLD
    return SubscriptionStatus.ACTIVE
