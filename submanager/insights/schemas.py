"""Pydantic schemas for notifications, dashboard and revenue."""

from datetime import date
from enum import Enum
from typing import Dict, List, Optional

from pydantic import Field

from submanager.core.schemas import APIModel


class NotificationKind(str, Enum):
    ACCOUNT = "account"
    PACKAGE = "package"


class ExpiryNotification(APIModel):
    """An account or a customer's subscription about to expire."""

    id: str
    type: NotificationKind
    name: str
    days_remaining: int
    expiry_date: date
    customer_id: Optional[str] = None
    customer_name: Optional[str] = None
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None


class DashboardSummary(APIModel):
    accounts: int
    packages: int
    customers: int
    subscriptions: Dict[str, int] = Field(default_factory=dict)
    notifications: int = 0


class MonthlyRevenue(APIModel):
    month: str  # YYYY-MM
    revenue: float
    expenses: float = 0.0


class RevenueReport(APIModel):
    """Totals over all history plus the trailing month (last 30 days)."""

    total: float
    expenses: float = 0.0
    net_profit: float = 0.0
    last_month_revenue: float = 0.0
    last_month_expenses: float = 0.0
    last_month_profit: float = 0.0
    monthly: List[MonthlyRevenue] = Field(default_factory=list)
