"""Read-only aggregates: expiry notifications, dashboard counts and revenue."""

from datetime import date, timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from submanager.accounts.dao import AccountDAO
from submanager.accounts.models import Account
from submanager.core.config import settings
from submanager.customers.dao import CustomerDAO, SubscriptionDAO
from submanager.customers.models import Subscription
from submanager.expenses.dao import ExpenseDAO
from submanager.insights.schemas import (
    DashboardSummary,
    ExpiryNotification,
    MonthlyRevenue,
    NotificationKind,
    RevenueReport,
)
from submanager.packages.dao import PackageDAO
from submanager.packages.models import Package
from submanager.subscriptions.status import (
    DAYS_PER_MONTH,
    PackageType,
    SubscriptionStatus,
    effective_status,
)


def subscription_price(subscription: Any, package: Optional[Package]) -> float:
    """What one history entry earned.

    Purchase packages count their price (or first tier). Subscription
    packages count the tier whose duration matches, else nothing.
    """
    if package is None or package.price is None:
        return 0.0
    price = package.price
    if package.type == PackageType.PURCHASE.value:
        if isinstance(price, list):
            return float(price[0].get("price", 0)) if price else 0.0
        return float(price)
    if isinstance(price, list):
        for tier in price:
            if tier.get("duration") == subscription.duration:
                return float(tier.get("price", 0))
        return 0.0
    return float(price)


def _empty_month() -> Dict[str, float]:
    return {"revenue": 0.0, "expenses": 0.0}


class InsightService:
    def __init__(self, db: Session, today: Optional[date] = None):
        self.db = db
        self.today = today
        self.account_dao = AccountDAO(db)
        self.package_dao = PackageDAO(db)
        self.customer_dao = CustomerDAO(db)
        self.subscription_dao = SubscriptionDAO(db)
        self.expense_dao = ExpenseDAO(db)

    def _today(self) -> date:
        return self.today or date.today()

    def notifications(self, days: Optional[int] = None) -> List[ExpiryNotification]:
        """Accounts and active subscriptions expiring in (today, today + days]."""
        today = self._today()
        horizon = today + timedelta(days=settings.EXPIRY_WARNING_DAYS if days is None else days)
        result: List[ExpiryNotification] = []

        accounts = self.db.execute(
            select(Account)
            .where(Account.expiry_date > today, Account.expiry_date <= horizon)
            .order_by(Account.expiry_date)
        ).scalars()
        for account in accounts:
            result.append(
                ExpiryNotification(
                    id=account.id,
                    type=NotificationKind.ACCOUNT,
                    name=account.name,
                    days_remaining=(account.expiry_date - today).days,
                    expiry_date=account.expiry_date,
                )
            )

        packages = self.package_dao.get_map()
        for subscription in self.subscription_dao.ending_between(
            today, horizon, SubscriptionStatus.ACTIVE.value
        ):
            package = packages.get(subscription.package_id)
            customer = subscription.customer
            result.append(
                ExpiryNotification(
                    id=subscription.id,
                    type=NotificationKind.PACKAGE,
                    name=package.name if package else "Unknown Package",
                    days_remaining=(subscription.end_date - today).days,
                    expiry_date=subscription.end_date,
                    customer_id=customer.id,
                    customer_name=customer.name,
                    customer_email=customer.email,
                    customer_phone=customer.phone,
                )
            )
        return result

    def dashboard(self) -> DashboardSummary:
        today = self._today()
        by_status: Dict[str, int] = {status.value: 0 for status in SubscriptionStatus}
        for subscription in self.db.execute(select(Subscription)).scalars():
            by_status[effective_status(subscription, today).value] += 1

        return DashboardSummary(
            accounts=self.account_dao.count(),
            packages=self.package_dao.count(),
            customers=self.customer_dao.count(),
            subscriptions=by_status,
            notifications=len(self.notifications()),
        )

    def revenue(self) -> RevenueReport:
        """Revenue, expenses and profit, overall and for the trailing month.

        Months are keyed YYYY-MM by subscription start and expense date. The
        trailing month covers dates after today minus 30 days.
        """
        packages = self.package_dao.get_map()
        since = self._today() - timedelta(days=DAYS_PER_MONTH)
        months: Dict[str, Dict[str, float]] = {}
        total = last_month_revenue = 0.0

        subscriptions = self.db.execute(
            select(Subscription).order_by(Subscription.start_date)
        ).scalars()
        for subscription in subscriptions:
            price = subscription_price(subscription, packages.get(subscription.package_id))
            bucket = months.setdefault(subscription.start_date.strftime("%Y-%m"), _empty_month())
            bucket["revenue"] += price
            total += price
            if subscription.start_date > since:
                last_month_revenue += price

        spent = last_month_expenses = 0.0
        for expense in self.expense_dao.get_all():
            bucket = months.setdefault(expense.date.strftime("%Y-%m"), _empty_month())
            bucket["expenses"] += expense.amount
            spent += expense.amount
            if expense.date > since:
                last_month_expenses += expense.amount

        return RevenueReport(
            total=round(total, 2),
            expenses=round(spent, 2),
            net_profit=round(total - spent, 2),
            last_month_revenue=round(last_month_revenue, 2),
            last_month_expenses=round(last_month_expenses, 2),
            last_month_profit=round(last_month_revenue - last_month_expenses, 2),
            monthly=[
                MonthlyRevenue(
                    month=month,
                    revenue=round(values["revenue"], 2),
                    expenses=round(values["expenses"], 2),
                )
                for month, values in sorted(months.items())
            ],
        )
