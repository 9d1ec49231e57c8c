"""
Tests for revenue, expiry notifications and the dashboard summary.
All reference dates are pinned so the results do not depend on the clock.
"""

from datetime import date
from types import SimpleNamespace

import pytest

from submanager.insights.schemas import NotificationKind
from submanager.insights.service import InsightService, subscription_price

TIERS = [{"duration": 1, "price": 9.99}, {"duration": 3, "price": 27.0}]


class TestSubscriptionPrice:
    @pytest.mark.parametrize(
        "package_type,price,duration,expected",
        [
            ("purchase", 50, 0, 50.0),
            ("purchase", [{"duration": 0, "price": 12.5}], 0, 12.5),
            ("purchase", [], 0, 0.0),
            ("subscription", TIERS, 1, 9.99),
            ("subscription", TIERS, 3, 27.0),
            ("subscription", TIERS, 2, 0.0),
            ("subscription", None, 1, 0.0),
        ],
    )
    def test_price_lookup(self, package_type, price, duration, expected):
        package = SimpleNamespace(type=package_type, price=price)
        subscription = SimpleNamespace(duration=duration)
        assert subscription_price(subscription, package) == expected

    def test_missing_package_earns_nothing(self):
        assert subscription_price(SimpleNamespace(duration=1), None) == 0.0


@pytest.fixture
def catalog(make_account, make_package):
    """One subscription package with tiers and one fixed-price purchase package"""
    streaming = make_account("Streaming", "subscription", expiry_date=date(2024, 2, 1))
    gifts = make_account("Gifts", "purchase", expiry_date=date(2024, 1, 28))
    make_account("Later", "subscription", expiry_date=date(2024, 2, 10))
    return SimpleNamespace(
        streaming=streaming,
        gifts=gifts,
        monthly=make_package(streaming.id, "Streaming Plan", price=TIERS),
        gift_card=make_package(gifts.id, "Gift Card", price=50),
    )


class TestRevenue:
    def test_totals_by_start_month(self, db_session, catalog, make_customer):
        make_customer("A", "0501", package_id=catalog.monthly.id, start_date=date(2024, 1, 1), duration=1)
        make_customer("B", "0502", package_id=catalog.gift_card.id, start_date=date(2024, 1, 20), duration=0)
        make_customer("C", "0503", package_id=catalog.monthly.id, start_date=date(2024, 2, 3), duration=3)
        make_customer("D", "0504", package_id=catalog.monthly.id, start_date=date(2024, 3, 9), duration=2)

        report = InsightService(db_session).revenue()

        assert report.total == 86.99
        assert [(m.month, m.revenue) for m in report.monthly] == [
            ("2024-01", 59.99),
            ("2024-02", 27.0),
            ("2024-03", 0.0),
        ]

    def test_empty(self, db_session):
        report = InsightService(db_session).revenue()
        assert report.total == 0
        assert report.monthly == []
        assert report.net_profit == 0

    def test_expenses_and_trailing_month(self, db_session, catalog, make_customer, make_expense):
        make_customer("A", "0501", package_id=catalog.monthly.id, start_date=date(2024, 1, 1), duration=1)
        make_customer("B", "0502", package_id=catalog.gift_card.id, start_date=date(2024, 3, 10), duration=0)
        # Exactly 30 days back falls outside the trailing month
        make_customer("C", "0503", package_id=catalog.monthly.id, start_date=date(2024, 2, 14), duration=3)
        make_expense(20, day=date(2024, 1, 5))
        make_expense(7.5, "Ads", day=date(2024, 2, 15))
        make_expense(12.5, day=date(2024, 3, 1))

        report = InsightService(db_session, today=date(2024, 3, 15)).revenue()

        assert report.total == 86.99
        assert report.expenses == 40.0
        assert report.net_profit == 46.99
        assert report.last_month_revenue == 50.0
        assert report.last_month_expenses == 20.0
        assert report.last_month_profit == 30.0
        assert [(m.month, m.revenue, m.expenses) for m in report.monthly] == [
            ("2024-01", 9.99, 20.0),
            ("2024-02", 27.0, 7.5),
            ("2024-03", 50.0, 12.5),
        ]

    def test_expense_only_month_is_listed(self, db_session, catalog, make_customer, make_expense):
        make_customer("A", "0501", package_id=catalog.monthly.id, start_date=date(2024, 1, 1), duration=1)
        make_expense(5, day=date(2023, 12, 20))

        report = InsightService(db_session, today=date(2024, 6, 1)).revenue()

        assert [(m.month, m.revenue, m.expenses) for m in report.monthly] == [
            ("2023-12", 0.0, 5.0),
            ("2024-01", 9.99, 0.0),
        ]
        assert report.net_profit == 4.99
        assert report.last_month_profit == 0


class TestNotifications:
    TODAY = date(2024, 1, 28)

    def test_window_and_order(self, db_session, catalog, make_customer):
        customer = make_customer(
            "Sara", "0501234567", package_id=catalog.monthly.id, start_date=date(2024, 1, 1), duration=1
        )
        make_customer("Edge", "0507", package_id=catalog.monthly.id, start_date=date(2024, 1, 3), duration=1)
        make_customer("Gift", "0508", package_id=catalog.gift_card.id, start_date=date(2024, 1, 30), duration=0)

        result = InsightService(db_session, today=self.TODAY).notifications()

        assert [(n.type, n.name, n.days_remaining) for n in result] == [
            (NotificationKind.ACCOUNT, "Streaming", 4),
            (NotificationKind.PACKAGE, "Streaming Plan", 3),
            (NotificationKind.PACKAGE, "Streaming Plan", 5),
        ]
        first = result[1]
        assert first.customer_id == customer.id
        assert first.customer_phone == customer.phone
        assert first.expiry_date == date(2024, 1, 31)

    def test_custom_horizon(self, db_session, catalog, make_customer):
        make_customer("Sara", "0501", package_id=catalog.monthly.id, start_date=date(2024, 1, 1), duration=1)
        assert InsightService(db_session, today=self.TODAY).notifications(days=2) == []
        assert len(InsightService(db_session, today=self.TODAY).notifications(days=14)) == 3


class TestDashboard:
    def test_counts_use_effective_status(self, db_session, catalog, make_customer):
        make_customer("A", "0501", package_id=catalog.monthly.id, start_date=date(2024, 1, 1), duration=1)
        make_customer("B", "0502", package_id=catalog.gift_card.id, start_date=date(2024, 1, 5), duration=0)
        make_customer("C", "0503", package_id=catalog.monthly.id, start_date=date(2024, 2, 1), duration=1)

        summary = InsightService(db_session, today=date(2024, 2, 15)).dashboard()

        assert summary.accounts == 3
        assert summary.packages == 2
        assert summary.customers == 3
        assert summary.subscriptions == {"active": 1, "expired": 1, "sold": 1}
        assert summary.notifications == 0
