"""Keeps the denormalized relationship counters in step with the rows they count.

Account.linked_packages counts packages per account and
Package.subscribed_customers counts subscriptions per package. Every
adjustment is a single UPDATE evaluated by the store (``x = x + 1``), never a
read-modify-write in Python, so concurrent writers cannot lose updates.
Decrements floor at zero. The caller's unit of work commits the adjustment
together with the write that triggered it.
"""

import logging
from typing import Iterable, Optional, Tuple

from sqlalchemy import case, func, select, update
from sqlalchemy.orm import Session

from submanager.accounts.models import Account
from submanager.customers.models import Subscription
from submanager.packages.models import Package

logger = logging.getLogger(__name__)

# (subscription id, package id)
HistoryEntry = Tuple[str, str]


class CounterManager:
    def __init__(self, db: Session):
        self.db = db

    def _adjust(self, model, column, row_id: Optional[str], delta: int) -> None:
        if not row_id or delta == 0:
            return
        if delta > 0:
            value = column + delta
        else:
            value = case((column + delta < 0, 0), else_=column + delta)
        self.db.execute(
            update(model)
            .where(model.id == row_id)
            .values({column: value})
            .execution_options(synchronize_session="fetch")
        )

    # ===== ACCOUNT.LINKED_PACKAGES =====

    def package_created(self, account_id: str) -> None:
        self._adjust(Account, Account.linked_packages, account_id, 1)

    def package_deleted(self, account_id: str) -> None:
        self._adjust(Account, Account.linked_packages, account_id, -1)

    def package_moved(self, old_account_id: str, new_account_id: str) -> None:
        if old_account_id == new_account_id:
            return
        self.package_deleted(old_account_id)
        self.package_created(new_account_id)

    # ===== PACKAGE.SUBSCRIBED_CUSTOMERS =====

    def subscription_added(self, package_id: str) -> None:
        self._adjust(Package, Package.subscribed_customers, package_id, 1)

    def subscription_removed(self, package_id: str) -> None:
        self._adjust(Package, Package.subscribed_customers, package_id, -1)

    def subscription_changed(self, old_package_id: str, new_package_id: str) -> None:
        """An in-place edit only moves the count when the package changes."""
        if old_package_id == new_package_id:
            return
        self.subscription_removed(old_package_id)
        self.subscription_added(new_package_id)

    def history_replaced(
        self, old: Iterable[HistoryEntry], new: Iterable[HistoryEntry]
    ) -> None:
        """Apply the counter deltas of replacing one history with another.

        Entries are matched by subscription id: new ids count as added,
        vanished ids as removed, and surviving ids only matter when their
        package changed.
        """
        old_by_id = dict(old)
        new_by_id = dict(new)

        for sub_id, package_id in new_by_id.items():
            if sub_id not in old_by_id:
                self.subscription_added(package_id)
            else:
                self.subscription_changed(old_by_id[sub_id], package_id)

        for sub_id, package_id in old_by_id.items():
            if sub_id not in new_by_id:
                self.subscription_removed(package_id)

    # ===== REPAIR =====

    def reconcile(self) -> int:
        """Recompute every counter from the live rows; returns rows corrected."""
        corrected = 0

        package_counts = dict(
            self.db.execute(
                select(Package.account_id, func.count(Package.id)).group_by(Package.account_id)
            ).all()
        )
        for account in self.db.execute(select(Account)).scalars():
            expected = package_counts.get(account.id, 0)
            if account.linked_packages != expected:
                logger.warning(
                    "Account %s linked_packages %s != %s, correcting",
                    account.id, account.linked_packages, expected,
                )
                account.linked_packages = expected
                corrected += 1

        subscription_counts = dict(
            self.db.execute(
                select(Subscription.package_id, func.count(Subscription.id)).group_by(
                    Subscription.package_id
                )
            ).all()
        )
        for package in self.db.execute(select(Package)).scalars():
            expected = subscription_counts.get(package.id, 0)
            if package.subscribed_customers != expected:
                logger.warning(
                    "Package %s subscribed_customers %s != %s, correcting",
                    package.id, package.subscribed_customers, expected,
                )
                package.subscribed_customers = expected
                corrected += 1

        self.db.flush()
        return corrected
