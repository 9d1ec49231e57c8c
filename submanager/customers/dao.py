"""Data Access Objects for customers and subscriptions."""

from datetime import date
from typing import Iterable, List, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session, selectinload

from submanager.core.base_dao import BaseDAO
from submanager.customers.models import Customer, Subscription


class CustomerDAO(BaseDAO[Customer]):
    def __init__(self, db_session: Session):
        super().__init__(Customer, db_session)

    def get_all(self, **filters) -> List[Customer]:
        """Newest first, with histories loaded in one extra query."""
        query = (
            select(Customer)
            .options(selectinload(Customer.subscriptions))
            .order_by(Customer.created_at.desc())
        )
        return list(self.db.execute(query).scalars().all())

    def phone_taken(self, phone: str, exclude_id: Optional[str] = None) -> bool:
        query = select(func.count()).select_from(Customer).where(Customer.phone == phone)
        if exclude_id is not None:
            query = query.where(Customer.id != exclude_id)
        return self.db.execute(query).scalar_one() > 0

    def email_taken(self, email: str, exclude_id: Optional[str] = None) -> bool:
        return self.exists_case_insensitive("email", email, exclude_id=exclude_id)


class SubscriptionDAO(BaseDAO[Subscription]):
    def __init__(self, db_session: Session):
        super().__init__(Subscription, db_session)

    def get_for_customer(self, customer_id: str, subscription_id: str) -> Optional[Subscription]:
        query = select(Subscription).where(
            Subscription.customer_id == customer_id, Subscription.id == subscription_id
        )
        return self.db.execute(query).scalars().first()

    def next_position(self, customer_id: str) -> int:
        query = select(func.max(Subscription.position)).where(
            Subscription.customer_id == customer_id
        )
        current = self.db.execute(query).scalar_one()
        return 0 if current is None else current + 1

    def delete_by_packages(self, package_ids: Iterable[str]) -> int:
        """Remove every history entry pointing at the given packages."""
        package_ids = list(package_ids)
        if not package_ids:
            return 0
        result = self.db.execute(
            delete(Subscription)
            .where(Subscription.package_id.in_(package_ids))
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount

    def ending_between(self, after: date, until: date, status: str) -> List[Subscription]:
        """Subscriptions with persisted status whose end_date is in (after, until]."""
        query = (
            select(Subscription)
            .options(selectinload(Subscription.customer))
            .where(
                Subscription.status == status,
                Subscription.end_date > after,
                Subscription.end_date <= until,
            )
            .order_by(Subscription.end_date)
        )
        return list(self.db.execute(query).scalars().all())
