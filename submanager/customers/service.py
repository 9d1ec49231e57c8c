"""Service layer for customers and their subscription history.

History changes always go through the counter manager so that every
package's subscribed_customers matches the entries that reference it.
"""

import logging
from datetime import date
from typing import Any, Dict, List, Optional

from submanager.activity.models import ActionType, ObjectType
from submanager.core.base_service import BaseService, unit_of_work
from submanager.core.exceptions import DuplicateEntity, NotFound, ValidationError
from submanager.counters.manager import CounterManager
from submanager.customers.dao import CustomerDAO, SubscriptionDAO
from submanager.customers.models import Customer, Subscription
from submanager.customers.phone import normalize_phone
from submanager.customers.schemas import (
    CustomerCreate,
    CustomerRead,
    CustomerUpdate,
    SubscriptionInput,
    SubscriptionRead,
)
from submanager.packages.dao import PackageDAO
from submanager.packages.models import Package
from submanager.subscriptions.status import (
    PackageType,
    compute_expiry_date,
    effective_status,
    initial_status,
    remaining_days,
)

logger = logging.getLogger(__name__)


class CustomerService(BaseService[Customer, CustomerCreate, CustomerUpdate, CustomerRead]):
    response_model = CustomerRead
    object_type = ObjectType.CUSTOMER
    object_label = "customer"
    search_fields = ["id", "name", "phone", "email"]
    composite_filters = ["package", "status"]

    def __init__(self, dao: CustomerDAO, actor=None, today: Optional[date] = None):
        super().__init__(dao, actor)
        self.subscription_dao = SubscriptionDAO(dao.db)
        self.package_dao = PackageDAO(dao.db)
        self.counters = CounterManager(dao.db)
        self.today = today

    # ===== READS =====

    def get_all(self, **filters) -> List[CustomerRead]:
        packages = self.package_dao.get_map()
        return [self._to_response(record, packages) for record in self.dao.get_all()]

    def _query_context(self) -> Dict[str, Any]:
        names = {package_id: package.name for package_id, package in self.package_dao.get_map().items()}
        return {"package_names": names, "today": self.today}

    def get_profile(self, id: str) -> CustomerRead:
        """Customer with full history; opening a profile is recorded as a view."""
        record = self._get_or_404(id)
        response = self._to_response(record)
        self._log(ActionType.VIEW, record.id, record.name, f"Viewed customer profile: {record.name}")
        return response

    def _subscription_response(
        self, subscription: Subscription, packages: Dict[str, Package]
    ) -> SubscriptionRead:
        package = packages.get(subscription.package_id)
        return SubscriptionRead(
            id=subscription.id,
            package_id=subscription.package_id,
            package_name=package.name if package else None,
            start_date=subscription.start_date,
            end_date=subscription.end_date,
            duration=subscription.duration,
            status=effective_status(subscription, self.today),
            remaining_days=remaining_days(subscription, package, self.today),
        )

    def _to_response(
        self, record: Customer, packages: Optional[Dict[str, Package]] = None
    ) -> CustomerRead:
        if packages is None:
            packages = self.package_dao.get_map()
        history = [self._subscription_response(sub, packages) for sub in record.subscriptions]
        latest = history[0] if history else None
        return CustomerRead(
            id=record.id,
            name=record.name,
            phone=record.phone,
            email=record.email,
            created_at=record.created_at,
            subscription_history=history,
            package_id=latest.package_id if latest else None,
            subscription_duration=latest.duration if latest else None,
            subscription_date=latest.start_date if latest else None,
            expiry_date=latest.end_date if latest else None,
        )

    # ===== VALIDATION =====

    def _check_contact(
        self,
        phone: Optional[str],
        country_code: Optional[str],
        email: Optional[str],
        exclude_id: Optional[str] = None,
    ) -> Optional[str]:
        """Normalize the phone and reject duplicates; returns the stored phone form."""
        normalized = None
        if phone is not None:
            normalized = normalize_phone(phone, country_code)
            if self.dao.phone_taken(normalized, exclude_id=exclude_id):
                raise DuplicateEntity("A customer with this phone number already exists", field="phone")
        if email and self.dao.email_taken(email, exclude_id=exclude_id):
            raise DuplicateEntity("A customer with this email already exists", field="email")
        return normalized

    def _resolve_packages(self, entries: List[SubscriptionInput]) -> Dict[str, Package]:
        packages: Dict[str, Package] = {}
        for entry in entries:
            package = self.package_dao.get_by_id(entry.package_id)
            if package is None:
                raise ValidationError(
                    "Package not found", fields={"packageId": f"Unknown package {entry.package_id}"}
                )
            packages[package.id] = package
        return packages

    @staticmethod
    def _entry_values(entry: SubscriptionInput, package: Package) -> Dict[str, Any]:
        """Column values for a history entry; status and a missing end date are derived."""
        if entry.end_date is not None:
            end_date = entry.end_date
        elif package.type == PackageType.PURCHASE.value:
            end_date = entry.start_date
        else:
            end_date = compute_expiry_date(entry.start_date, entry.duration)
        if end_date < entry.start_date:
            raise ValidationError(
                "End date cannot be before start date",
                fields={"endDate": "End date cannot be before start date"},
            )
        return {
            "package_id": package.id,
            "start_date": entry.start_date,
            "end_date": end_date,
            "duration": entry.duration,
            "status": initial_status(package.type).value,
        }

    @staticmethod
    def _check_unique_ids(entries: List[SubscriptionInput]) -> None:
        ids = [entry.id for entry in entries if entry.id]
        if len(ids) != len(set(ids)):
            raise ValidationError(
                "Duplicate subscription id in history",
                fields={"subscriptionHistory": "Duplicate subscription id"},
            )

    # ===== CUSTOMER CRUD =====

    def create(self, create_data: CustomerCreate) -> CustomerRead:
        """Insert the customer with its initial history in one transaction."""
        if create_data.id and self.dao.get_by_id(create_data.id) is not None:
            raise DuplicateEntity("A customer with this id already exists", field="id")
        phone = self._check_contact(create_data.phone, create_data.country_code, create_data.email)
        entries = create_data.initial_history()
        self._check_unique_ids(entries)
        packages = self._resolve_packages(entries)
        rows = [self._entry_values(entry, packages[entry.package_id]) for entry in entries]

        with unit_of_work(self.db):
            data = {"name": create_data.name, "phone": phone, "email": create_data.email}
            if create_data.id:
                data["id"] = create_data.id
            record = self.dao.add(**data)
            # Entries arrive newest first; the oldest gets the lowest position
            for position, (entry, values) in enumerate(zip(reversed(entries), reversed(rows))):
                if entry.id:
                    values["id"] = entry.id
                self.subscription_dao.add(customer_id=record.id, position=position, **values)
                self.counters.subscription_added(values["package_id"])

        self._record_activity(ActionType.CREATE, record, self._create_details(record))
        self.db.expire(record)
        return self._to_response(record)

    def update(self, id: str, update_data: CustomerUpdate) -> CustomerRead:
        """Patch contact fields; a sent history is diffed against the stored one."""
        record = self._get_or_404(id)
        fields = update_data.model_fields_set

        phone = None
        if update_data.phone is not None or "country_code" in fields:
            phone = self._check_contact(
                update_data.phone if update_data.phone is not None else record.phone,
                update_data.country_code,
                None,
                exclude_id=record.id,
            )
        if update_data.email:
            self._check_contact(None, None, update_data.email, exclude_id=record.id)

        entries = update_data.subscription_history
        packages: Dict[str, Package] = {}
        if entries is not None:
            self._check_unique_ids(entries)
            packages = self._resolve_packages(entries)

        with unit_of_work(self.db):
            data: Dict[str, Any] = {}
            if update_data.name is not None:
                data["name"] = update_data.name.strip()
            if phone is not None:
                data["phone"] = phone
            if "email" in fields:
                data["email"] = update_data.email
            self.dao.update(record, **data)

            if entries is not None:
                self._replace_history(record, entries, packages)

        self._record_activity(ActionType.UPDATE, record, self._update_details(record))
        self.db.expire(record)
        return self._to_response(record)

    def _replace_history(
        self, record: Customer, entries: List[SubscriptionInput], packages: Dict[str, Package]
    ) -> None:
        existing = {sub.id: sub for sub in record.subscriptions}
        old = [(sub.id, sub.package_id) for sub in record.subscriptions]
        position = self.subscription_dao.next_position(record.id)
        new = []

        # Entries arrive newest first; insert oldest first so positions keep that order
        for entry in reversed(entries):
            values = self._entry_values(entry, packages[entry.package_id])
            current = existing.get(entry.id) if entry.id else None
            if current is not None:
                self.subscription_dao.update(current, **values)
                new.append((current.id, values["package_id"]))
            else:
                if entry.id:
                    values["id"] = entry.id
                added = self.subscription_dao.add(customer_id=record.id, position=position, **values)
                position += 1
                new.append((added.id, values["package_id"]))

        kept = {sub_id for sub_id, _ in new}
        for sub_id, sub in existing.items():
            if sub_id not in kept:
                self.subscription_dao.delete(sub)

        self.counters.history_replaced(old, new)

    def _pre_delete(self, record: Customer) -> None:
        for subscription in record.subscriptions:
            self.counters.subscription_removed(subscription.package_id)

    # ===== SINGLE SUBSCRIPTION OPERATIONS =====

    def _subscription_label(self, record: Customer, package: Package) -> str:
        return f"{package.name} for {record.name}"

    def add_subscription(self, customer_id: str, entry: SubscriptionInput) -> CustomerRead:
        record = self._get_or_404(customer_id)
        package = self._resolve_packages([entry])[entry.package_id]
        values = self._entry_values(entry, package)
        if entry.id:
            if self.subscription_dao.get_by_id(entry.id) is not None:
                raise DuplicateEntity("A subscription with this id already exists", field="id")
            values["id"] = entry.id

        with unit_of_work(self.db):
            position = self.subscription_dao.next_position(record.id)
            added = self.subscription_dao.add(customer_id=record.id, position=position, **values)
            self.counters.subscription_added(package.id)

        self._log_subscription(
            ActionType.CREATE, added.id, f"Added subscription: {self._subscription_label(record, package)}"
        )
        self.db.expire(record)
        return self._to_response(record)

    def update_subscription(
        self, customer_id: str, subscription_id: str, entry: SubscriptionInput
    ) -> CustomerRead:
        record = self._get_or_404(customer_id)
        current = self.subscription_dao.get_for_customer(record.id, subscription_id)
        if current is None:
            raise NotFound("Subscription not found")
        package = self._resolve_packages([entry])[entry.package_id]
        values = self._entry_values(entry, package)

        with unit_of_work(self.db):
            self.counters.subscription_changed(current.package_id, package.id)
            self.subscription_dao.update(current, **values)

        self._log_subscription(
            ActionType.UPDATE, subscription_id, f"Updated subscription: {self._subscription_label(record, package)}"
        )
        self.db.expire(record)
        return self._to_response(record)

    def remove_subscription(self, customer_id: str, subscription_id: str) -> None:
        """Remove one history entry; a missing entry is not an error."""
        record = self._get_or_404(customer_id)
        current = self.subscription_dao.get_for_customer(record.id, subscription_id)
        if current is None:
            return
        package = self.package_dao.get_by_id(current.package_id)
        label = self._subscription_label(record, package) if package else record.name

        with unit_of_work(self.db):
            self.counters.subscription_removed(current.package_id)
            self.subscription_dao.delete(current)

        self._log_subscription(ActionType.DELETE, subscription_id, f"Removed subscription: {label}")

    def _log_subscription(self, action: ActionType, subscription_id: str, details: str) -> None:
        self.activity.record_for(
            self.actor, action, ObjectType.SUBSCRIPTION, subscription_id, None, details
        )
