"""
Service-level tests: repository contracts, cascades, counters and audit.
"""

from datetime import date
from unittest.mock import patch

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from submanager.accounts.dao import AccountDAO
from submanager.accounts.schemas import AccountCreate, AccountUpdate
from submanager.activity.models import ActivityLog
from submanager.core.exceptions import DuplicateEntity, NotFound, StorageError, ValidationError
from submanager.customers.models import Subscription
from submanager.customers.schemas import CustomerCreate, CustomerUpdate, SubscriptionInput
from submanager.packages.dao import PackageDAO
from submanager.packages.schemas import PackageCreate, PackageUpdate
from submanager.users.dao import UserDAO
from submanager.users.schemas import UserCreate, UserUpdate
from submanager.users.service import UserService


def _activity(db_session):
    return list(db_session.execute(select(ActivityLog).order_by(ActivityLog.timestamp)).scalars())


class TestAccountService:
    def test_create_assigns_id_and_zero_counter(self, make_account):
        account = make_account()
        assert account.id
        assert account.linked_packages == 0

    def test_duplicate_name_ignores_case(self, make_account):
        make_account("Foo")
        with pytest.raises(DuplicateEntity) as exc_info:
            make_account("foo")
        assert exc_info.value.field == "name"

    def test_client_counter_is_ignored(self, account_service):
        account = account_service.create(
            AccountCreate.model_validate({"name": "X", "type": "purchase", "linkedPackages": 42})
        )
        assert account.linked_packages == 0

    def test_credentials_must_match_type(self):
        with pytest.raises(ValueError):
            AccountCreate.model_validate(
                {"name": "X", "type": "purchase", "details": [{"username": "u", "password": "p"}]}
            )

    def test_update_missing_raises_not_found(self, account_service):
        with pytest.raises(NotFound):
            account_service.update("missing", AccountUpdate(name="Y"))

    def test_delete_missing_is_noop(self, account_service):
        account_service.delete("missing")

    def test_type_change_blocked_with_packages(self, account_service, subscription_account, subscription_package):
        with pytest.raises(ValidationError):
            account_service.update(subscription_account.id, AccountUpdate(type="purchase"))

    def test_delete_cascades_packages_and_subscriptions(
        self, db_session, account_service, make_account, make_package, make_customer
    ):
        account = make_account("Main")
        p1 = make_package(account.id, "P1")
        p2 = make_package(account.id, "P2")
        other = make_package(make_account("Other").id, "P3")
        customer = make_customer(package_id=p1.id, start_date=date(2024, 1, 1))

        account_service.delete(account.id)

        remaining = {package.id for package in PackageDAO(db_session).get_all()}
        assert remaining == {other.id}
        assert db_session.execute(select(Subscription)).scalars().all() == []
        assert AccountDAO(db_session).get_by_id(account.id) is None
        assert customer.id  # the customer itself survives


class TestPackageService:
    def test_create_increments_account(self, db_session, account_service, subscription_account, make_package):
        make_package(subscription_account.id, "A")
        make_package(subscription_account.id, "B")
        assert account_service.get_by_id(subscription_account.id).linked_packages == 2

    def test_delete_restores_counter(self, account_service, package_service, subscription_account, make_package):
        package = make_package(subscription_account.id)
        package_service.delete(package.id)
        assert account_service.get_by_id(subscription_account.id).linked_packages == 0

    def test_type_is_inherited(self, make_account, make_package):
        account = make_account("Gift Cards", "purchase")
        package = make_package(account.id, "Gift 50", price=50)
        assert package.type.value == "purchase"

    def test_unknown_account_rejected(self, package_service):
        with pytest.raises(ValidationError):
            package_service.create(PackageCreate(account_id="nope", name="P"))

    def test_subscription_package_needs_tiers(self, package_service, subscription_account):
        with pytest.raises(ValidationError):
            package_service.create(PackageCreate(account_id=subscription_account.id, name="P", price=10))

    @pytest.mark.parametrize("price", [None, []])
    def test_subscription_package_without_price_rejected(self, package_service, subscription_account, price):
        with pytest.raises(ValidationError) as exc_info:
            package_service.create(PackageCreate(account_id=subscription_account.id, name="P", price=price))
        assert "price" in exc_info.value.fields

    def test_negative_flat_price_rejected(self, make_account):
        account = make_account("Codes", "purchase")
        with pytest.raises(ValueError):
            PackageCreate(account_id=account.id, name="Code", price=-5)

    def test_move_to_subscription_account_needs_tiers(self, package_service, make_account, make_package):
        gifts = make_account("Gifts", "purchase")
        streaming = make_account("Streaming", "subscription")
        package = make_package(gifts.id, "Gift", price=20)

        with pytest.raises(ValidationError):
            package_service.update(package.id, PackageUpdate(account_id=streaming.id))

        moved = package_service.update(
            package.id, PackageUpdate(account_id=streaming.id, price=[{"duration": 1, "price": 20}])
        )
        assert moved.type.value == "subscription"

    def test_move_adjusts_both_accounts(self, account_service, package_service, make_account, make_package):
        first = make_account("First")
        second = make_account("Second", "purchase")
        package = make_package(first.id, "Movable")

        moved = package_service.update(package.id, PackageUpdate(account_id=second.id, price=5))

        assert moved.type.value == "purchase"
        assert account_service.get_by_id(first.id).linked_packages == 0
        assert account_service.get_by_id(second.id).linked_packages == 1


class TestCustomerService:
    def test_scenario_expiry_and_counter(self, customer_service, package_service, subscription_package, make_customer):
        customer = make_customer(package_id=subscription_package.id, start_date=date(2024, 1, 1), duration=1)

        entry = customer.subscription_history[0]
        assert entry.end_date == date(2024, 1, 31)
        assert package_service.get_by_id(subscription_package.id).subscribed_customers == 1
        assert customer.expiry_date == date(2024, 1, 31)

        customer_service.delete(customer.id)
        assert package_service.get_by_id(subscription_package.id).subscribed_customers == 0

    def test_purchase_entries_are_sold(self, make_account, make_package, make_customer):
        account = make_account("Gifts", "purchase")
        package = make_package(account.id, "Gift", price=25)
        customer = make_customer(package_id=package.id, start_date=date(2024, 1, 1), duration=0)
        entry = customer.subscription_history[0]
        assert entry.status.value == "sold"
        assert entry.end_date == date(2024, 1, 1)
        assert entry.remaining_days is None

    def test_duplicate_phone_after_normalization(self, make_customer):
        make_customer(phone="0501234567")
        with pytest.raises(DuplicateEntity) as exc_info:
            make_customer(name="Other", phone="+966 50 123 4567")
        assert exc_info.value.field == "phone"

    def test_duplicate_email_but_blank_allowed(self, make_customer):
        make_customer(phone="0501", email="")
        make_customer(phone="0502", email="")
        make_customer(phone="0503", email="a@example.com")
        with pytest.raises(DuplicateEntity):
            make_customer(phone="0504", email="A@example.com")

    def test_unknown_package_rejected(self, make_customer):
        with pytest.raises(ValidationError):
            make_customer(package_id="ghost")

    def test_history_replacement_diffs_counters(
        self, customer_service, package_service, subscription_account, make_package, make_customer
    ):
        p1 = make_package(subscription_account.id, "P1")
        p2 = make_package(subscription_account.id, "P2")
        customer = make_customer(package_id=p1.id, start_date=date(2024, 1, 1))
        kept = customer.subscription_history[0]

        updated = customer_service.update(
            customer.id,
            CustomerUpdate(
                subscription_history=[
                    SubscriptionInput(package_id=p2.id, start_date=date(2024, 3, 1), duration=3),
                    SubscriptionInput(id=kept.id, package_id=p1.id, start_date=date(2024, 1, 5), duration=1),
                ]
            ),
        )

        assert [s.package_id for s in updated.subscription_history] == [p2.id, p1.id]
        assert updated.subscription_history[1].id == kept.id
        assert updated.subscription_history[1].end_date == date(2024, 2, 4)
        assert updated.package_id == p2.id
        assert package_service.get_by_id(p1.id).subscribed_customers == 1
        assert package_service.get_by_id(p2.id).subscribed_customers == 1

        cleared = customer_service.update(customer.id, CustomerUpdate(subscription_history=[]))
        assert cleared.subscription_history == []
        assert cleared.package_id is None
        assert package_service.get_by_id(p1.id).subscribed_customers == 0
        assert package_service.get_by_id(p2.id).subscribed_customers == 0

    def test_single_subscription_operations(
        self, customer_service, package_service, subscription_account, make_package, make_customer
    ):
        p1 = make_package(subscription_account.id, "P1")
        p2 = make_package(subscription_account.id, "P2")
        customer = make_customer()

        added = customer_service.add_subscription(
            customer.id, SubscriptionInput(package_id=p1.id, start_date=date(2024, 5, 1), duration=1)
        )
        sub_id = added.subscription_history[0].id
        assert package_service.get_by_id(p1.id).subscribed_customers == 1

        customer_service.update_subscription(
            customer.id, sub_id, SubscriptionInput(package_id=p2.id, start_date=date(2024, 5, 1), duration=3)
        )
        assert package_service.get_by_id(p1.id).subscribed_customers == 0
        assert package_service.get_by_id(p2.id).subscribed_customers == 1

        customer_service.remove_subscription(customer.id, sub_id)
        customer_service.remove_subscription(customer.id, sub_id)
        assert package_service.get_by_id(p2.id).subscribed_customers == 0

    def test_end_before_start_rejected(self):
        with pytest.raises(ValueError):
            SubscriptionInput(package_id="p", start_date=date(2024, 2, 1), end_date=date(2024, 1, 1))

    def test_legacy_single_selection(self, customer_service, subscription_package):
        customer = customer_service.create(
            CustomerCreate.model_validate(
                {
                    "name": "Legacy",
                    "phone": "0555",
                    "packageId": subscription_package.id,
                    "subscriptionDate": "2024-01-01",
                    "subscriptionDuration": 3,
                }
            )
        )
        assert customer.subscription_duration == 3
        assert customer.expiry_date == date(2024, 3, 31)


class TestTransactionsAndAudit:
    def test_failed_commit_rolls_back_counter(
        self, db_session, account_service, package_service, subscription_account
    ):
        """A storage failure leaves neither the package nor the counter behind"""
        with patch.object(db_session, "commit", side_effect=OperationalError("COMMIT", {}, Exception("disk I/O error"))):
            with pytest.raises(StorageError):
                package_service.create(
                    PackageCreate(
                        account_id=subscription_account.id,
                        name="Doomed",
                        price=[{"duration": 1, "price": 5}],
                    )
                )

        assert PackageDAO(db_session).get_all() == []
        assert account_service.get_by_id(subscription_account.id).linked_packages == 0

    def test_mutations_are_audited_with_snapshot(self, db_session, admin_user, make_account):
        account = make_account("Audited")
        entries = _activity(db_session)
        assert entries[-1].action_type == "create"
        assert entries[-1].object_type == "account"
        assert entries[-1].object_id == account.id
        assert entries[-1].user_name == admin_user.name

        admin_user.name = "Renamed Admin"
        db_session.commit()
        assert _activity(db_session)[-1].user_name == "Admin"

    def test_audit_failure_does_not_fail_operation(self, db_session, account_service):
        with patch(
            "submanager.activity.service.ActivityLogDAO.add",
            side_effect=OperationalError("INSERT", {}, Exception("locked")),
        ):
            account = account_service.create(AccountCreate(name="Still Created", type="purchase"))

        assert AccountDAO(db_session).get_by_id(account.id) is not None
        assert _activity(db_session) == []

    def test_unexpected_audit_error_does_not_fail_operation(self, db_session, account_service):
        with patch(
            "submanager.activity.service.ActivityLogDAO.add",
            side_effect=RuntimeError("serializer exploded"),
        ):
            account = account_service.create(AccountCreate(name="Survives", type="purchase"))

        assert AccountDAO(db_session).get_by_id(account.id) is not None
        assert _activity(db_session) == []


class TestUserService:
    @pytest.fixture
    def user_service(self, db_session, admin_actor):
        return UserService(UserDAO(db_session), admin_actor)

    def test_create_hashes_password_and_lowercases_email(self, db_session, user_service):
        created = user_service.create(
            UserCreate(name="Ops", email="Ops@Example.com", password="secret1", role="user")
        )
        stored = UserDAO(db_session).get_by_id(created.id)
        assert stored.email == "ops@example.com"
        assert stored.password != "secret1"
        assert _activity(db_session)[-1].details == "Created new user: Ops (user)"

    def test_duplicate_email(self, user_service, plain_user):
        with pytest.raises(DuplicateEntity):
            user_service.create(UserCreate(name="Dup", email="OPERATOR@example.com", password="secret1"))

    def test_password_change_is_hashed(self, db_session, user_service, plain_user):
        user_service.update(plain_user.id, UserUpdate(password="another1"))
        assert UserDAO(db_session).get_by_id(plain_user.id).password.startswith("$2")

    def test_cannot_delete_self(self, user_service, admin_user):
        with pytest.raises(ValidationError):
            user_service.delete(admin_user.id)

    def test_delete_other_user(self, db_session, user_service, plain_user):
        user_service.delete(plain_user.id)
        assert UserDAO(db_session).get_by_id(plain_user.id) is None
