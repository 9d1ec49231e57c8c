"""Service layer for packages."""

import logging
from typing import Any, Dict, List, Optional

from submanager.accounts.dao import AccountDAO
from submanager.accounts.models import Account
from submanager.accounts.schemas import check_details_kind
from submanager.activity.models import ObjectType
from submanager.core.base_service import BaseService
from submanager.core.exceptions import DuplicateEntity, ValidationError
from submanager.counters.manager import CounterManager
from submanager.customers.dao import SubscriptionDAO
from submanager.packages.dao import PackageDAO
from submanager.packages.models import Package
from submanager.packages.schemas import PackageCreate, PackageRead, PackageUpdate
from submanager.subscriptions.status import PackageType

logger = logging.getLogger(__name__)


def _dump_price(price: Any) -> Any:
    if isinstance(price, list):
        return [tier.model_dump() for tier in price]
    return price


class PackageService(BaseService[Package, PackageCreate, PackageUpdate, PackageRead]):
    """Packages inherit their type from the owning account and drive its linked_packages."""

    response_model = PackageRead
    object_type = ObjectType.PACKAGE
    object_label = "package"
    search_fields = ["id", "name", "type"]

    def __init__(self, dao: PackageDAO, actor=None):
        super().__init__(dao, actor)
        self.account_dao = AccountDAO(dao.db)
        self.subscription_dao = SubscriptionDAO(dao.db)
        self.counters = CounterManager(dao.db)

    # ===== VALIDATION =====

    def _get_account(self, account_id: str) -> Account:
        account = self.account_dao.get_by_id(account_id)
        if account is None:
            raise ValidationError("Account not found", fields={"accountId": "Account not found"})
        return account

    @staticmethod
    def _check_contents(details: Optional[List[Any]], package_type: str) -> None:
        try:
            check_details_kind(details, PackageType(package_type))
        except ValueError as exc:
            raise ValidationError(str(exc), fields={"details": str(exc)}) from exc

    @staticmethod
    def _check_price(price: Any, package_type: str) -> None:
        """Subscription packages are sold by duration and need at least one tier."""
        if package_type == PackageType.SUBSCRIPTION.value and not (isinstance(price, list) and price):
            message = "Subscription packages are priced per duration tier"
            raise ValidationError(message, fields={"price": message})

    def _validate_create(self, create_data: PackageCreate) -> None:
        account = self._get_account(create_data.account_id)
        if create_data.id and self.dao.get_by_id(create_data.id) is not None:
            raise DuplicateEntity("A package with this id already exists", field="id")
        if self.dao.name_taken(create_data.name):
            raise DuplicateEntity("A package with this name already exists", field="name")
        self._check_contents(create_data.details, account.type)
        self._check_price(create_data.price, account.type)

    def _validate_update(self, record: Package, update_data: PackageUpdate) -> None:
        if update_data.name is not None and self.dao.name_taken(update_data.name, exclude_id=record.id):
            raise DuplicateEntity("A package with this name already exists", field="name")

        package_type = record.type
        if update_data.account_id is not None and update_data.account_id != record.account_id:
            package_type = self._get_account(update_data.account_id).type
        type_changed = package_type != record.type

        details = update_data.details
        if details is None and type_changed:
            details = PackageRead.model_validate(record).details
        self._check_contents(details, package_type)

        if "price" in update_data.model_fields_set:
            self._check_price(update_data.price, package_type)
        elif type_changed:
            self._check_price(record.price, package_type)

    # ===== WRITES =====

    def _create_record(self, create_data: PackageCreate) -> Package:
        account = self._get_account(create_data.account_id)
        data = create_data.model_dump(exclude_none=True, exclude={"details", "price"})
        data["type"] = account.type
        data["details"] = [credential.model_dump() for credential in create_data.details]
        data["price"] = _dump_price(create_data.price)
        return self.dao.add(**data)

    def _post_create(self, record: Package, create_data: PackageCreate) -> None:
        self.counters.package_created(record.account_id)

    def _pre_update(self, record: Package, update_data: PackageUpdate) -> None:
        if update_data.account_id is not None and update_data.account_id != record.account_id:
            self.counters.package_moved(record.account_id, update_data.account_id)

    def _update_values(self, record: Package, update_data: PackageUpdate) -> Dict[str, Any]:
        data = update_data.model_dump(exclude_unset=True, exclude={"details", "price"})
        if update_data.details is not None:
            data["details"] = [credential.model_dump() for credential in update_data.details]
        if "price" in update_data.model_fields_set:
            data["price"] = _dump_price(update_data.price)
        if update_data.account_id is not None and update_data.account_id != record.account_id:
            data["type"] = self._get_account(update_data.account_id).type
        return self._patch(data)

    def _pre_delete(self, record: Package) -> None:
        removed = self.subscription_dao.delete_by_packages([record.id])
        if removed:
            logger.info("Package %s delete removed %s subscriptions", record.id, removed)
        self.counters.package_deleted(record.account_id)
