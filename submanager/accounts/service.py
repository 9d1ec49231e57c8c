"""Service layer for accounts."""

import logging
from typing import Any, Dict

from submanager.accounts.dao import AccountDAO
from submanager.accounts.models import Account
from submanager.accounts.schemas import (
    AccountCreate,
    AccountRead,
    AccountUpdate,
    check_details_kind,
)
from submanager.activity.models import ObjectType
from submanager.core.base_service import BaseService
from submanager.core.exceptions import DuplicateEntity, ValidationError
from submanager.customers.dao import SubscriptionDAO
from submanager.packages.dao import PackageDAO

logger = logging.getLogger(__name__)


class AccountService(BaseService[Account, AccountCreate, AccountUpdate, AccountRead]):
    """Accounts own packages; deleting one removes its packages and their subscriptions."""

    response_model = AccountRead
    object_type = ObjectType.ACCOUNT
    object_label = "account"
    search_fields = ["id", "name", "type"]

    def __init__(self, dao: AccountDAO, actor=None):
        super().__init__(dao, actor)
        self.package_dao = PackageDAO(dao.db)
        self.subscription_dao = SubscriptionDAO(dao.db)

    def _validate_create(self, create_data: AccountCreate) -> None:
        if create_data.id and self.dao.get_by_id(create_data.id) is not None:
            raise DuplicateEntity("An account with this id already exists", field="id")
        if self.dao.name_taken(create_data.name):
            raise DuplicateEntity("An account with this name already exists", field="name")

    def _create_record(self, create_data: AccountCreate) -> Account:
        data = create_data.model_dump(exclude_none=True, exclude={"details"})
        data["type"] = create_data.type.value
        data["details"] = [credential.model_dump() for credential in create_data.details]
        return self.dao.add(**data)

    def _validate_update(self, record: Account, update_data: AccountUpdate) -> None:
        if update_data.name is not None and self.dao.name_taken(update_data.name, exclude_id=record.id):
            raise DuplicateEntity("An account with this name already exists", field="name")

        new_type = update_data.type.value if update_data.type is not None else record.type
        if new_type != record.type and self.package_dao.get_by_account(record.id):
            raise ValidationError(
                "Cannot change the type of an account with linked packages",
                fields={"type": "Account has linked packages"},
            )

        if update_data.details is not None:
            details = update_data.details
        elif new_type != record.type:
            details = AccountRead.model_validate(record).details
        else:
            details = None
        try:
            check_details_kind(details, new_type)
        except ValueError as exc:
            raise ValidationError(str(exc), fields={"details": str(exc)}) from exc

    def _update_values(self, record: Account, update_data: AccountUpdate) -> Dict[str, Any]:
        data = update_data.model_dump(exclude_unset=True, exclude={"details"})
        if update_data.type is not None:
            data["type"] = update_data.type.value
        if update_data.details is not None:
            data["details"] = [credential.model_dump() for credential in update_data.details]
        return self._patch(data)

    def _pre_delete(self, record: Account) -> None:
        package_ids = [package.id for package in self.package_dao.get_by_account(record.id)]
        removed_subscriptions = self.subscription_dao.delete_by_packages(package_ids)
        removed_packages = self.package_dao.delete_by_account(record.id)
        if removed_packages:
            logger.info(
                "Account %s cascade removed %s packages and %s subscriptions",
                record.id, removed_packages, removed_subscriptions,
            )
