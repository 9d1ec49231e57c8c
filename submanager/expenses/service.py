"""Service layer for expenses and expense categories."""

import logging

from submanager.activity.models import ObjectType
from submanager.core.base_service import BaseService
from submanager.core.exceptions import DuplicateEntity
from submanager.expenses.dao import ExpenseCategoryDAO, ExpenseDAO
from submanager.expenses.models import Expense, ExpenseCategory
from submanager.expenses.schemas import (
    ExpenseCategoryCreate,
    ExpenseCategoryRead,
    ExpenseCategoryUpdate,
    ExpenseCreate,
    ExpenseRead,
    ExpenseUpdate,
)

logger = logging.getLogger(__name__)


class ExpenseService(BaseService[Expense, ExpenseCreate, ExpenseUpdate, ExpenseRead]):
    response_model = ExpenseRead
    object_type = ObjectType.EXPENSE
    object_label = "expense"
    search_fields = ["id", "category", "description"]

    def _validate_create(self, create_data: ExpenseCreate) -> None:
        if create_data.id and self.dao.get_by_id(create_data.id) is not None:
            raise DuplicateEntity("An expense with this id already exists", field="id")

    def _object_name(self, record: Expense) -> str:
        return record.description or record.category

    def _create_details(self, record: Expense) -> str:
        return f"Recorded {record.category} expense of {record.amount:.2f}: {self._object_name(record)}"


class ExpenseCategoryService(
    BaseService[ExpenseCategory, ExpenseCategoryCreate, ExpenseCategoryUpdate, ExpenseCategoryRead]
):
    """Named categories for expenses. Renaming one refiles its expenses."""

    response_model = ExpenseCategoryRead
    object_type = ObjectType.EXPENSE_CATEGORY
    object_label = "expense category"

    def __init__(self, dao: ExpenseCategoryDAO, actor=None):
        super().__init__(dao, actor)
        self.expense_dao = ExpenseDAO(dao.db)

    def _validate_create(self, create_data: ExpenseCategoryCreate) -> None:
        if create_data.id and self.dao.get_by_id(create_data.id) is not None:
            raise DuplicateEntity("A category with this id already exists", field="id")
        if self.dao.name_taken(create_data.name):
            raise DuplicateEntity("A category with this name already exists", field="name")

    def _validate_update(self, record: ExpenseCategory, update_data: ExpenseCategoryUpdate) -> None:
        if update_data.name is not None and self.dao.name_taken(update_data.name, exclude_id=record.id):
            raise DuplicateEntity("A category with this name already exists", field="name")

    def _pre_update(self, record: ExpenseCategory, update_data: ExpenseCategoryUpdate) -> None:
        if update_data.name is None or update_data.name == record.name:
            return
        moved = self.expense_dao.rename_category(record.name, update_data.name)
        if moved:
            logger.info(
                "Category %s renamed to %s, %s expenses refiled", record.name, update_data.name, moved
            )
