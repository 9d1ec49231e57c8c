"""
Service-level tests for expenses and expense categories.
"""

from datetime import date

import pytest
from pydantic import ValidationError as SchemaError
from sqlalchemy import select

from submanager.activity.models import ActivityLog
from submanager.core.exceptions import DuplicateEntity, NotFound
from submanager.expenses.schemas import (
    ExpenseCategoryCreate,
    ExpenseCategoryUpdate,
    ExpenseCreate,
    ExpenseUpdate,
)


def _activity(db_session):
    return list(db_session.execute(select(ActivityLog).order_by(ActivityLog.timestamp)).scalars())


class TestExpenseService:
    def test_create_is_audited(self, db_session, make_expense):
        expense = make_expense(120.5, "Hosting", day=date(2024, 4, 2), description="VPS renewal")

        assert expense.amount == 120.5
        assert expense.date == date(2024, 4, 2)
        entry = _activity(db_session)[-1]
        assert (entry.action_type, entry.object_type) == ("create", "expense")
        assert entry.object_id == expense.id
        assert entry.object_name == "VPS renewal"

    def test_negative_amount_rejected(self):
        with pytest.raises(SchemaError):
            ExpenseCreate(date=date(2024, 1, 1), category="Ads", amount=-1)

    def test_blank_category_rejected(self):
        with pytest.raises(SchemaError):
            ExpenseCreate(date=date(2024, 1, 1), category="   ", amount=1)

    def test_partial_update(self, expense_service, make_expense):
        expense = make_expense(10, "Ads", description="Banner")

        updated = expense_service.update(expense.id, ExpenseUpdate(amount=15))

        assert updated.amount == 15
        assert updated.category == "Ads"
        assert updated.description == "Banner"

    def test_update_missing_raises_not_found(self, expense_service):
        with pytest.raises(NotFound):
            expense_service.update("missing", ExpenseUpdate(amount=1))

    def test_delete_and_search(self, db_session, expense_service, make_expense):
        kept = make_expense(10, "Ads", description="Banner")
        gone = make_expense(20, "Hosting", description="VPS")

        expense_service.delete(gone.id)
        expense_service.delete(gone.id)

        assert [e.id for e in expense_service.list_records("banner")] == [kept.id]
        assert expense_service.list_records("vps") == []
        assert _activity(db_session)[-1].action_type == "delete"


class TestExpenseCategoryService:
    def test_duplicate_name_ignores_case(self, category_service):
        category_service.create(ExpenseCategoryCreate(name="Hosting"))
        with pytest.raises(DuplicateEntity) as exc:
            category_service.create(ExpenseCategoryCreate(name="  hosting "))
        assert exc.value.field == "name"

    def test_rename_refiles_expenses(self, db_session, category_service, expense_service, make_expense):
        category = category_service.create(ExpenseCategoryCreate(name="Ads"))
        filed = make_expense(10, "Ads")
        other = make_expense(20, "Hosting")

        renamed = category_service.update(category.id, ExpenseCategoryUpdate(name="Marketing"))

        assert renamed.name == "Marketing"
        assert expense_service.get_by_id(filed.id).category == "Marketing"
        assert expense_service.get_by_id(other.id).category == "Hosting"
        entry = _activity(db_session)[-1]
        assert (entry.action_type, entry.object_type) == ("update", "expense_category")

    def test_rename_to_taken_name_rejected(self, category_service):
        category_service.create(ExpenseCategoryCreate(name="Ads"))
        hosting = category_service.create(ExpenseCategoryCreate(name="Hosting"))
        with pytest.raises(DuplicateEntity):
            category_service.update(hosting.id, ExpenseCategoryUpdate(name="ADS"))

    def test_delete_keeps_expense_category_text(self, category_service, expense_service, make_expense):
        category = category_service.create(ExpenseCategoryCreate(name="Ads"))
        expense = make_expense(10, "Ads")

        category_service.delete(category.id)

        assert category_service.list_records() == []
        assert expense_service.get_by_id(expense.id).category == "Ads"
