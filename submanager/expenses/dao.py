"""Data Access Objects for expenses and expense categories."""

from datetime import date
from typing import List, Optional

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from submanager.core.base_dao import BaseDAO
from submanager.expenses.models import Expense, ExpenseCategory


class ExpenseDAO(BaseDAO[Expense]):
    def __init__(self, db_session: Session):
        super().__init__(Expense, db_session)

    def dated_after(self, day: date) -> List[Expense]:
        query = select(Expense).where(Expense.date > day).order_by(Expense.date)
        return list(self.db.execute(query).scalars().all())

    def rename_category(self, old_name: str, new_name: str) -> int:
        """Point every expense filed under old_name at new_name."""
        result = self.db.execute(
            update(Expense)
            .where(Expense.category == old_name)
            .values(category=new_name)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount


class ExpenseCategoryDAO(BaseDAO[ExpenseCategory]):
    def __init__(self, db_session: Session):
        super().__init__(ExpenseCategory, db_session)

    def name_taken(self, name: str, exclude_id: Optional[str] = None) -> bool:
        return self.exists_case_insensitive("name", name, exclude_id=exclude_id)
