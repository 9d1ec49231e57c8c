"""Data Access Object for accounts."""

from typing import Optional

from sqlalchemy.orm import Session

from submanager.accounts.models import Account
from submanager.core.base_dao import BaseDAO


class AccountDAO(BaseDAO[Account]):
    def __init__(self, db_session: Session):
        super().__init__(Account, db_session)

    def name_taken(self, name: str, exclude_id: Optional[str] = None) -> bool:
        return self.exists_case_insensitive("name", name, exclude_id=exclude_id)
