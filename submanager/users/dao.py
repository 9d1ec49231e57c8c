"""Data Access Object for users."""

from typing import Optional

from sqlalchemy.orm import Session

from submanager.core.base_dao import BaseDAO
from submanager.users.models import User


class UserDAO(BaseDAO[User]):
    def __init__(self, db_session: Session):
        super().__init__(User, db_session)

    def get_by_email(self, email: str) -> Optional[User]:
        return self.get_by_field("email", email.strip().lower())

    def email_taken(self, email: str, exclude_id: Optional[str] = None) -> bool:
        return self.exists_case_insensitive("email", email, exclude_id=exclude_id)
