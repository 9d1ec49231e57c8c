"""Service layer for user administration."""

from typing import Any, Dict

from submanager.activity.models import ObjectType
from submanager.auth.security import hash_password
from submanager.core.base_service import BaseService
from submanager.core.exceptions import DuplicateEntity, ValidationError
from submanager.users.dao import UserDAO
from submanager.users.models import User
from submanager.users.schemas import UserCreate, UserRead, UserUpdate


class UserService(BaseService[User, UserCreate, UserUpdate, UserRead]):
    response_model = UserRead
    object_type = ObjectType.USER
    object_label = "user"
    search_fields = ["id", "name", "email", "role"]

    def __init__(self, dao: UserDAO, actor=None):
        super().__init__(dao, actor)

    def _validate_create(self, create_data: UserCreate) -> None:
        if self.dao.email_taken(create_data.email):
            raise DuplicateEntity("A user with this email already exists", field="email")

    def _create_record(self, create_data: UserCreate) -> User:
        return self.dao.add(
            name=create_data.name,
            email=create_data.email.lower(),
            password=hash_password(create_data.password),
            role=create_data.role.value,
        )

    def _create_details(self, record: User) -> str:
        return f"Created new user: {record.name} ({record.role})"

    def _validate_update(self, record: User, update_data: UserUpdate) -> None:
        if update_data.email and self.dao.email_taken(update_data.email, exclude_id=record.id):
            raise DuplicateEntity("A user with this email already exists", field="email")

    def _update_values(self, record: User, update_data: UserUpdate) -> Dict[str, Any]:
        data = update_data.model_dump(exclude_unset=True, exclude={"password", "email", "role"})
        if update_data.email:
            data["email"] = update_data.email.lower()
        if update_data.role is not None:
            data["role"] = update_data.role.value
        if update_data.password:
            data["password"] = hash_password(update_data.password)
        return self._patch(data)

    def _update_details(self, record: User) -> str:
        return f"Updated user: {record.name} ({record.role})"

    def _validate_delete(self, record: User) -> None:
        if self.actor is not None and record.id == self.actor.id:
            raise ValidationError("You cannot delete your own account")
