"""Login, logout and the current-user lookup."""

import logging
from datetime import datetime

from sqlalchemy.orm import Session

from submanager.activity.models import ActionType, ObjectType
from submanager.activity.schemas import Actor
from submanager.activity.service import ActivityLogger
from submanager.auth.schemas import LoginRequest, LoginResponse
from submanager.auth.security import create_access_token, verify_password
from submanager.core.base_service import unit_of_work
from submanager.core.exceptions import Unauthorized
from submanager.users.dao import UserDAO
from submanager.users.models import User
from submanager.users.schemas import UserRead

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, db: Session):
        self.db = db
        self.user_dao = UserDAO(db)
        self.activity = ActivityLogger(db)

    def authenticate(self, email: str, password: str) -> User:
        user = self.user_dao.get_by_email(email)
        if user is None or not verify_password(password, user.password):
            # Same message for both cases so emails cannot be probed
            logger.info("Failed login for %s", email)
            raise Unauthorized("Invalid credentials")
        return user

    def login(self, credentials: LoginRequest) -> LoginResponse:
        user = self.authenticate(credentials.email, credentials.password)

        with unit_of_work(self.db):
            user.last_login = datetime.now()

        token = create_access_token(user.id, user.role)
        self.activity.record(
            user.id, user.name, user.role, ActionType.LOGIN, ObjectType.USER,
            user.id, user.name, "User logged in",
        )
        return LoginResponse(token=token, user=UserRead.model_validate(user))

    def logout(self, actor: Actor) -> None:
        """Tokens are stateless; logging out only leaves an audit trail."""
        self.activity.record_for(
            actor, ActionType.LOGOUT, ObjectType.USER, actor.id, actor.name, "User logged out"
        )
