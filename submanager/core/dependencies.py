# submanager/core/dependencies.py
"""Shared FastAPI dependencies: database session, current user, actor."""

from typing import Annotated, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from submanager.activity.schemas import Actor
from submanager.auth.security import decode_access_token
from submanager.core.database import get_db
from submanager.core.exceptions import Forbidden, Unauthorized
from submanager.users.models import User, UserRole

# Core database dependency
SessionDep = Annotated[Session, Depends(get_db)]

bearer_scheme = HTTPBearer(auto_error=False)


def get_current_user(
    db: SessionDep,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> User:
    """Resolve the Bearer token to a live user; 401 otherwise."""
    if credentials is None or not credentials.credentials:
        raise Unauthorized("Authentication required")

    payload = decode_access_token(credentials.credentials)
    user = db.get(User, payload["sub"])
    if user is None:
        raise Unauthorized("Invalid or expired token")
    return user


CurrentUserDep = Annotated[User, Depends(get_current_user)]


def require_admin(user: CurrentUserDep) -> User:
    if user.role != UserRole.ADMIN.value:
        raise Forbidden("Admin access required")
    return user


AdminDep = Annotated[User, Depends(require_admin)]


def get_actor(user: CurrentUserDep) -> Actor:
    """Snapshot of the current user for the activity log."""
    return Actor.model_validate(user)


def get_admin_actor(user: AdminDep) -> Actor:
    return Actor.model_validate(user)


ActorDep = Annotated[Actor, Depends(get_actor)]
AdminActorDep = Annotated[Actor, Depends(get_admin_actor)]
