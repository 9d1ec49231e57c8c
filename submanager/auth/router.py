# submanager/auth/router.py
"""API router for authentication."""

from fastapi import APIRouter, Depends, Response, status

from submanager.auth.schemas import LoginRequest, LoginResponse
from submanager.auth.service import AuthService
from submanager.core.dependencies import ActorDep, CurrentUserDep, SessionDep
from submanager.users.schemas import UserRead

router = APIRouter(prefix="/auth", tags=["auth"])


def get_auth_service(session: SessionDep) -> AuthService:
    return AuthService(session)


@router.post("/login", response_model=LoginResponse)
def login(credentials: LoginRequest, service: AuthService = Depends(get_auth_service)):
    """Exchange email and password for a bearer token."""
    return service.login(credentials)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(actor: ActorDep, service: AuthService = Depends(get_auth_service)):
    service.logout(actor)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/me", response_model=UserRead)
def me(user: CurrentUserDep):
    return user
