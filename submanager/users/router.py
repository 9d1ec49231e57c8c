# submanager/users/router.py
"""API router for user administration (admin only)."""

from typing import List

from fastapi import APIRouter, Depends, Response, status

from submanager.core.dependencies import AdminActorDep, SessionDep
from submanager.query.dependencies import TableQuery, get_table_query
from submanager.users.dao import UserDAO
from submanager.users.schemas import UserCreate, UserRead, UserUpdate
from submanager.users.service import UserService

router = APIRouter(prefix="/users", tags=["users"])


def get_user_service(session: SessionDep, actor: AdminActorDep) -> UserService:
    return UserService(UserDAO(session), actor)


@router.get("", response_model=List[UserRead])
def list_users(
    query: TableQuery = Depends(get_table_query),
    service: UserService = Depends(get_user_service),
) -> List[UserRead]:
    return service.list_records(query.search, query.filters, query.sort)


@router.get("/{user_id}", response_model=UserRead)
def get_user(user_id: str, service: UserService = Depends(get_user_service)):
    return service.get_by_id(user_id)


@router.post("", response_model=UserRead, status_code=status.HTTP_201_CREATED)
def create_user(data: UserCreate, service: UserService = Depends(get_user_service)):
    return service.create(data)


@router.put("/{user_id}", response_model=UserRead)
def update_user(user_id: str, data: UserUpdate, service: UserService = Depends(get_user_service)):
    return service.update(user_id, data)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(user_id: str, service: UserService = Depends(get_user_service)):
    service.delete(user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
