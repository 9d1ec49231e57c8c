# submanager/accounts/router.py
"""API router for accounts (admin only)."""

from typing import List

from fastapi import APIRouter, Depends, Response, status

from submanager.accounts.dao import AccountDAO
from submanager.accounts.schemas import AccountCreate, AccountRead, AccountUpdate
from submanager.accounts.service import AccountService
from submanager.core.dependencies import AdminActorDep, SessionDep
from submanager.query.dependencies import TableQuery, get_table_query

router = APIRouter(prefix="/accounts", tags=["accounts"])


# ===== DEPENDENCY INJECTION =====

def get_account_service(session: SessionDep, actor: AdminActorDep) -> AccountService:
    return AccountService(AccountDAO(session), actor)


# ===== ENDPOINTS =====

@router.get("", response_model=List[AccountRead])
def list_accounts(
    query: TableQuery = Depends(get_table_query),
    service: AccountService = Depends(get_account_service),
) -> List[AccountRead]:
    return service.list_records(query.search, query.filters, query.sort)


@router.get("/{account_id}", response_model=AccountRead)
def get_account(account_id: str, service: AccountService = Depends(get_account_service)):
    return service.get_by_id(account_id)


@router.post("", response_model=AccountRead, status_code=status.HTTP_201_CREATED)
def create_account(data: AccountCreate, service: AccountService = Depends(get_account_service)):
    return service.create(data)


@router.put("/{account_id}", response_model=AccountRead)
def update_account(
    account_id: str, data: AccountUpdate, service: AccountService = Depends(get_account_service)
):
    return service.update(account_id, data)


@router.delete("/{account_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_account(account_id: str, service: AccountService = Depends(get_account_service)):
    """Delete an account with its packages; a missing id is not an error."""
    service.delete(account_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
