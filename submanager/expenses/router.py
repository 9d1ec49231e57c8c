"""API routers for expenses and expense categories (admin only)."""

from typing import List

from fastapi import APIRouter, Depends, Response, status

from submanager.core.dependencies import AdminActorDep, SessionDep
from submanager.expenses.dao import ExpenseCategoryDAO, ExpenseDAO
from submanager.expenses.schemas import (
    ExpenseCategoryCreate,
    ExpenseCategoryRead,
    ExpenseCategoryUpdate,
    ExpenseCreate,
    ExpenseRead,
    ExpenseUpdate,
)
from submanager.expenses.service import ExpenseCategoryService, ExpenseService
from submanager.query.dependencies import TableQuery, get_table_query

router = APIRouter(prefix="/expenses", tags=["expenses"])
category_router = APIRouter(prefix="/expense-categories", tags=["expenses"])


# ===== DEPENDENCY INJECTION =====

def get_expense_service(session: SessionDep, actor: AdminActorDep) -> ExpenseService:
    return ExpenseService(ExpenseDAO(session), actor)


def get_category_service(session: SessionDep, actor: AdminActorDep) -> ExpenseCategoryService:
    return ExpenseCategoryService(ExpenseCategoryDAO(session), actor)


# ===== EXPENSES =====

@router.get("", response_model=List[ExpenseRead])
def list_expenses(
    query: TableQuery = Depends(get_table_query),
    service: ExpenseService = Depends(get_expense_service),
) -> List[ExpenseRead]:
    return service.list_records(query.search, query.filters, query.sort)


@router.get("/{expense_id}", response_model=ExpenseRead)
def get_expense(expense_id: str, service: ExpenseService = Depends(get_expense_service)):
    return service.get_by_id(expense_id)


@router.post("", response_model=ExpenseRead, status_code=status.HTTP_201_CREATED)
def create_expense(data: ExpenseCreate, service: ExpenseService = Depends(get_expense_service)):
    return service.create(data)


@router.put("/{expense_id}", response_model=ExpenseRead)
def update_expense(
    expense_id: str, data: ExpenseUpdate, service: ExpenseService = Depends(get_expense_service)
):
    return service.update(expense_id, data)


@router.delete("/{expense_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_expense(expense_id: str, service: ExpenseService = Depends(get_expense_service)):
    service.delete(expense_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ===== CATEGORIES =====

@category_router.get("", response_model=List[ExpenseCategoryRead])
def list_categories(
    query: TableQuery = Depends(get_table_query),
    service: ExpenseCategoryService = Depends(get_category_service),
) -> List[ExpenseCategoryRead]:
    return service.list_records(query.search, query.filters, query.sort)


@category_router.post("", response_model=ExpenseCategoryRead, status_code=status.HTTP_201_CREATED)
def create_category(
    data: ExpenseCategoryCreate, service: ExpenseCategoryService = Depends(get_category_service)
):
    return service.create(data)


@category_router.put("/{category_id}", response_model=ExpenseCategoryRead)
def update_category(
    category_id: str,
    data: ExpenseCategoryUpdate,
    service: ExpenseCategoryService = Depends(get_category_service),
):
    """Rename a category; expenses filed under the old name follow it."""
    return service.update(category_id, data)


@category_router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_category(
    category_id: str, service: ExpenseCategoryService = Depends(get_category_service)
):
    """Existing expenses keep the category name they were filed under."""
    service.delete(category_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
