# submanager/customers/router.py
"""API router for customers and their subscriptions (any signed-in user)."""

from typing import List

from fastapi import APIRouter, Depends, Response, status

from submanager.core.dependencies import ActorDep, SessionDep
from submanager.customers.dao import CustomerDAO
from submanager.customers.schemas import (
    CustomerCreate,
    CustomerRead,
    CustomerUpdate,
    SubscriptionInput,
)
from submanager.customers.service import CustomerService
from submanager.query.dependencies import TableQuery, get_table_query

router = APIRouter(prefix="/customers", tags=["customers"])


# ===== DEPENDENCY INJECTION =====

def get_customer_service(session: SessionDep, actor: ActorDep) -> CustomerService:
    return CustomerService(CustomerDAO(session), actor)


# ===== CUSTOMER ENDPOINTS =====

@router.get("", response_model=List[CustomerRead])
def list_customers(
    query: TableQuery = Depends(get_table_query),
    service: CustomerService = Depends(get_customer_service),
) -> List[CustomerRead]:
    """List customers. ``package`` and ``status`` filter on any history entry."""
    return service.list_records(query.search, query.filters, query.sort)


@router.get("/{customer_id}", response_model=CustomerRead)
def get_customer(customer_id: str, service: CustomerService = Depends(get_customer_service)):
    return service.get_profile(customer_id)


@router.post("", response_model=CustomerRead, status_code=status.HTTP_201_CREATED)
def create_customer(data: CustomerCreate, service: CustomerService = Depends(get_customer_service)):
    return service.create(data)


@router.put("/{customer_id}", response_model=CustomerRead)
def update_customer(
    customer_id: str, data: CustomerUpdate, service: CustomerService = Depends(get_customer_service)
):
    return service.update(customer_id, data)


@router.delete("/{customer_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_customer(customer_id: str, service: CustomerService = Depends(get_customer_service)):
    service.delete(customer_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ===== SUBSCRIPTION ENDPOINTS =====

@router.post(
    "/{customer_id}/subscriptions",
    response_model=CustomerRead,
    status_code=status.HTTP_201_CREATED,
)
def add_subscription(
    customer_id: str,
    data: SubscriptionInput,
    service: CustomerService = Depends(get_customer_service),
):
    return service.add_subscription(customer_id, data)


@router.put("/{customer_id}/subscriptions/{subscription_id}", response_model=CustomerRead)
def update_subscription(
    customer_id: str,
    subscription_id: str,
    data: SubscriptionInput,
    service: CustomerService = Depends(get_customer_service),
):
    return service.update_subscription(customer_id, subscription_id, data)


@router.delete(
    "/{customer_id}/subscriptions/{subscription_id}", status_code=status.HTTP_204_NO_CONTENT
)
def remove_subscription(
    customer_id: str,
    subscription_id: str,
    service: CustomerService = Depends(get_customer_service),
):
    service.remove_subscription(customer_id, subscription_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
