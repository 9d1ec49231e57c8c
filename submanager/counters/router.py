# submanager/counters/router.py
"""Maintenance endpoint to rebuild relationship counters (admin only)."""

from typing import Dict

from fastapi import APIRouter

from submanager.core.base_service import unit_of_work
from submanager.core.dependencies import AdminDep, SessionDep
from submanager.counters.manager import CounterManager

router = APIRouter(prefix="/counters", tags=["counters"])


@router.post("/reconcile")
def reconcile_counters(session: SessionDep, _: AdminDep) -> Dict[str, int]:
    """Recount linkedPackages and subscribedCustomers from the live rows."""
    with unit_of_work(session):
        corrected = CounterManager(session).reconcile()
    return {"corrected": corrected}
