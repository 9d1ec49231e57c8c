# submanager/activity/router.py
"""API router for the activity log (admin only, read-only)."""

from typing import List

from fastapi import APIRouter, Depends, Query

from submanager.activity.dao import ActivityLogDAO
from submanager.activity.schemas import ActivityLogRead
from submanager.activity.service import ActivityService
from submanager.core.dependencies import AdminDep, SessionDep
from submanager.query.dependencies import TableQuery, get_table_query

router = APIRouter(prefix="/activity", tags=["activity"])


def get_activity_service(session: SessionDep, _: AdminDep) -> ActivityService:
    return ActivityService(ActivityLogDAO(session))


@router.get("", response_model=List[ActivityLogRead])
def list_activity(
    query: TableQuery = Depends(get_table_query),
    service: ActivityService = Depends(get_activity_service),
) -> List[ActivityLogRead]:
    """Newest-first audit rows with the user name and role stored at write time."""
    return service.list_activity(query.search, query.filters, query.sort)


@router.get("/recent", response_model=List[ActivityLogRead])
def recent_activity(
    limit: int = Query(10, ge=1, le=100),
    service: ActivityService = Depends(get_activity_service),
) -> List[ActivityLogRead]:
    return service.get_recent(limit)
