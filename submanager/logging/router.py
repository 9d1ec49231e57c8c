# submanager/logging/router.py
"""API router for the request log (admin only)."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response

from submanager.core.dependencies import AdminDep, SessionDep
from submanager.core.exceptions import ValidationError
from submanager.logging.dao import RequestLogDAO
from submanager.logging.schemas import RequestLogRead
from submanager.logging.service import RequestLogService

router = APIRouter(prefix="/logs", tags=["logs"])


def get_log_service(session: SessionDep, _: AdminDep) -> RequestLogService:
    return RequestLogService(RequestLogDAO(session))


@router.get("", response_model=List[RequestLogRead])
def get_logs(
    response: Response,
    limit: int = Query(50, ge=1, le=1000, description="Maximum number of logs to return"),
    offset: int = Query(0, ge=0, description="Number of logs to skip"),
    status_min: Optional[int] = Query(None, ge=100, le=599, description="Minimum status code"),
    status_max: Optional[int] = Query(None, ge=100, le=599, description="Maximum status code"),
    search: Optional[str] = Query(None, description="Search term for filtering logs"),
    log_service: RequestLogService = Depends(get_log_service),
) -> List[RequestLogRead]:
    """Get logs with pagination and filtering."""
    if status_min is not None and status_max is not None and status_min > status_max:
        raise ValidationError("status_min cannot be greater than status_max")

    logs, total_count = log_service.get_logs(limit, offset, status_min, status_max, search)

    # Set pagination headers
    response.headers["X-Total-Count"] = str(total_count)
    response.headers["X-Page-Size"] = str(limit)
    response.headers["X-Page-Offset"] = str(offset)

    return logs
