# submanager/insights/router.py
"""API router for notifications, dashboard, revenue and exports."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response

from submanager.core.dependencies import AdminDep, CurrentUserDep, SessionDep
from submanager.insights.export import ExportFormat, ExportService, ExportTable
from submanager.insights.schemas import DashboardSummary, ExpiryNotification, RevenueReport
from submanager.insights.service import InsightService

router = APIRouter(tags=["insights"])


def get_insight_service(session: SessionDep, _: CurrentUserDep) -> InsightService:
    return InsightService(session)


def get_admin_insight_service(session: SessionDep, _: AdminDep) -> InsightService:
    return InsightService(session)


def get_export_service(session: SessionDep, _: AdminDep) -> ExportService:
    return ExportService(session)


@router.get("/notifications", response_model=List[ExpiryNotification])
def get_notifications(
    days: Optional[int] = Query(None, ge=0, le=365, description="Warning window in days"),
    service: InsightService = Depends(get_insight_service),
):
    """Accounts and active subscriptions that expire soon."""
    return service.notifications(days)


@router.get("/dashboard", response_model=DashboardSummary)
def get_dashboard(service: InsightService = Depends(get_insight_service)):
    return service.dashboard()


@router.get("/revenue", response_model=RevenueReport)
def get_revenue(service: InsightService = Depends(get_admin_insight_service)):
    return service.revenue()


@router.get("/export/{table}")
def export_table(
    table: ExportTable,
    format: ExportFormat = Query(ExportFormat.CSV),
    service: ExportService = Depends(get_export_service),
) -> Response:
    """Download a table as an attachment."""
    content, media_type, file_name = service.export(table, format)
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f"attachment; filename={file_name}"},
    )
