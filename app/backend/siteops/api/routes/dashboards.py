"""Role dashboard endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import sessionmaker

from siteops.core.auth import RequestUserContext, get_current_user_context
from siteops.core.errors import ReportGenerationError, to_http_exception
from siteops.db.dependencies import get_session_factory
from siteops.services.dashboard_service import DashboardReportService

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


def _service(session_factory: sessionmaker) -> DashboardReportService:
    return DashboardReportService(session_factory)


def build_dashboard_for(context: RequestUserContext, session_factory: sessionmaker) -> dict[str, object]:
    service = _service(session_factory)
    try:
        return service.build_report(context.role_name, context.user_id, context.email)
    except ReportGenerationError as exc:
        raise to_http_exception(exc) from exc


@router.get("")
def get_dashboard(
    context: RequestUserContext = Depends(get_current_user_context),
    session_factory: sessionmaker = Depends(get_session_factory),
) -> dict[str, object]:
    """Role-specific dashboard for the current user."""

    return build_dashboard_for(context, session_factory)
