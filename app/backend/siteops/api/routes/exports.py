"""Export endpoint for dashboard list sections."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import Response
from sqlalchemy.orm import sessionmaker

from siteops.api.routes.dashboards import build_dashboard_for
from siteops.core.auth import RequestUserContext, get_current_user_context
from siteops.db.dependencies import get_session_factory
from siteops.services.dashboard_service import (
    DashboardReportService,
    ExportSectionNotFound,
    UnsupportedExportFormat,
)

router = APIRouter(prefix="/exports", tags=["exports"])


@router.get("/dashboard/{section}")
def export_dashboard_section(
    section: str,
    format: str = Query(default="xlsx"),
    context: RequestUserContext = Depends(get_current_user_context),
    session_factory: sessionmaker = Depends(get_session_factory),
) -> Response:
    report = build_dashboard_for(context, session_factory)
    service = DashboardReportService(session_factory)
    try:
        exported = service.export_section(report, section=section, format_name=format)
    except UnsupportedExportFormat as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc
    except ExportSectionNotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc

    return Response(
        content=exported.content,
        media_type=exported.media_type,
        headers={"Content-Disposition": f'attachment; filename="{exported.filename}"'},
    )
