"""Role dashboard dispatch, composition and export service layer."""

from __future__ import annotations

import csv
import io
import json
import logging
import threading
from dataclasses import dataclass
from datetime import date, datetime, timezone

from sqlalchemy.orm import sessionmaker

from siteops.core.auth import ReportRole
from siteops.core.config import Settings, get_settings
from siteops.core.errors import ReportGenerationError
from siteops.services.report_builders import (
    DefaultReportBuilder,
    ProcurementOfficerReportBuilder,
    ProjectManagerReportBuilder,
    ReportRequest,
    RoleReportBuilder,
    SiteSupervisorReportBuilder,
)
from siteops.services.report_fanout import ReportFanOut
from siteops.services.report_scope import ScopeResolver

logger = logging.getLogger(__name__)

REPORT_BUILDERS: dict[ReportRole, type[RoleReportBuilder]] = {
    ReportRole.PROJECT_MANAGER: ProjectManagerReportBuilder,
    ReportRole.SITE_SUPERVISOR: SiteSupervisorReportBuilder,
    ReportRole.PROCUREMENT_OFFICER: ProcurementOfficerReportBuilder,
    ReportRole.DEFAULT: DefaultReportBuilder,
}

_missing_builders = set(ReportRole) - set(REPORT_BUILDERS)
if _missing_builders:
    raise RuntimeError(f"No report builder registered for roles: {sorted(r.value for r in _missing_builders)}")

EXPORTABLE_SECTIONS = (
    "budgetUsage",
    "budgetOverruns",
    "recentExpenses",
    "projectProgress",
    "lowStockAlerts",
    "materialStock",
    "equipmentLogs",
    "recentTimesheets",
    "approvedPurchaseRequests",
    "purchaseOrders",
    "pendingDeliveriesList",
)


def utc_today() -> date:
    """Report day boundary is the UTC calendar day, independent of server timezone."""

    return datetime.now(timezone.utc).date()


class ExportSectionNotFound(LookupError):
    """Requested section is not a list section of the caller's report."""


class UnsupportedExportFormat(ValueError):
    """Export format other than csv or xlsx."""


@dataclass(slots=True)
class ExportFilePayload:
    media_type: str
    filename: str
    content: bytes


class DashboardReportService:
    """Builds one role-specific dashboard per call; stateless between calls."""

    def __init__(self, session_factory: sessionmaker, settings: Settings | None = None) -> None:
        self.session_factory = session_factory
        self.settings = settings or get_settings()

    def build_report(
        self,
        role: ReportRole | str,
        user_id: int,
        user_email: str,
        *,
        today: date | None = None,
        cancel_event: threading.Event | None = None,
    ) -> dict[str, object]:
        """Resolve scope, fan out reads and assemble the report for ``role``.

        ``role`` may be a stored role name (for example ``"Admin"``); the name is
        echoed as the report's ``role`` field while the closed ``ReportRole``
        variant selects the builder. Any failure aborts the whole report.
        """

        if isinstance(role, ReportRole):
            report_role = role
            role_label = role.value
        else:
            report_role = ReportRole.from_role_name(role)
            role_label = role

        request = ReportRequest(
            role=report_role,
            role_label=role_label,
            user_id=user_id,
            user_email=user_email,
            today=today or utc_today(),
        )
        logger.debug("Building %s report for user %s", report_role.value, user_id)

        with ReportFanOut(
            self.session_factory,
            max_workers=self.settings.report_fanout_workers,
            timeout_seconds=self.settings.report_timeout_seconds,
            cancel_event=cancel_event,
        ) as fanout:
            try:
                scope = ScopeResolver(fanout).resolve(report_role, user_id=user_id, user_email=user_email)
                builder = REPORT_BUILDERS[report_role](fanout, self.settings)
                report = builder.build(request, scope)
            except ReportGenerationError as exc:
                logger.warning(
                    "%s report for user %s failed at stage %s: %s",
                    report_role.value,
                    user_id,
                    exc.stage,
                    exc,
                )
                raise

        logger.debug("Built %s report for user %s", report_role.value, user_id)
        return report

    # ---------- Exports ----------
    @staticmethod
    def _flatten_section_rows(rows: list[object]) -> list[dict[str, str]]:
        flat_rows: list[dict[str, str]] = []
        for row in rows:
            if not isinstance(row, dict):
                continue
            record: dict[str, str] = {}
            for key, value in row.items():
                if value is None:
                    continue
                if isinstance(value, dict):
                    for nested_key, nested_value in value.items():
                        if nested_value is not None:
                            record[f"{key}.{nested_key}"] = str(nested_value)
                elif isinstance(value, list):
                    record[str(key)] = json.dumps(value, default=str)
                else:
                    record[str(key)] = str(value)
            flat_rows.append(record)
        return flat_rows

    def export_section(
        self,
        report: dict[str, object],
        *,
        section: str,
        format_name: str,
    ) -> ExportFilePayload:
        normalized_format = format_name.strip().lower()
        if normalized_format not in {"csv", "xlsx"}:
            raise UnsupportedExportFormat("format must be one of: csv, xlsx.")

        rows = report.get(section)
        if section not in EXPORTABLE_SECTIONS or not isinstance(rows, list):
            raise ExportSectionNotFound(f"Section '{section}' is not available in this dashboard.")

        flattened = self._flatten_section_rows(rows)
        fieldnames_set: set[str] = set()
        for row in flattened:
            fieldnames_set.update(row.keys())
        fieldnames = sorted(fieldnames_set)

        base_filename = f"dashboard-{section}"
        if normalized_format == "csv":
            csv_bytes = b""
            if fieldnames:
                sio = io.StringIO()
                writer = csv.DictWriter(sio, fieldnames=fieldnames)
                writer.writeheader()
                writer.writerows(flattened)
                csv_bytes = sio.getvalue().encode("utf-8")
            return ExportFilePayload(
                media_type="text/csv; charset=utf-8",
                filename=f"{base_filename}.csv",
                content=csv_bytes,
            )

        from openpyxl import Workbook

        workbook = Workbook()
        sheet = workbook.active
        sheet.title = section[:31]

        if fieldnames:
            sheet.append(fieldnames)
            for row in flattened:
                sheet.append([row.get(column, "") for column in fieldnames])

        output = io.BytesIO()
        workbook.save(output)
        return ExportFilePayload(
            media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            filename=f"{base_filename}.xlsx",
            content=output.getvalue(),
        )
