"""Role report builders.

Each builder fans out the independent reads for its role through the report's
``ReportFanOut``, runs the metric calculators over the fetched rows and
assembles the wire structure. Builders never write.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal

from siteops.core.auth import ReportRole
from siteops.core.config import Settings
from siteops.models.entities import (
    EquipmentStatus,
    Project,
    ProjectStatus,
    PurchaseOrderStatus,
    PurchaseRequestStatus,
)
from siteops.repositories.reporting_repository import (
    EquipmentRow,
    ExpenseRow,
    InventoryRow,
    PurchaseOrderRow,
    PurchaseRequestRow,
    ReportingRepository,
    TimesheetRow,
)
from siteops.services.report_fanout import ReportFanOut, ReportTask
from siteops.services.report_metrics import (
    BudgetUsage,
    LowStockAlert,
    ResourceUtilization,
    budget_overrun,
    budget_usage,
    daily_hours_aggregate,
    is_low_stock,
    low_stock_alerts,
    overrun_amount,
    procurement_totals,
    resource_utilization,
)
from siteops.services.report_scope import ScopeContext


@dataclass(slots=True)
class ReportRequest:
    role: ReportRole
    role_label: str
    user_id: int
    user_email: str
    today: date


# ---------- Serialization ----------
def _money(value: Decimal | None) -> str | None:
    if value is None:
        return None
    return str(value)


def _iso(value: date | datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def serialize_budget_usage(usage: BudgetUsage) -> dict[str, object]:
    return {
        "projectId": usage.project_id,
        "projectName": usage.project_name,
        "budget": _money(usage.budget),
        "spent": _money(usage.spent),
        "remaining": _money(usage.remaining),
        "percentage": _money(usage.percentage),
        "percentageDefined": usage.percentage_defined,
    }


def serialize_expense(row: ExpenseRow) -> dict[str, object]:
    return {
        "id": row.id,
        "projectId": row.project_id,
        "projectName": row.project_name,
        "category": row.category,
        "amount": _money(row.amount),
        "expenseDate": _iso(row.expense_date),
        "createdAt": _iso(row.created_at),
        "recordedBy": {"id": row.recorded_by_id, "name": row.recorded_by_name},
    }


def serialize_utilization(utilization: ResourceUtilization) -> dict[str, object]:
    return {
        "equipment": {
            "total": utilization.equipment.total,
            "inUse": utilization.equipment.in_use,
            "available": utilization.equipment.available,
            "utilizationRate": _money(utilization.equipment.utilization_rate),
        },
        "employees": {
            "total": utilization.employees.total,
            "utilizationRate": _money(utilization.employees.utilization_rate),
        },
    }


def serialize_low_stock_alert(alert: LowStockAlert) -> dict[str, object]:
    return {
        "projectName": alert.project_name,
        "materialName": alert.material_name,
        "currentStock": _money(alert.current_stock),
        "minStock": _money(alert.min_stock),
        "unit": alert.unit,
    }


def serialize_material_stock(row: InventoryRow) -> dict[str, object]:
    return {
        "projectName": row.project_name,
        "materialName": row.material_name,
        "quantity": _money(row.quantity),
        "unit": row.unit,
        "minStock": _money(row.min_stock),
        "isLowStock": is_low_stock(row),
    }


def serialize_equipment(row: EquipmentRow) -> dict[str, object]:
    return {
        "id": row.id,
        "name": row.name,
        "type": row.type,
        "status": row.status.value,
        "projectName": row.project_name,
    }


def serialize_timesheet(row: TimesheetRow) -> dict[str, object]:
    return {
        "id": row.id,
        "workDate": _iso(row.work_date),
        "employeeName": row.employee_name,
        "projectName": row.project_name,
        "hoursWorked": _money(row.hours_worked),
        "status": row.status.value,
    }


def serialize_purchase_request(row: PurchaseRequestRow) -> dict[str, object]:
    return {
        "id": row.id,
        "prNumber": row.pr_number,
        "projectName": row.project_name,
        "supplierName": row.supplier_name,
        "totalAmount": _money(row.total_amount),
        "approvedAt": _iso(row.approved_at),
        "items": [
            {
                "materialName": item.material_name,
                "quantity": _money(item.quantity),
                "unitPrice": _money(item.unit_price),
            }
            for item in row.items
        ],
    }


def serialize_purchase_order(row: PurchaseOrderRow) -> dict[str, object]:
    return {
        "id": row.id,
        "poNumber": row.po_number,
        "prNumber": row.pr_number,
        "projectName": row.project_name,
        "supplierName": row.supplier_name,
        "totalAmount": _money(row.total_amount),
        "status": row.status.value,
        "expectedDeliveryDate": _iso(row.expected_delivery_date),
        "receivedDate": _iso(row.received_date),
    }


def serialize_pending_delivery(row: PurchaseOrderRow) -> dict[str, object]:
    return {
        "id": row.id,
        "poNumber": row.po_number,
        "projectName": row.project_name,
        "supplierName": row.supplier_name,
        "expectedDeliveryDate": _iso(row.expected_delivery_date),
    }


# ---------- Builders ----------
def _expense_sum_task(project_id: int) -> ReportTask:
    def task(repo: ReportingRepository) -> Decimal:
        return repo.sum_expense_amount(project_id)

    return task


class RoleReportBuilder:
    """Shared KPI envelope and per-project budget fan-out."""

    role: ReportRole

    def __init__(self, fanout: ReportFanOut, settings: Settings) -> None:
        self.fanout = fanout
        self.settings = settings

    def build(self, request: ReportRequest, scope: ScopeContext) -> dict[str, object]:
        raise NotImplementedError

    @staticmethod
    def kpi_tasks(request: ReportRequest, scope: ScopeContext) -> dict[str, ReportTask]:
        project_ids = scope.query_project_ids
        user_id = request.user_id
        return {
            "kpis.active_projects": lambda repo: repo.count_projects(project_ids, status=ProjectStatus.ACTIVE),
            "kpis.total_projects": lambda repo: repo.count_projects(project_ids),
            "kpis.unread_notifications": lambda repo: repo.count_notifications(user_id, is_read=False),
        }

    @staticmethod
    def kpis(results: dict[str, object]) -> dict[str, object]:
        return {
            "activeProjects": results["kpis.active_projects"],
            "totalProjects": results["kpis.total_projects"],
            "unreadNotifications": results["kpis.unread_notifications"],
        }

    def budget_usages(self, projects: list[Project]) -> list[BudgetUsage]:
        # One task per project; each reads only its own expenses.
        spent = self.fanout.gather(
            {f"budget.project_{project.id}": _expense_sum_task(project.id) for project in projects}
        )
        return [budget_usage(project, spent[f"budget.project_{project.id}"]) for project in projects]


class ProjectManagerReportBuilder(RoleReportBuilder):
    role = ReportRole.PROJECT_MANAGER

    def build(self, request: ReportRequest, scope: ScopeContext) -> dict[str, object]:
        project_ids = scope.query_project_ids
        expenses_limit = self.settings.report_recent_expenses_limit

        results = self.fanout.gather(
            {
                **self.kpi_tasks(request, scope),
                "projects": lambda repo: repo.list_projects(project_ids),
                # Approvals are a PM-wide responsibility, not limited to managed projects.
                "pending_approvals": lambda repo: repo.count_purchase_requests(
                    status=PurchaseRequestStatus.PENDING
                ),
                "equipment_total": lambda repo: repo.count_equipment(project_ids),
                "equipment_in_use": lambda repo: repo.count_equipment(
                    project_ids, status=EquipmentStatus.IN_USE
                ),
                "assigned_employees": lambda repo: repo.count_assignments(project_ids, is_active=True),
                "inventory": lambda repo: repo.list_inventory(project_ids),
                "recent_expenses": lambda repo: repo.list_expenses(project_ids, limit=expenses_limit),
            }
        )

        projects: list[Project] = list(results["projects"])
        usages = self.budget_usages(projects)
        overruns = [usage for usage in usages if budget_overrun(usage)]
        utilization = resource_utilization(
            results["equipment_total"],
            results["equipment_in_use"],
            results["assigned_employees"],
        )
        low_stock_count = len(low_stock_alerts(results["inventory"]))

        return {
            "role": request.role_label,
            "kpis": {
                **self.kpis(results),
                "pendingApprovals": results["pending_approvals"],
                "lowStockItems": low_stock_count,
                "equipmentInUse": results["equipment_in_use"],
                "budgetOverruns": len(overruns),
            },
            "budgetUsage": [serialize_budget_usage(usage) for usage in usages],
            "projectProgress": [
                {"name": project.name, "progress": project.progress, "status": project.status.value}
                for project in projects
            ],
            "recentExpenses": [serialize_expense(row) for row in results["recent_expenses"]],
            "resourceUtilization": serialize_utilization(utilization),
            "budgetOverruns": [
                {
                    "projectName": usage.project_name,
                    "budget": _money(usage.budget),
                    "spent": _money(usage.spent),
                    "overrun": _money(overrun_amount(usage)),
                }
                for usage in overruns
            ],
        }


class SiteSupervisorReportBuilder(RoleReportBuilder):
    role = ReportRole.SITE_SUPERVISOR

    def build(self, request: ReportRequest, scope: ScopeContext) -> dict[str, object]:
        project_ids = scope.query_project_ids
        rows_limit = self.settings.report_recent_rows_limit
        today = request.today

        results = self.fanout.gather(
            {
                **self.kpi_tasks(request, scope),
                "today_timesheets": lambda repo: repo.list_timesheets(project_ids, work_date=today),
                "inventory": lambda repo: repo.list_inventory(project_ids),
                "equipment_logs": lambda repo: repo.list_equipment(project_ids, limit=rows_limit),
                "equipment_in_use": lambda repo: repo.count_equipment(
                    project_ids, status=EquipmentStatus.IN_USE
                ),
                "recent_timesheets": lambda repo: repo.list_timesheets(project_ids, limit=rows_limit),
            }
        )

        today_timesheets: list[TimesheetRow] = results["today_timesheets"]
        daily = daily_hours_aggregate(today_timesheets, today)
        inventory: list[InventoryRow] = results["inventory"]
        alerts = low_stock_alerts(inventory)

        return {
            "role": request.role_label,
            "kpis": {
                **self.kpis(results),
                "todayWorkers": daily.worker_count,
                "todayHours": _money(daily.total_hours),
                "lowStockAlerts": len(alerts),
                "equipmentInUse": results["equipment_in_use"],
            },
            "scope": {
                "projectIds": list(scope.project_ids or ()),
                "fallbackApplied": scope.fallback_applied,
            },
            "date": today.isoformat(),
            "dailyActivity": {
                "todayTimesheets": [serialize_timesheet(row) for row in today_timesheets],
                "totalHours": _money(daily.total_hours),
            },
            "materialStock": [serialize_material_stock(row) for row in inventory],
            "lowStockAlerts": [serialize_low_stock_alert(alert) for alert in alerts],
            "equipmentLogs": [serialize_equipment(row) for row in results["equipment_logs"]],
            "recentTimesheets": [serialize_timesheet(row) for row in results["recent_timesheets"]],
        }


class ProcurementOfficerReportBuilder(RoleReportBuilder):
    role = ReportRole.PROCUREMENT_OFFICER

    def build(self, request: ReportRequest, scope: ScopeContext) -> dict[str, object]:
        rows_limit = self.settings.report_recent_rows_limit

        results = self.fanout.gather(
            {
                **self.kpi_tasks(request, scope),
                "approved_requests": lambda repo: repo.list_purchase_requests(
                    status=PurchaseRequestStatus.APPROVED
                ),
                "purchase_orders": lambda repo: repo.list_purchase_orders(limit=rows_limit),
                "pending_deliveries": lambda repo: repo.count_purchase_orders(status=PurchaseOrderStatus.ISSUED),
                "active_suppliers": lambda repo: repo.count_suppliers(is_active=True),
            }
        )

        approved: list[PurchaseRequestRow] = results["approved_requests"]
        orders: list[PurchaseOrderRow] = results["purchase_orders"]

        return {
            "role": request.role_label,
            "kpis": {
                **self.kpis(results),
                "approvedPRs": len(approved),
                "pendingDeliveries": results["pending_deliveries"],
                "totalProcurementExpenses": _money(procurement_totals(approved)),
                "activeSuppliers": results["active_suppliers"],
            },
            "approvedPurchaseRequests": [serialize_purchase_request(row) for row in approved],
            "purchaseOrders": [serialize_purchase_order(row) for row in orders],
            "pendingDeliveriesList": [
                serialize_pending_delivery(row) for row in orders if row.status is PurchaseOrderStatus.ISSUED
            ],
        }


class DefaultReportBuilder(RoleReportBuilder):
    role = ReportRole.DEFAULT

    def build(self, request: ReportRequest, scope: ScopeContext) -> dict[str, object]:
        expenses_limit = self.settings.report_recent_expenses_limit

        results = self.fanout.gather(
            {
                **self.kpi_tasks(request, scope),
                "projects": lambda repo: repo.list_projects(),
                "recent_expenses": lambda repo: repo.list_expenses(limit=expenses_limit),
            }
        )
        usages = self.budget_usages(list(results["projects"]))

        return {
            "role": request.role_label,
            "kpis": self.kpis(results),
            "budgetUsage": [serialize_budget_usage(usage) for usage in usages],
            "recentExpenses": [serialize_expense(row) for row in results["recent_expenses"]],
        }
