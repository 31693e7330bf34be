"""Pure metric calculators shared by role report builders.

Every division and empty-set guard used by the dashboards lives here so that
builders never re-derive a zero check inline. Calculators take rows that were
already fetched and never touch the database.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from siteops.models.entities import Project
from siteops.repositories.reporting_repository import InventoryRow, PurchaseRequestRow, TimesheetRow

ZERO = Decimal("0.00")
Q2 = Decimal("0.01")
HUNDRED = Decimal("100")


@dataclass(slots=True)
class BudgetUsage:
    project_id: int
    project_name: str
    budget: Decimal
    spent: Decimal
    remaining: Decimal
    # None when spending was booked against a zero budget.
    percentage: Decimal | None

    @property
    def percentage_defined(self) -> bool:
        return self.percentage is not None


@dataclass(slots=True)
class EquipmentUtilization:
    total: int
    in_use: int
    available: int
    utilization_rate: Decimal


@dataclass(slots=True)
class EmployeeUtilization:
    total: int
    utilization_rate: Decimal


@dataclass(slots=True)
class ResourceUtilization:
    equipment: EquipmentUtilization
    employees: EmployeeUtilization


@dataclass(slots=True)
class LowStockAlert:
    project_name: str
    material_name: str
    current_stock: Decimal
    min_stock: Decimal
    unit: str


@dataclass(slots=True)
class DailyHours:
    worker_count: int
    total_hours: Decimal


def _q2(value: Decimal) -> Decimal:
    return value.quantize(Q2)


def safe_percentage(numerator: Decimal | int, denominator: Decimal | int) -> Decimal:
    """``numerator / denominator * 100`` rounded to cents, 0 for a zero denominator."""

    denominator = Decimal(denominator)
    if denominator == 0:
        return ZERO
    return _q2(Decimal(numerator) * HUNDRED / denominator)


def budget_usage(project: Project, spent: Decimal) -> BudgetUsage:
    """Budget burn for one project.

    Zero budget: percentage is 0 when nothing was spent, otherwise undefined
    (``None``) rather than an infinite ratio.
    """

    budget = _q2(Decimal(project.budget))
    spent = _q2(Decimal(spent))
    if budget == ZERO and spent > ZERO:
        percentage = None
    else:
        percentage = safe_percentage(spent, budget)

    return BudgetUsage(
        project_id=project.id,
        project_name=project.name,
        budget=budget,
        spent=spent,
        remaining=_q2(budget - spent),
        percentage=percentage,
    )


def budget_overrun(usage: BudgetUsage) -> bool:
    """Spending exceeds budget; equals ``percentage > 100`` for positive budgets."""

    return usage.spent > usage.budget


def overrun_amount(usage: BudgetUsage) -> Decimal:
    return _q2(usage.spent - usage.budget)


def resource_utilization(
    total_equipment: int,
    in_use_equipment: int,
    total_assigned_employees: int,
) -> ResourceUtilization:
    # Assigned employees count as fully utilized; there is no occupancy data.
    employee_rate = HUNDRED if total_assigned_employees > 0 else ZERO
    return ResourceUtilization(
        equipment=EquipmentUtilization(
            total=total_equipment,
            in_use=in_use_equipment,
            available=total_equipment - in_use_equipment,
            utilization_rate=safe_percentage(in_use_equipment, total_equipment),
        ),
        employees=EmployeeUtilization(
            total=total_assigned_employees,
            utilization_rate=_q2(employee_rate),
        ),
    )


def is_low_stock(row: InventoryRow) -> bool:
    return Decimal(row.quantity) < Decimal(row.min_stock)


def low_stock_alerts(rows: Iterable[InventoryRow]) -> list[LowStockAlert]:
    return [
        LowStockAlert(
            project_name=row.project_name,
            material_name=row.material_name,
            current_stock=_q2(Decimal(row.quantity)),
            min_stock=_q2(Decimal(row.min_stock)),
            unit=row.unit,
        )
        for row in rows
        if is_low_stock(row)
    ]


def daily_hours_aggregate(rows: Iterable[TimesheetRow], for_date: date) -> DailyHours:
    worker_count = 0
    total_hours = ZERO
    for row in rows:
        if row.work_date != for_date:
            continue
        worker_count += 1
        total_hours += Decimal(row.hours_worked or ZERO)
    return DailyHours(worker_count=worker_count, total_hours=_q2(total_hours))


def procurement_totals(approved_requests: Iterable[PurchaseRequestRow]) -> Decimal:
    total = ZERO
    for request in approved_requests:
        total += Decimal(request.total_amount or ZERO)
    return _q2(total)
