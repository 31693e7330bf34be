from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from siteops.models.entities import Project, PurchaseRequestStatus, TimesheetStatus
from siteops.repositories.reporting_repository import InventoryRow, PurchaseRequestRow, TimesheetRow
from siteops.services.report_metrics import (
    budget_overrun,
    budget_usage,
    daily_hours_aggregate,
    is_low_stock,
    low_stock_alerts,
    overrun_amount,
    procurement_totals,
    resource_utilization,
    safe_percentage,
)


def _project(budget: str, *, project_id: int = 1, name: str = "Downtown") -> Project:
    return Project(id=project_id, name=name, budget=Decimal(budget))


def _inventory(quantity: str, min_stock: str, *, material_name: str = "Cement") -> InventoryRow:
    return InventoryRow(
        project_id=1,
        project_name="Project X",
        material_id=1,
        material_name=material_name,
        unit="bag",
        quantity=Decimal(quantity),
        min_stock=Decimal(min_stock),
    )


def _timesheet(row_id: int, work_date: date, hours: str) -> TimesheetRow:
    return TimesheetRow(
        id=row_id,
        project_id=1,
        project_name="Project X",
        employee_id=row_id,
        employee_first_name="Site",
        employee_last_name=f"Worker {row_id}",
        work_date=work_date,
        hours_worked=Decimal(hours),
        status=TimesheetStatus.PENDING,
    )


def _approved_request(row_id: int, total: str) -> PurchaseRequestRow:
    return PurchaseRequestRow(
        id=row_id,
        pr_number=f"PR-{row_id}",
        project_id=1,
        project_name="Project X",
        supplier_name="Acme",
        status=PurchaseRequestStatus.APPROVED,
        total_amount=Decimal(total),
        approved_at=datetime(2026, 10, 1),
    )


def test_safe_percentage_guards_zero_denominator() -> None:
    assert safe_percentage(5, 0) == Decimal("0.00")
    assert safe_percentage(1, 3) == Decimal("33.33")
    assert safe_percentage(Decimal("5500000"), Decimal("5000000")) == Decimal("110.00")


def test_budget_usage_over_budget_reports_overrun() -> None:
    usage = budget_usage(_project("5000000.00"), Decimal("5500000.00"))

    assert usage.percentage == Decimal("110.00")
    assert usage.remaining == Decimal("-500000.00")
    assert budget_overrun(usage) is True
    assert overrun_amount(usage) == Decimal("500000.00")


def test_budget_usage_at_exact_budget_is_not_an_overrun() -> None:
    usage = budget_usage(_project("1000.00"), Decimal("1000.00"))

    assert usage.percentage == Decimal("100.00")
    assert budget_overrun(usage) is False


def test_budget_usage_without_expenses() -> None:
    usage = budget_usage(_project("250000.00"), Decimal("0"))

    assert usage.spent == Decimal("0.00")
    assert usage.percentage == Decimal("0.00")
    assert usage.remaining == Decimal("250000.00")


def test_zero_budget_percentage_policy() -> None:
    untouched = budget_usage(_project("0.00"), Decimal("0.00"))
    assert untouched.percentage == Decimal("0.00")
    assert untouched.percentage_defined is True
    assert budget_overrun(untouched) is False

    spent = budget_usage(_project("0.00"), Decimal("120.00"))
    assert spent.percentage is None
    assert spent.percentage_defined is False
    assert budget_overrun(spent) is True
    assert overrun_amount(spent) == Decimal("120.00")


def test_resource_utilization_with_no_equipment_or_staff() -> None:
    utilization = resource_utilization(0, 0, 0)

    assert utilization.equipment.utilization_rate == Decimal("0.00")
    assert utilization.equipment.available == 0
    assert utilization.employees.utilization_rate == Decimal("0.00")


def test_resource_utilization_rates() -> None:
    utilization = resource_utilization(4, 3, 7)

    assert utilization.equipment.in_use == 3
    assert utilization.equipment.available == 1
    assert utilization.equipment.utilization_rate == Decimal("75.00")
    assert utilization.employees.total == 7
    assert utilization.employees.utilization_rate == Decimal("100.00")


def test_low_stock_uses_strict_inequality() -> None:
    below = _inventory("80", "100")
    at_minimum = _inventory("100", "100", material_name="Sand")

    assert is_low_stock(below) is True
    assert is_low_stock(at_minimum) is False

    alerts = low_stock_alerts([below, at_minimum])
    assert [alert.material_name for alert in alerts] == ["Cement"]
    assert alerts[0].current_stock == Decimal("80.00")
    assert alerts[0].min_stock == Decimal("100.00")


def test_daily_hours_counts_only_requested_date() -> None:
    today = date(2026, 10, 17)
    rows = [
        _timesheet(1, today, "8.00"),
        _timesheet(2, today, "6.50"),
        _timesheet(3, date(2026, 10, 16), "9.00"),
    ]

    daily = daily_hours_aggregate(rows, today)

    assert daily.worker_count == 2
    assert daily.total_hours == Decimal("14.50")


def test_daily_hours_for_empty_day() -> None:
    daily = daily_hours_aggregate([], date(2026, 10, 17))

    assert daily.worker_count == 0
    assert daily.total_hours == Decimal("0.00")


def test_procurement_totals_sum_approved_requests() -> None:
    rows = [_approved_request(1, "1000"), _approved_request(2, "2000"), _approved_request(3, "1500")]

    assert procurement_totals(rows) == Decimal("4500.00")
    assert procurement_totals([]) == Decimal("0.00")
