"""Read-only repository helpers consumed by the reporting engine."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import and_, func, select
from sqlalchemy.orm import Session, aliased

from siteops.models.entities import (
    Assignment,
    Employee,
    Equipment,
    EquipmentStatus,
    Expense,
    Inventory,
    Material,
    Notification,
    Project,
    ProjectStatus,
    PurchaseOrder,
    PurchaseOrderStatus,
    PurchaseRequest,
    PurchaseRequestItem,
    PurchaseRequestStatus,
    Role,
    Supplier,
    Timesheet,
    TimesheetStatus,
    User,
)

ZERO = Decimal("0.00")


@dataclass(slots=True)
class InventoryRow:
    project_id: int
    project_name: str
    material_id: int
    material_name: str
    unit: str
    quantity: Decimal
    min_stock: Decimal


@dataclass(slots=True)
class ExpenseRow:
    id: int
    project_id: int
    project_name: str
    category: str
    amount: Decimal
    expense_date: date
    created_at: datetime
    recorded_by_id: int
    recorded_by_name: str


@dataclass(slots=True)
class EquipmentRow:
    id: int
    name: str
    type: str
    status: EquipmentStatus
    project_id: int | None
    project_name: str | None


@dataclass(slots=True)
class TimesheetRow:
    id: int
    project_id: int
    project_name: str
    employee_id: int
    employee_first_name: str
    employee_last_name: str
    work_date: date
    hours_worked: Decimal
    status: TimesheetStatus

    @property
    def employee_name(self) -> str:
        return f"{self.employee_first_name} {self.employee_last_name}"


@dataclass(slots=True)
class PurchaseRequestItemRow:
    material_name: str
    quantity: Decimal
    unit_price: Decimal


@dataclass(slots=True)
class PurchaseRequestRow:
    id: int
    pr_number: str
    project_id: int
    project_name: str
    supplier_name: str
    status: PurchaseRequestStatus
    total_amount: Decimal
    approved_at: datetime | None
    items: list[PurchaseRequestItemRow] = field(default_factory=list)


@dataclass(slots=True)
class PurchaseOrderRow:
    id: int
    po_number: str
    pr_number: str
    project_name: str
    supplier_name: str
    total_amount: Decimal
    status: PurchaseOrderStatus
    expected_delivery_date: date | None
    received_date: date | None


@dataclass(slots=True)
class UserIdentityRow:
    id: int
    email: str
    first_name: str
    last_name: str
    is_active: bool
    role_name: str


def _in_projects(column, project_ids: Sequence[int] | None) -> list:
    if project_ids is None:
        return []
    return [column.in_(tuple(project_ids))]


class ReportingRepository:
    """Read operations used by scope resolution and role report builders."""

    def __init__(self, db: Session) -> None:
        self.db = db

    # ---------- Identity ----------
    def _identity_query(self):
        return select(User, Role.name).join(Role, Role.id == User.role_id)

    @staticmethod
    def _identity_row(user: User, role_name: str) -> UserIdentityRow:
        return UserIdentityRow(
            id=user.id,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            is_active=user.is_active,
            role_name=role_name,
        )

    def get_user(self, user_id: int) -> UserIdentityRow | None:
        row = self.db.execute(self._identity_query().where(User.id == user_id)).first()
        if row is None:
            return None
        return self._identity_row(row[0], row[1])

    def find_user_by_email(self, email: str) -> UserIdentityRow | None:
        row = self.db.execute(
            self._identity_query().where(func.lower(User.email) == email.strip().lower())
        ).first()
        if row is None:
            return None
        return self._identity_row(row[0], row[1])

    # ---------- Projects ----------
    def count_projects(
        self,
        project_ids: Sequence[int] | None = None,
        *,
        status: ProjectStatus | None = None,
    ) -> int:
        conditions = _in_projects(Project.id, project_ids)
        if status is not None:
            conditions.append(Project.status == status)
        return self.db.scalar(select(func.count()).select_from(Project).where(and_(True, *conditions))) or 0

    def list_projects(
        self,
        project_ids: Sequence[int] | None = None,
        *,
        status: ProjectStatus | None = None,
        project_manager_id: int | None = None,
    ) -> list[Project]:
        conditions = _in_projects(Project.id, project_ids)
        if status is not None:
            conditions.append(Project.status == status)
        if project_manager_id is not None:
            conditions.append(Project.project_manager_id == project_manager_id)
        return self.db.scalars(
            select(Project).where(and_(True, *conditions)).order_by(Project.id.asc())
        ).all()

    # ---------- Expenses ----------
    def sum_expense_amount(self, project_id: int) -> Decimal:
        total = self.db.scalar(select(func.sum(Expense.amount)).where(Expense.project_id == project_id))
        if total is None:
            return ZERO
        return Decimal(str(total))

    def list_expenses(self, project_ids: Sequence[int] | None = None, *, limit: int) -> list[ExpenseRow]:
        recorder = aliased(User)
        rows = self.db.execute(
            select(Expense, Project.name, recorder.first_name, recorder.last_name)
            .join(Project, Project.id == Expense.project_id)
            .join(recorder, recorder.id == Expense.recorded_by_id)
            .where(and_(True, *_in_projects(Expense.project_id, project_ids)))
            .order_by(Expense.created_at.desc(), Expense.id.desc())
            .limit(limit)
        ).all()
        return [
            ExpenseRow(
                id=expense.id,
                project_id=expense.project_id,
                project_name=project_name,
                category=expense.category,
                amount=expense.amount,
                expense_date=expense.expense_date,
                created_at=expense.created_at,
                recorded_by_id=expense.recorded_by_id,
                recorded_by_name=f"{first_name} {last_name}",
            )
            for expense, project_name, first_name, last_name in rows
        ]

    # ---------- Notifications ----------
    def count_notifications(self, user_id: int, *, is_read: bool) -> int:
        return (
            self.db.scalar(
                select(func.count())
                .select_from(Notification)
                .where(and_(Notification.user_id == user_id, Notification.is_read.is_(is_read)))
            )
            or 0
        )

    # ---------- Employees and assignments ----------
    def find_employee_by_email(self, email: str) -> Employee | None:
        return self.db.scalar(select(Employee).where(func.lower(Employee.email) == email.strip().lower()))

    def list_assignments(self, employee_id: int, *, is_active: bool = True) -> list[Assignment]:
        return self.db.scalars(
            select(Assignment)
            .join(Project, Project.id == Assignment.project_id)
            .where(and_(Assignment.employee_id == employee_id, Assignment.is_active.is_(is_active)))
            .order_by(Assignment.project_id.asc())
        ).all()

    def count_assignments(self, project_ids: Sequence[int] | None, *, is_active: bool = True) -> int:
        return (
            self.db.scalar(
                select(func.count())
                .select_from(Assignment)
                .where(and_(Assignment.is_active.is_(is_active), *_in_projects(Assignment.project_id, project_ids)))
            )
            or 0
        )

    # ---------- Inventory ----------
    def list_inventory(self, project_ids: Sequence[int] | None) -> list[InventoryRow]:
        rows = self.db.execute(
            select(Inventory, Material, Project.name)
            .join(Material, Material.id == Inventory.material_id)
            .join(Project, Project.id == Inventory.project_id)
            .where(and_(True, *_in_projects(Inventory.project_id, project_ids)))
            .order_by(Inventory.project_id.asc(), Material.name.asc())
        ).all()
        return [
            InventoryRow(
                project_id=inventory.project_id,
                project_name=project_name,
                material_id=material.id,
                material_name=material.name,
                unit=material.unit,
                quantity=inventory.quantity,
                min_stock=material.min_stock,
            )
            for inventory, material, project_name in rows
        ]

    # ---------- Equipment ----------
    def count_equipment(
        self,
        project_ids: Sequence[int] | None,
        *,
        status: EquipmentStatus | None = None,
    ) -> int:
        conditions = _in_projects(Equipment.project_id, project_ids)
        if status is not None:
            conditions.append(Equipment.status == status)
        return self.db.scalar(select(func.count()).select_from(Equipment).where(and_(True, *conditions))) or 0

    def list_equipment(self, project_ids: Sequence[int] | None, *, limit: int) -> list[EquipmentRow]:
        rows = self.db.execute(
            select(Equipment, Project.name)
            .outerjoin(Project, Project.id == Equipment.project_id)
            .where(and_(True, *_in_projects(Equipment.project_id, project_ids)))
            .order_by(Equipment.updated_at.desc(), Equipment.id.desc())
            .limit(limit)
        ).all()
        return [
            EquipmentRow(
                id=equipment.id,
                name=equipment.name,
                type=equipment.type,
                status=equipment.status,
                project_id=equipment.project_id,
                project_name=project_name,
            )
            for equipment, project_name in rows
        ]

    # ---------- Timesheets ----------
    def list_timesheets(
        self,
        project_ids: Sequence[int] | None,
        *,
        work_date: date | None = None,
        limit: int | None = None,
    ) -> list[TimesheetRow]:
        conditions = _in_projects(Timesheet.project_id, project_ids)
        if work_date is not None:
            conditions.append(Timesheet.work_date == work_date)

        query = (
            select(Timesheet, Employee.first_name, Employee.last_name, Project.name)
            .join(Employee, Employee.id == Timesheet.employee_id)
            .join(Project, Project.id == Timesheet.project_id)
            .where(and_(True, *conditions))
            .order_by(Timesheet.work_date.desc(), Timesheet.id.desc())
        )
        if limit is not None:
            query = query.limit(limit)

        return [
            TimesheetRow(
                id=timesheet.id,
                project_id=timesheet.project_id,
                project_name=project_name,
                employee_id=timesheet.employee_id,
                employee_first_name=first_name,
                employee_last_name=last_name,
                work_date=timesheet.work_date,
                hours_worked=timesheet.hours_worked,
                status=timesheet.status,
            )
            for timesheet, first_name, last_name, project_name in self.db.execute(query).all()
        ]

    # ---------- Procurement ----------
    def count_purchase_requests(self, *, status: PurchaseRequestStatus) -> int:
        return (
            self.db.scalar(
                select(func.count()).select_from(PurchaseRequest).where(PurchaseRequest.status == status)
            )
            or 0
        )

    def list_purchase_requests(self, *, status: PurchaseRequestStatus) -> list[PurchaseRequestRow]:
        rows = self.db.execute(
            select(PurchaseRequest, Project.name, Supplier.name)
            .join(Project, Project.id == PurchaseRequest.project_id)
            .join(Supplier, Supplier.id == PurchaseRequest.supplier_id)
            .where(PurchaseRequest.status == status)
            .order_by(PurchaseRequest.approved_at.desc(), PurchaseRequest.id.desc())
        ).all()
        if not rows:
            return []

        request_ids = [request.id for request, _project_name, _supplier_name in rows]
        items_by_request: dict[int, list[PurchaseRequestItemRow]] = {}
        item_rows = self.db.execute(
            select(PurchaseRequestItem, Material.name)
            .join(Material, Material.id == PurchaseRequestItem.material_id)
            .where(PurchaseRequestItem.purchase_request_id.in_(request_ids))
            .order_by(PurchaseRequestItem.purchase_request_id.asc(), PurchaseRequestItem.id.asc())
        ).all()
        for item, material_name in item_rows:
            items_by_request.setdefault(item.purchase_request_id, []).append(
                PurchaseRequestItemRow(
                    material_name=material_name,
                    quantity=item.quantity,
                    unit_price=item.unit_price,
                )
            )

        return [
            PurchaseRequestRow(
                id=request.id,
                pr_number=request.pr_number,
                project_id=request.project_id,
                project_name=project_name,
                supplier_name=supplier_name,
                status=request.status,
                total_amount=request.total_amount,
                approved_at=request.approved_at,
                items=items_by_request.get(request.id, []),
            )
            for request, project_name, supplier_name in rows
        ]

    def list_purchase_orders(self, *, limit: int) -> list[PurchaseOrderRow]:
        rows = self.db.execute(
            select(PurchaseOrder, PurchaseRequest.pr_number, Project.name, Supplier.name)
            .join(PurchaseRequest, PurchaseRequest.id == PurchaseOrder.purchase_request_id)
            .join(Project, Project.id == PurchaseRequest.project_id)
            .join(Supplier, Supplier.id == PurchaseRequest.supplier_id)
            .order_by(PurchaseOrder.created_at.desc(), PurchaseOrder.id.desc())
            .limit(limit)
        ).all()
        return [
            PurchaseOrderRow(
                id=order.id,
                po_number=order.po_number,
                pr_number=pr_number,
                project_name=project_name,
                supplier_name=supplier_name,
                total_amount=order.total_amount,
                status=order.status,
                expected_delivery_date=order.expected_delivery_date,
                received_date=order.received_date,
            )
            for order, pr_number, project_name, supplier_name in rows
        ]

    def count_purchase_orders(self, *, status: PurchaseOrderStatus) -> int:
        return (
            self.db.scalar(select(func.count()).select_from(PurchaseOrder).where(PurchaseOrder.status == status))
            or 0
        )

    def count_suppliers(self, *, is_active: bool = True) -> int:
        return (
            self.db.scalar(select(func.count()).select_from(Supplier).where(Supplier.is_active.is_(is_active)))
            or 0
        )
