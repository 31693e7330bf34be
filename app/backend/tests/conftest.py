from __future__ import annotations

from collections.abc import Generator
from datetime import date, datetime, timedelta
from decimal import Decimal
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from siteops.core.config import Settings
from siteops.db.base import Base
from siteops.db.dependencies import get_db_session, get_session_factory
import siteops.models.entities  # noqa: F401
from siteops.main import create_app
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
    PurchaseRequestStatus,
    Role,
    Supplier,
    Timesheet,
    User,
)

BASE_TIME = datetime(2026, 10, 1, 8, 0, 0)


@pytest.fixture()
def session_factory(tmp_path: Path) -> Generator[sessionmaker, None, None]:
    # File-backed database: every fan-out worker thread opens its own connection.
    engine = create_engine(
        f"sqlite+pysqlite:///{tmp_path / 'reporting.db'}",
        connect_args={"check_same_thread": False},
        future=True,
    )
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    try:
        yield factory
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(session_factory: sessionmaker) -> Generator[Session, None, None]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        report_fanout_workers=4,
        report_timeout_seconds=10.0,
        auth_allow_dev_principal=True,
    )


@pytest.fixture()
def client(session_factory: sessionmaker) -> Generator[TestClient, None, None]:
    app = create_app()

    def override_db() -> Generator[Session, None, None]:
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db_session] = override_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture()
def seed(db_session: Session) -> SiteSeeder:
    return SiteSeeder(db_session)


class SiteSeeder:
    """Small row factory for reporting tests; every helper commits."""

    def __init__(self, db: Session) -> None:
        self.db = db
        self._counter = 0
        self._roles: dict[str, Role] = {}

    def _next(self) -> int:
        self._counter += 1
        return self._counter

    def _save(self, row):
        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)
        return row

    def role(self, name: str) -> Role:
        if name not in self._roles:
            self._roles[name] = self._save(Role(name=name, description=f"{name} role"))
        return self._roles[name]

    def user(
        self,
        role_name: str,
        *,
        email: str | None = None,
        first_name: str = "Test",
        last_name: str = "User",
        is_active: bool = True,
    ) -> User:
        n = self._next()
        return self._save(
            User(
                username=f"user{n}",
                email=email or f"user{n}@siteops.test",
                first_name=first_name,
                last_name=last_name,
                role_id=self.role(role_name).id,
                is_active=is_active,
                created_at=BASE_TIME,
            )
        )

    def project(
        self,
        manager: User,
        *,
        name: str | None = None,
        budget: str = "1000000.00",
        status: ProjectStatus = ProjectStatus.ACTIVE,
        progress: int = 0,
    ) -> Project:
        n = self._next()
        return self._save(
            Project(
                name=name or f"Project {n}",
                code=f"PRJ-{n:03d}",
                location="Site",
                budget=Decimal(budget),
                start_date=date(2026, 1, 1),
                status=status,
                progress=progress,
                project_manager_id=manager.id,
                created_at=BASE_TIME,
                updated_at=BASE_TIME,
            )
        )

    def expense(
        self,
        project: Project,
        recorder: User,
        amount: str,
        *,
        category: str = "Materials",
        created_offset_minutes: int = 0,
    ) -> Expense:
        return self._save(
            Expense(
                project_id=project.id,
                category=category,
                amount=Decimal(amount),
                expense_date=date(2026, 10, 1),
                recorded_by_id=recorder.id,
                created_at=BASE_TIME + timedelta(minutes=created_offset_minutes),
            )
        )

    def material(self, name: str, *, min_stock: str, unit: str = "bag") -> Material:
        return self._save(Material(name=name, unit=unit, unit_cost=Decimal("10.00"), min_stock=Decimal(min_stock)))

    def inventory(self, project: Project, material: Material, quantity: str) -> Inventory:
        return self._save(
            Inventory(
                project_id=project.id,
                material_id=material.id,
                quantity=Decimal(quantity),
                updated_at=BASE_TIME,
            )
        )

    def equipment(
        self,
        project: Project | None,
        *,
        status: EquipmentStatus = EquipmentStatus.IN_USE,
        name: str | None = None,
    ) -> Equipment:
        n = self._next()
        return self._save(
            Equipment(
                name=name or f"Excavator {n}",
                type="Heavy",
                serial_number=f"SN-{n}",
                status=status,
                project_id=project.id if project is not None else None,
                updated_at=BASE_TIME + timedelta(minutes=n),
            )
        )

    def employee(self, *, email: str | None = None, first_name: str = "Site", last_name: str = "Worker") -> Employee:
        n = self._next()
        return self._save(
            Employee(
                employee_code=f"EMP-{n:03d}",
                first_name=first_name,
                last_name=last_name,
                email=email,
                position="Crew",
                is_active=True,
            )
        )

    def assignment(self, employee: Employee, project: Project, *, is_active: bool = True) -> Assignment:
        return self._save(
            Assignment(
                employee_id=employee.id,
                project_id=project.id,
                start_date=date(2026, 1, 1),
                is_active=is_active,
            )
        )

    def timesheet(self, project: Project, employee: Employee, work_date: date, hours: str) -> Timesheet:
        return self._save(
            Timesheet(
                project_id=project.id,
                employee_id=employee.id,
                work_date=work_date,
                hours_worked=Decimal(hours),
            )
        )

    def supplier(self, name: str = "Acme Supply", *, is_active: bool = True) -> Supplier:
        return self._save(Supplier(name=name, contact_email="sales@acme.test", is_active=is_active))

    def purchase_request(
        self,
        project: Project,
        supplier: Supplier,
        requester: User,
        total_amount: str,
        *,
        status: PurchaseRequestStatus = PurchaseRequestStatus.APPROVED,
    ) -> PurchaseRequest:
        n = self._next()
        approved = status is PurchaseRequestStatus.APPROVED
        return self._save(
            PurchaseRequest(
                pr_number=f"PR-{n:04d}",
                project_id=project.id,
                supplier_id=supplier.id,
                requested_by_id=requester.id,
                status=status,
                approved_by_id=requester.id if approved else None,
                approved_at=BASE_TIME + timedelta(minutes=n) if approved else None,
                total_amount=Decimal(total_amount),
                created_at=BASE_TIME,
            )
        )

    def purchase_order(
        self,
        request: PurchaseRequest,
        *,
        status: PurchaseOrderStatus = PurchaseOrderStatus.ISSUED,
    ) -> PurchaseOrder:
        n = self._next()
        return self._save(
            PurchaseOrder(
                po_number=f"PO-{n:04d}",
                purchase_request_id=request.id,
                status=status,
                issued_date=date(2026, 10, 1),
                expected_delivery_date=date(2026, 10, 20),
                received_date=date(2026, 10, 15) if status is PurchaseOrderStatus.RECEIVED else None,
                total_amount=request.total_amount,
                created_at=BASE_TIME + timedelta(minutes=n),
            )
        )

    def notification(self, user: User, *, is_read: bool = False) -> Notification:
        return self._save(Notification(user_id=user.id, title="Heads up", is_read=is_read, created_at=BASE_TIME))
