from __future__ import annotations

from decimal import Decimal

from sqlalchemy.orm import Session

from siteops.models.entities import PurchaseRequestItem, PurchaseRequestStatus
from siteops.repositories.reporting_repository import ReportingRepository


def test_identity_lookups_include_role_name(db_session: Session, seed) -> None:
    user = seed.user("Procurement Officer", email="Buyer@SiteOps.test", first_name="Bea", last_name="Buyer")
    repo = ReportingRepository(db_session)

    by_id = repo.get_user(user.id)
    by_email = repo.find_user_by_email("  buyer@siteops.TEST ")

    assert by_id is not None
    assert by_id.role_name == "Procurement Officer"
    assert by_email == by_id
    assert repo.get_user(user.id + 100) is None
    assert repo.find_user_by_email("nobody@siteops.test") is None


def test_expense_sum_is_zero_without_rows(db_session: Session, seed) -> None:
    manager = seed.user("Project Manager")
    empty = seed.project(manager)
    funded = seed.project(manager)
    seed.expense(funded, manager, "10.25")
    seed.expense(funded, manager, "4.75")
    repo = ReportingRepository(db_session)

    assert repo.sum_expense_amount(empty.id) == Decimal("0.00")
    assert repo.sum_expense_amount(funded.id) == Decimal("15.00")


def test_sentinel_project_filter_matches_nothing(db_session: Session, seed) -> None:
    manager = seed.user("Project Manager")
    project = seed.project(manager)
    seed.expense(project, manager, "1.00")
    seed.equipment(project)
    repo = ReportingRepository(db_session)

    assert repo.count_projects((0,)) == 0
    assert repo.list_expenses((0,), limit=5) == []
    assert repo.count_equipment((0,)) == 0
    assert repo.count_projects() == 1


def test_purchase_requests_carry_items_with_material_names(db_session: Session, seed) -> None:
    manager = seed.user("Project Manager")
    project = seed.project(manager, name="Depot")
    supplier = seed.supplier()
    cement = seed.material("Cement", min_stock="10")
    approved = seed.purchase_request(project, supplier, manager, "500.00")
    seed.purchase_request(project, supplier, manager, "80.00", status=PurchaseRequestStatus.REJECTED)
    db_session.add(
        PurchaseRequestItem(
            purchase_request_id=approved.id,
            material_id=cement.id,
            quantity=Decimal("50"),
            unit_price=Decimal("10.00"),
            total_price=Decimal("500.00"),
        )
    )
    db_session.commit()
    repo = ReportingRepository(db_session)

    rows = repo.list_purchase_requests(status=PurchaseRequestStatus.APPROVED)

    assert [row.pr_number for row in rows] == [approved.pr_number]
    assert rows[0].project_name == "Depot"
    assert [item.material_name for item in rows[0].items] == ["Cement"]
    assert repo.count_purchase_requests(status=PurchaseRequestStatus.REJECTED) == 1
