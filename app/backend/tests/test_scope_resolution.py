from __future__ import annotations

from sqlalchemy.orm import sessionmaker

from siteops.core.auth import ReportRole
from siteops.models.entities import ProjectStatus
from siteops.services.report_fanout import ReportFanOut
from siteops.services.report_scope import NO_PROJECT_SENTINEL, ScopeContext, ScopeResolver


def _resolve(session_factory: sessionmaker, role: ReportRole, *, user_id: int, user_email: str) -> ScopeContext:
    with ReportFanOut(session_factory, max_workers=2, timeout_seconds=10.0) as fanout:
        return ScopeResolver(fanout).resolve(role, user_id=user_id, user_email=user_email)


def test_supervisor_scope_follows_active_assignments(session_factory: sessionmaker, seed) -> None:
    manager = seed.user("Project Manager")
    supervisor = seed.user("Site Supervisor", email="super@siteops.test")
    first = seed.project(manager)
    second = seed.project(manager)
    third = seed.project(manager)
    employee = seed.employee(email="super@siteops.test")
    seed.assignment(employee, second)
    seed.assignment(employee, first)
    seed.assignment(employee, third, is_active=False)

    scope = _resolve(
        session_factory,
        ReportRole.SITE_SUPERVISOR,
        user_id=supervisor.id,
        user_email="super@siteops.test",
    )

    assert scope.project_ids == (first.id, second.id)
    assert scope.employee_id == employee.id
    assert scope.fallback_applied is False


def test_supervisor_without_employee_record_falls_back_to_active_projects(
    session_factory: sessionmaker, seed
) -> None:
    manager = seed.user("Project Manager")
    supervisor = seed.user("Site Supervisor", email="nobody@siteops.test")
    active_a = seed.project(manager)
    seed.project(manager, status=ProjectStatus.COMPLETED)
    active_b = seed.project(manager)

    scope = _resolve(
        session_factory,
        ReportRole.SITE_SUPERVISOR,
        user_id=supervisor.id,
        user_email="nobody@siteops.test",
    )

    assert scope.project_ids == (active_a.id, active_b.id)
    assert scope.employee_id is None
    assert scope.fallback_applied is True


def test_supervisor_with_only_inactive_assignments_falls_back(session_factory: sessionmaker, seed) -> None:
    manager = seed.user("Project Manager")
    supervisor = seed.user("Site Supervisor", email="idle@siteops.test")
    project = seed.project(manager)
    employee = seed.employee(email="idle@siteops.test")
    seed.assignment(employee, project, is_active=False)

    scope = _resolve(
        session_factory,
        ReportRole.SITE_SUPERVISOR,
        user_id=supervisor.id,
        user_email="idle@siteops.test",
    )

    assert scope.project_ids == (project.id,)
    assert scope.employee_id == employee.id
    assert scope.fallback_applied is True


def test_supervisor_fallback_with_no_active_projects_yields_empty_scope(
    session_factory: sessionmaker, seed
) -> None:
    manager = seed.user("Project Manager")
    supervisor = seed.user("Site Supervisor", email="lonely@siteops.test")
    seed.project(manager, status=ProjectStatus.ON_HOLD)

    scope = _resolve(
        session_factory,
        ReportRole.SITE_SUPERVISOR,
        user_id=supervisor.id,
        user_email="lonely@siteops.test",
    )

    assert scope.project_ids == ()
    assert scope.is_scoped is True
    assert scope.query_project_ids == (NO_PROJECT_SENTINEL,)


def test_project_manager_scope_is_managed_projects(session_factory: sessionmaker, seed) -> None:
    manager = seed.user("Project Manager")
    other_manager = seed.user("Project Manager")
    owned = seed.project(manager)
    seed.project(other_manager)

    scope = _resolve(
        session_factory,
        ReportRole.PROJECT_MANAGER,
        user_id=manager.id,
        user_email=manager.email,
    )

    assert scope.project_ids == (owned.id,)
    assert scope.fallback_applied is False


def test_project_manager_without_projects_gets_sentinel_filter(session_factory: sessionmaker, seed) -> None:
    manager = seed.user("Project Manager")

    scope = _resolve(
        session_factory,
        ReportRole.PROJECT_MANAGER,
        user_id=manager.id,
        user_email=manager.email,
    )

    assert scope.project_ids == ()
    assert scope.query_project_ids == (NO_PROJECT_SENTINEL,)


def test_unscoped_roles_see_everything(session_factory: sessionmaker, seed) -> None:
    officer = seed.user("Procurement Officer")

    for role in (ReportRole.PROCUREMENT_OFFICER, ReportRole.DEFAULT):
        scope = _resolve(session_factory, role, user_id=officer.id, user_email=officer.email)
        assert scope.project_ids is None
        assert scope.is_scoped is False
        assert scope.query_project_ids is None
