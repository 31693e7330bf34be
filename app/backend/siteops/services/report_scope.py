"""Project scope resolution for role dashboards."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass

from siteops.core.auth import ReportRole
from siteops.core.errors import ScopeResolutionFailure
from siteops.models.entities import ProjectStatus
from siteops.repositories.reporting_repository import ReportingRepository
from siteops.services.report_fanout import ReportFanOut

logger = logging.getLogger(__name__)

# Autoincrement ids start at 1, so no project ever matches this id.
NO_PROJECT_SENTINEL = 0


class ScopeFallbackPolicy(str, enum.Enum):
    """What a scoped role sees when it has no explicit project scope."""

    NONE = "none"
    # Broad-access default: a supervisor without assignments sees every active project.
    ALL_ACTIVE_PROJECTS = "all_active_projects"


ROLE_FALLBACK_POLICY: dict[ReportRole, ScopeFallbackPolicy] = {
    ReportRole.PROJECT_MANAGER: ScopeFallbackPolicy.NONE,
    ReportRole.SITE_SUPERVISOR: ScopeFallbackPolicy.ALL_ACTIVE_PROJECTS,
    ReportRole.PROCUREMENT_OFFICER: ScopeFallbackPolicy.NONE,
    ReportRole.DEFAULT: ScopeFallbackPolicy.NONE,
}


@dataclass(frozen=True)
class ScopeContext:
    """Projects visible to one (role, user) pair; ``project_ids=None`` means unscoped."""

    role: ReportRole
    project_ids: tuple[int, ...] | None
    employee_id: int | None = None
    fallback_applied: bool = False

    @property
    def is_scoped(self) -> bool:
        return self.project_ids is not None

    @property
    def query_project_ids(self) -> tuple[int, ...] | None:
        """Ids to filter queries by; an empty scope becomes the impossible-match sentinel."""

        if self.project_ids is None:
            return None
        return self.project_ids or (NO_PROJECT_SENTINEL,)


def _unique_ids(ids: list[int]) -> tuple[int, ...]:
    return tuple(sorted(dict.fromkeys(ids)))


def _apply_fallback(repo: ReportingRepository, policy: ScopeFallbackPolicy) -> tuple[int, ...]:
    if policy is ScopeFallbackPolicy.ALL_ACTIVE_PROJECTS:
        return _unique_ids([project.id for project in repo.list_projects(status=ProjectStatus.ACTIVE)])
    return ()


class ScopeResolver:
    """Resolves report scope through the report's fan-out executor."""

    def __init__(self, fanout: ReportFanOut) -> None:
        self.fanout = fanout

    def resolve(self, role: ReportRole, *, user_id: int, user_email: str) -> ScopeContext:
        if role is ReportRole.PROJECT_MANAGER:
            project_ids = self.fanout.run(
                "scope.managed_projects",
                lambda repo: _unique_ids([p.id for p in repo.list_projects(project_manager_id=user_id)]),
                failure_cls=ScopeResolutionFailure,
            )
            return ScopeContext(role=role, project_ids=project_ids)

        if role is ReportRole.SITE_SUPERVISOR:
            return self.fanout.run(
                "scope.supervisor_assignments",
                lambda repo: self._resolve_supervisor(repo, user_email=user_email),
                failure_cls=ScopeResolutionFailure,
            )

        return ScopeContext(role=role, project_ids=None)

    @staticmethod
    def _resolve_supervisor(repo: ReportingRepository, *, user_email: str) -> ScopeContext:
        role = ReportRole.SITE_SUPERVISOR
        employee = repo.find_employee_by_email(user_email)
        employee_id = employee.id if employee is not None else None

        project_ids: tuple[int, ...] = ()
        if employee is not None:
            assignments = repo.list_assignments(employee.id, is_active=True)
            project_ids = _unique_ids([assignment.project_id for assignment in assignments])

        if project_ids:
            return ScopeContext(role=role, project_ids=project_ids, employee_id=employee_id)

        policy = ROLE_FALLBACK_POLICY[role]
        logger.info(
            "Supervisor %s has no active assignments; applying scope fallback %s",
            user_email,
            policy.value,
        )
        return ScopeContext(
            role=role,
            project_ids=_apply_fallback(repo, policy),
            employee_id=employee_id,
            fallback_applied=True,
        )
