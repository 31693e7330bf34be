"""Request identity extraction and report role mapping."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from siteops.core.config import get_settings
from siteops.db.dependencies import get_db_session
from siteops.repositories.reporting_repository import ReportingRepository


class ReportRole(str, Enum):
    """Closed set of dashboard variants; stored role names map onto these."""

    PROJECT_MANAGER = "Project Manager"
    SITE_SUPERVISOR = "Site Supervisor"
    PROCUREMENT_OFFICER = "Procurement Officer"
    DEFAULT = "default"

    @classmethod
    def from_role_name(cls, role_name: str | None) -> ReportRole:
        """Map a stored role name; Admin and any unknown role get the default report."""

        normalized = (role_name or "").strip().lower()
        for member in (cls.PROJECT_MANAGER, cls.SITE_SUPERVISOR, cls.PROCUREMENT_OFFICER):
            if member.value.lower() == normalized:
                return member
        return cls.DEFAULT


@dataclass(frozen=True)
class RequestUserContext:
    """Authenticated request actor resolved from headers and DB state."""

    user_id: int
    email: str
    display_name: str
    role_name: str

    @property
    def report_role(self) -> ReportRole:
        return ReportRole.from_role_name(self.role_name)


def _resolve_email(x_user_email: str | None) -> str:
    if x_user_email and x_user_email.strip():
        return x_user_email.strip().lower()

    settings = get_settings()
    if settings.auth_allow_dev_principal:
        return settings.auth_dev_email.strip().lower()

    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Missing identity header. Expected X-USER-EMAIL or enable development principal fallback.",
    )


def get_current_user_context(
    x_user_email: str | None = Header(default=None, alias="X-USER-EMAIL"),
    db: Session = Depends(get_db_session),
) -> RequestUserContext:
    """Resolve current request user and its role.

    Identity is asserted by a trusted proxy header; token validation lives in
    the authentication service, not here.
    """

    email = _resolve_email(x_user_email)
    identity = ReportingRepository(db).find_user_by_email(email)
    # Hand the pooled connection back before report fan-out checks out its own.
    db.close()
    if identity is None or not identity.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="No active user is registered for this identity.",
        )

    return RequestUserContext(
        user_id=identity.id,
        email=identity.email,
        display_name=f"{identity.first_name} {identity.last_name}".strip(),
        role_name=identity.role_name,
    )
