"""Current user endpoint."""

from fastapi import APIRouter, Depends

from siteops.core.auth import RequestUserContext, get_current_user_context

router = APIRouter(prefix="/me", tags=["me"])


@router.get("")
def get_me(context: RequestUserContext = Depends(get_current_user_context)) -> dict[str, object]:
    """Return current user profile and the dashboard variant its role receives."""

    return {
        "id": context.user_id,
        "email": context.email,
        "display_name": context.display_name,
        "role": context.role_name,
        "dashboard": context.report_role.value,
    }
