"""
Permission checking dependencies for route protection.

Implements:
- ``ensure_authorized``: turn a gate ``Decision`` into a 403
- ``require_permission``: any-of permission check with superadmin bypass
- ``require_role``: role slug check
"""
from typing import Any
from fastapi import Depends, HTTPException, status

from recordhub.features.users.dependencies import get_current_user
from recordhub.features.users.models import User
from recordhub.features.permissions.gate import Decision, authorize
from recordhub.features.permissions.registry import collect_permission_keys
from recordhub.utils import get_logger


log = get_logger(__name__)


def ensure_allowed(decision: Decision) -> None:
    """
    Raise 403 carrying the denial reason if ``decision`` denies.

    Raises:
        HTTPException: 403 if the decision is a denial
    """
    if not decision:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=decision.reason or "You do not have permission to perform this action."
        )


def ensure_authorized(user: User, action: str, resource: Any) -> None:
    """
    Authorize ``action`` on ``resource`` for ``user`` or raise 403.

    Usage:
        record = await get_record_or_404(db, record_id)
        ensure_authorized(current_user, "update", record)
    """
    ensure_allowed(authorize(user, action, resource))


def require_permission(*permissions: str):
    """
    FastAPI dependency requiring ANY of the given permissions.

    Superadmins always pass.

    Usage:
        @router.get("/roles")
        async def list_roles(
            user: User = Depends(require_permission(USERS_VIEW))
        ):
            pass

    Raises:
        UnknownPermissionError: at import time if a name is not in the catalog
    """
    required = collect_permission_keys(permissions)

    async def permission_dependency(
        current_user: User = Depends(get_current_user)
    ) -> User:
        if current_user.is_superadmin() or current_user.has_any_permission(required):
            return current_user

        log.debug("User %s lacks any of %s", current_user.id, required)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Permission denied: requires one of {list(required)}"
        )

    return permission_dependency


def require_role(*slugs: str):
    """
    FastAPI dependency requiring the user's role to be one of ``slugs``.

    Usage:
        @router.post("/maintenance")
        async def run_maintenance(user: User = Depends(require_role(WEBADMIN))):
            pass
    """
    async def role_dependency(
        current_user: User = Depends(get_current_user)
    ) -> User:
        if any(current_user.has_role(slug) for slug in slugs):
            return current_user

        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Role denied: requires one of {list(slugs)}"
        )

    return role_dependency
