"""
Permission management API routes.

Provides endpoints for browsing the permission catalog and managing the
permissions assigned to roles.
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from recordhub.core.database.engine import get_db
from recordhub.features.users.dependencies import get_current_user
from recordhub.features.users.models import User
from recordhub.features.permissions import registry
from recordhub.features.permissions.models import Role, find_role_by_slug, list_roles
from recordhub.features.permissions.schemas import (
    PermissionGroupsResponse,
    PermissionNames,
    PermissionResponse,
    RoleWithPermissions,
)
from recordhub.features.permissions.dependencies import require_permission
from recordhub.utils import get_logger


log = get_logger(__name__)
router = APIRouter()


def _definition_response(definition: registry.PermissionDefinition) -> PermissionResponse:
    return PermissionResponse(
        name=definition.key,
        display_name=definition.display_name,
        group=definition.group,
        description=definition.description,
    )


async def _get_role_or_404(db: AsyncSession, slug: str) -> Role:
    role = await find_role_by_slug(db, slug)
    if role is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Role not found"
        )
    return role


def _unknown_permissions(exc: registry.UnknownPermissionError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail={"message": str(exc), "permissions": list(exc.names)}
    )


# ============================================================================
# Permission Routes
# ============================================================================

@router.get("/permissions", response_model=List[PermissionResponse])
async def list_permissions(
    group: Optional[str] = None,
    current_user: User = Depends(get_current_user)
):
    """List the permission catalog, optionally filtered by group."""
    definitions = registry.list_permissions_by_group(group) if group else registry.list_permissions()
    return [_definition_response(definition) for definition in definitions]


@router.get("/permissions/groups", response_model=PermissionGroupsResponse)
async def list_permission_groups(
    current_user: User = Depends(get_current_user)
):
    """List permission groups in catalog order."""
    return PermissionGroupsResponse(groups=list(registry.permission_groups()))


# ============================================================================
# Role Routes
# ============================================================================

@router.get("/roles", response_model=List[RoleWithPermissions])
async def get_roles(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_permission(registry.USERS_VIEW))
):
    """List roles with their permissions."""
    return await list_roles(db)


@router.get("/roles/{slug}", response_model=RoleWithPermissions)
async def get_role(
    slug: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_permission(registry.USERS_VIEW))
):
    """Get a role by slug."""
    return await _get_role_or_404(db, slug)


@router.post("/roles/{slug}/permissions", response_model=RoleWithPermissions)
async def grant_role_permissions(
    slug: str,
    body: PermissionNames,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_permission(registry.USERS_MANAGE))
):
    """Add permissions to a role."""
    role = await _get_role_or_404(db, slug)
    try:
        await role.grant_permissions(db, body.permissions)
    except registry.UnknownPermissionError as exc:
        raise _unknown_permissions(exc)

    await db.commit()
    return role


@router.delete("/roles/{slug}/permissions", response_model=RoleWithPermissions)
async def revoke_role_permissions(
    slug: str,
    body: PermissionNames,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_permission(registry.USERS_MANAGE))
):
    """Remove permissions from a role."""
    role = await _get_role_or_404(db, slug)
    try:
        await role.revoke_permissions(db, body.permissions)
    except registry.UnknownPermissionError as exc:
        raise _unknown_permissions(exc)

    await db.commit()
    return role


@router.put("/roles/{slug}/permissions", response_model=RoleWithPermissions)
async def sync_role_permissions(
    slug: str,
    body: PermissionNames,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_permission(registry.USERS_MANAGE))
):
    """Replace a role's permissions with exactly the given set."""
    role = await _get_role_or_404(db, slug)
    try:
        await role.sync_permissions(db, body.permissions)
    except registry.UnknownPermissionError as exc:
        raise _unknown_permissions(exc)

    await db.commit()
    return role
