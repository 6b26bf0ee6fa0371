"""
User and authentication routes.
"""
from datetime import datetime, timezone
from typing import Annotated
from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from recordhub.core import config
from recordhub.core.database.engine import get_db
from recordhub.core.limiter import limiter
from recordhub.core.pagination import (
    PageRequest,
    PaginationConfig,
    page_meta,
    page_request_dependency,
    paginate,
)
from recordhub.features.permissions.dependencies import ensure_authorized
from recordhub.features.permissions.models import find_role_by_slug
from recordhub.features.users import policies  # noqa: F401  (registers user rules)
from recordhub.features.users.auth import create_access_token, verify_password
from recordhub.features.users.dependencies import get_current_user, get_token_payload
from recordhub.features.users.models import User, RevokedToken
from recordhub.features.users.schemas import (
    LoginRequest,
    LoginResponse,
    UserPage,
    UserPublic,
    UserResponse,
    UserRoleUpdate,
)
from recordhub.utils import get_logger


log = get_logger(__name__)

auth_router = APIRouter(tags=["auth"])
router = APIRouter(tags=["users"])

USERS_PAGINATION = PaginationConfig(
    default_sort_field="created_at",
    allowed_sort_fields=("id", "name", "email", "created_at", "updated_at"),
)


@auth_router.post("/login", response_model=LoginResponse)
@limiter.limit(config.LOGIN_RATE_LIMIT)
async def login(
    request: Request,
    credentials: LoginRequest,
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Authenticate with email and password and receive a bearer token."""
    result = await db.execute(select(User).where(User.email == credentials.email))
    user = result.scalar_one_or_none()

    if user is None or not verify_password(credentials.password, user.password_hash):
        log.info("Failed login for %s", credentials.email)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is deactivated",
        )

    user.last_login_at = datetime.now(timezone.utc)
    await db.commit()
    await db.refresh(user)

    return LoginResponse(user=UserResponse.from_user(user), token=create_access_token(user.id))


@auth_router.post("/logout")
async def logout(
    payload: Annotated[dict, Depends(get_token_payload)],
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Revoke the bearer token used for this request."""
    db.add(RevokedToken(
        jti=payload["jti"],
        user_id=user.id,
        expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
    ))
    await db.commit()
    return {"message": "Successfully logged out"}


@auth_router.get("/user", response_model=UserResponse)
async def get_authenticated_user(
    user: Annotated[User, Depends(get_current_user)]
):
    """Get the authenticated user's profile, role and permissions."""
    return UserResponse.from_user(user)


@router.get("", response_model=UserPage)
async def list_users(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    params: Annotated[PageRequest, Depends(page_request_dependency(USERS_PAGINATION))],
):
    """List users (requires users.view)."""
    ensure_authorized(current_user, "view_any", User)

    page = await paginate(db, select(User), params, searchable_fields=["name", "email"])
    return UserPage(data=[UserPublic.model_validate(user) for user in page.items], meta=page_meta(page))


@router.patch("/{user_id}/role", response_model=UserPublic)
async def assign_role(
    user_id: str,
    update: UserRoleUpdate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Assign a role to a user (requires users.manage)."""
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()

    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )

    ensure_authorized(current_user, "manage", user)

    # Prevent self-demotion
    if user.id == current_user.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot modify your own role"
        )

    role = await find_role_by_slug(db, update.role)
    if role is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Role not found"
        )

    user.role = role
    await db.commit()
    await db.refresh(user)
    log.info("User %s assigned role %s by %s", user.id, role.slug, current_user.id)
    return user
