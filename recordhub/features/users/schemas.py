"""
Pydantic schemas for user and authentication requests and responses.
"""
from datetime import datetime
from pydantic import BaseModel, EmailStr, Field

from recordhub.core.pagination import PageMeta
from recordhub.features.users.models import User


class RoleSummary(BaseModel):
    """Role as embedded in user responses."""
    id: str
    name: str
    slug: str

    model_config = {"from_attributes": True}


class UserResponse(BaseModel):
    """Schema for the authenticated user's profile."""
    id: str
    name: str
    email: EmailStr
    is_active: bool
    role: RoleSummary | None = None
    permissions: list[str] = []
    can_edit: bool = False
    last_login_at: datetime | None = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            name=user.name,
            email=user.email,
            is_active=user.is_active,
            role=RoleSummary.model_validate(user.role) if user.role else None,
            permissions=sorted(user.get_permissions()),
            can_edit=user.is_superadmin(),
            last_login_at=user.last_login_at,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


class UserPublic(BaseModel):
    """User as listed by user management endpoints."""
    id: str
    name: str
    email: EmailStr
    is_active: bool
    role: RoleSummary | None = None
    created_at: datetime

    model_config = {"from_attributes": True}


class UserPage(BaseModel):
    data: list[UserPublic]
    meta: PageMeta


class UserRoleUpdate(BaseModel):
    """Schema for assigning a role to a user."""
    role: str = Field(..., min_length=1, max_length=50, description="Role slug")


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class LoginResponse(BaseModel):
    user: UserResponse
    token: str
    token_type: str = "Bearer"
