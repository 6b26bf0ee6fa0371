"""
Pydantic schemas for permission management.

Request and response models for the permission catalog and roles.
"""
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field, ConfigDict


# ============================================================================
# Permission Schemas
# ============================================================================

class PermissionResponse(BaseModel):
    """Schema for a catalog permission."""
    name: str = Field(..., description="Permission key (e.g. 'records.view')")
    display_name: str
    group: str = Field(..., description="Permission group (e.g. 'records')")
    description: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class PermissionGroupsResponse(BaseModel):
    groups: List[str]


# ============================================================================
# Role Schemas
# ============================================================================

class RoleResponse(BaseModel):
    """Schema for role response."""
    id: str
    name: str
    slug: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class RoleWithPermissions(RoleResponse):
    """Schema for role with permissions."""
    permissions: List[PermissionResponse] = []


# ============================================================================
# Assignment Schemas
# ============================================================================

class PermissionNames(BaseModel):
    """Schema for granting, revoking or syncing a role's permissions."""
    permissions: List[str] = Field(..., description="Permission keys")
