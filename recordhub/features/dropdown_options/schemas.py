"""
Pydantic schemas for dropdown options.
"""
from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel, Field, ConfigDict


OptionType = Literal["single_select", "multi_select"]


class DropdownOptionBase(BaseModel):
    type: OptionType
    label: str = Field(..., min_length=1, max_length=255)
    value: str = Field(..., min_length=1, max_length=255)
    is_active: bool = True


class DropdownOptionCreate(DropdownOptionBase):
    """Schema for creating a dropdown option."""
    pass


class DropdownOptionUpdate(BaseModel):
    """Schema for updating a dropdown option (all fields optional)."""
    type: Optional[OptionType] = None
    label: Optional[str] = Field(None, min_length=1, max_length=255)
    value: Optional[str] = Field(None, min_length=1, max_length=255)
    is_active: Optional[bool] = None


class DropdownOptionResponse(DropdownOptionBase):
    """Schema for dropdown option response."""
    id: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class GroupedDropdownOptions(BaseModel):
    single_select: list[DropdownOptionResponse] = []
    multi_select: list[DropdownOptionResponse] = []
