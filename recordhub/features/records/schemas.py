"""
Pydantic schemas for records.
"""
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field, ConfigDict

from recordhub.core.pagination import PageMeta
from recordhub.features.dropdown_options.schemas import DropdownOptionResponse


class RecordCreate(BaseModel):
    """Schema for creating a record."""
    text_field: str = Field(..., min_length=1, max_length=255)
    single_select_id: Optional[str] = None
    multi_select_ids: Optional[List[str]] = None


class RecordUpdate(BaseModel):
    """
    Schema for updating a record.

    Omitting ``multi_select_ids`` leaves the current options untouched; an
    empty list clears them.
    """
    text_field: Optional[str] = Field(None, min_length=1, max_length=255)
    single_select_id: Optional[str] = None
    multi_select_ids: Optional[List[str]] = None


class CreatorSummary(BaseModel):
    id: str
    name: str

    model_config = ConfigDict(from_attributes=True)


class RecordResponse(BaseModel):
    """Schema for record response."""
    id: str
    text_field: str
    single_select_id: Optional[str] = None
    single_select: Optional[DropdownOptionResponse] = None
    multi_select_ids: List[str] = []
    multi_select_options: List[DropdownOptionResponse] = []
    created_by: str
    creator: Optional[CreatorSummary] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class RecordPage(BaseModel):
    data: List[RecordResponse]
    meta: PageMeta
