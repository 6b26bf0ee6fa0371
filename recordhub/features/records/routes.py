"""
Record feature routes.

Every endpoint asks the gate before touching data; per-record actions load
the record first so a missing id is a 404 regardless of permissions.
"""
from typing import Annotated
from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from recordhub.core.database.engine import get_db
from recordhub.core.pagination import (
    PageRequest,
    PaginationConfig,
    page_meta,
    page_request_dependency,
    paginate,
)
from recordhub.features.users.models import User
from recordhub.features.users.dependencies import get_current_user
from recordhub.features.permissions.dependencies import ensure_authorized
from recordhub.features.permissions.gate import allows_permission
from recordhub.features.permissions.registry import RECORDS_VIEW_ALL
from recordhub.features.dropdown_options.models import (
    TYPE_MULTI_SELECT,
    TYPE_SINGLE_SELECT,
    DropdownOption,
)
from recordhub.features.records import policies  # noqa: F401  (registers record rules)
from recordhub.features.records.models import Record
from recordhub.features.records.schemas import (
    RecordCreate,
    RecordPage,
    RecordResponse,
    RecordUpdate,
)
from recordhub.utils import get_logger


log = get_logger(__name__)
router = APIRouter(tags=["records"])

RECORDS_PAGINATION = PaginationConfig(
    allowed_sort_fields=("id", "text_field", "created_at", "updated_at"),
)


async def _get_record_or_404(db: AsyncSession, record_id: str) -> Record:
    result = await db.execute(
        select(Record)
        .where(Record.id == record_id)
        .execution_options(populate_existing=True)
    )
    record = result.scalar_one_or_none()
    if record is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Record not found"
        )
    return record


async def _validate_single_select(db: AsyncSession, option_id: str | None) -> None:
    if option_id is None:
        return

    result = await db.execute(
        select(DropdownOption.id).where(
            DropdownOption.id == option_id,
            DropdownOption.type == TYPE_SINGLE_SELECT
        )
    )
    if result.first() is None:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"single_select_id": "The selected single select option is invalid."}
        )


async def _load_multi_select_options(db: AsyncSession, option_ids: list[str]) -> list[DropdownOption]:
    """Resolve multi-select ids (duplicates collapsed) or raise 422 if any is not a multi-select option."""
    unique_ids = list(dict.fromkeys(option_ids))
    if not unique_ids:
        return []

    result = await db.execute(
        select(DropdownOption).where(
            DropdownOption.id.in_(unique_ids),
            DropdownOption.type == TYPE_MULTI_SELECT
        )
    )
    options = {option.id: option for option in result.scalars().all()}
    if len(options) != len(unique_ids):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"multi_select_ids": "One or more multi-select options are invalid."}
        )
    return [options[option_id] for option_id in unique_ids]


@router.get("", response_model=RecordPage)
async def list_records(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    params: Annotated[PageRequest, Depends(page_request_dependency(RECORDS_PAGINATION))],
):
    """
    List records with pagination, sorting and search over ``text_field``.

    Users without ``records.view_all`` only see the records they created.
    """
    ensure_authorized(current_user, "view_any", Record)

    query = select(Record)
    if not allows_permission(current_user, RECORDS_VIEW_ALL):
        query = query.where(Record.created_by == current_user.id)

    page = await paginate(db, query, params, searchable_fields=["text_field"])
    return RecordPage(
        data=[RecordResponse.model_validate(record) for record in page.items],
        meta=page_meta(page)
    )


@router.post("", response_model=RecordResponse, status_code=status.HTTP_201_CREATED)
async def create_record(
    record_data: RecordCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Create a record owned by the current user."""
    ensure_authorized(current_user, "create", Record)

    await _validate_single_select(db, record_data.single_select_id)
    multi_select_options = await _load_multi_select_options(db, record_data.multi_select_ids or [])

    record = Record(
        text_field=record_data.text_field,
        single_select_id=record_data.single_select_id,
        created_by=current_user.id,
    )
    record.multi_select_options = multi_select_options
    db.add(record)
    await db.commit()

    log.info("Record %s created by %s", record.id, current_user.id)
    return await _get_record_or_404(db, record.id)


@router.get("/{record_id}", response_model=RecordResponse)
async def get_record(
    record_id: str,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Get a record by ID."""
    record = await _get_record_or_404(db, record_id)
    ensure_authorized(current_user, "view", record)
    return record


@router.put("/{record_id}", response_model=RecordResponse)
async def update_record(
    record_id: str,
    record_data: RecordUpdate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """
    Update a record.

    ``multi_select_ids`` replaces the record's options only when supplied.
    """
    record = await _get_record_or_404(db, record_id)
    ensure_authorized(current_user, "update", record)

    update_data = record_data.model_dump(exclude_unset=True)

    if update_data.get("text_field") is not None:
        record.text_field = update_data["text_field"]

    if "single_select_id" in update_data:
        await _validate_single_select(db, update_data["single_select_id"])
        record.single_select_id = update_data["single_select_id"]

    if update_data.get("multi_select_ids") is not None:
        record.multi_select_options = await _load_multi_select_options(db, update_data["multi_select_ids"])

    await db.commit()
    return await _get_record_or_404(db, record.id)


@router.delete("/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_record(
    record_id: str,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Delete a record."""
    record = await _get_record_or_404(db, record_id)
    ensure_authorized(current_user, "delete", record)

    await db.delete(record)
    await db.commit()

    log.info("Record %s deleted by %s", record_id, current_user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
