"""
Dropdown option feature routes.
"""
from typing import Annotated
from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from recordhub.core.database.engine import get_db
from recordhub.features.users.models import User
from recordhub.features.users.dependencies import get_current_user
from recordhub.features.permissions.dependencies import ensure_authorized
from recordhub.features.dropdown_options import policies  # noqa: F401  (registers dropdown option rules)
from recordhub.features.dropdown_options.models import (
    OPTION_TYPES,
    DropdownOption,
    get_options_by_type,
    get_options_grouped_by_type,
)
from recordhub.features.dropdown_options.schemas import (
    DropdownOptionCreate,
    DropdownOptionResponse,
    DropdownOptionUpdate,
    GroupedDropdownOptions,
)
from recordhub.features.records.models import option_is_referenced
from recordhub.utils import get_logger


log = get_logger(__name__)
router = APIRouter(tags=["dropdown-options"])


def _duplicate_value() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail="This value already exists for this dropdown type."
    )


async def _get_option_or_404(db: AsyncSession, option_id: str) -> DropdownOption:
    result = await db.execute(select(DropdownOption).where(DropdownOption.id == option_id))
    option = result.scalar_one_or_none()
    if option is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Dropdown option not found"
        )
    return option


@router.get("", response_model=GroupedDropdownOptions)
async def list_dropdown_options(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """List active options grouped by type."""
    ensure_authorized(current_user, "view_any", DropdownOption)
    return await get_options_grouped_by_type(db)


@router.get("/{option_type}", response_model=list[DropdownOptionResponse])
async def list_dropdown_options_by_type(
    option_type: str,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """List active options of one type."""
    ensure_authorized(current_user, "view_any", DropdownOption)

    if option_type not in OPTION_TYPES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid dropdown type"
        )

    return await get_options_by_type(db, option_type)


@router.post("", response_model=DropdownOptionResponse, status_code=status.HTTP_201_CREATED)
async def create_dropdown_option(
    option_data: DropdownOptionCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Create a dropdown option."""
    ensure_authorized(current_user, "manage", DropdownOption)
    try:
        option = DropdownOption(**option_data.model_dump())
        db.add(option)
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise _duplicate_value()

    await db.refresh(option)

    log.info("Dropdown option %s created by %s", option.id, current_user.id)
    return option


@router.put("/{option_id}", response_model=DropdownOptionResponse)
async def update_dropdown_option(
    option_id: str,
    option_data: DropdownOptionUpdate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Update a dropdown option."""
    option = await _get_option_or_404(db, option_id)
    ensure_authorized(current_user, "manage", option)

    update_data = option_data.model_dump(exclude_unset=True, exclude_none=True)
    new_type = update_data.get("type")
    if new_type is not None and new_type != option.type and await option_is_referenced(db, option.id):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"type": "The type of an option used by records cannot be changed."}
        )

    for field, value in update_data.items():
        setattr(option, field, value)

    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise _duplicate_value()

    await db.refresh(option)
    return option


@router.delete("/{option_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_dropdown_option(
    option_id: str,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Delete a dropdown option. Records referencing it lose the reference."""
    option = await _get_option_or_404(db, option_id)
    ensure_authorized(current_user, "manage", option)

    await db.delete(option)
    await db.commit()

    log.info("Dropdown option %s deleted by %s", option_id, current_user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
