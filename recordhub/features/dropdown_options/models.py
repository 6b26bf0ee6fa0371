"""
Dropdown option model: the selectable values records reference.
"""
from sqlalchemy import String, Boolean, UniqueConstraint, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Mapped, mapped_column

from recordhub.core.database.base import Base, TimestampMixin, generate_ulid


TYPE_SINGLE_SELECT = "single_select"
TYPE_MULTI_SELECT = "multi_select"
OPTION_TYPES = (TYPE_SINGLE_SELECT, TYPE_MULTI_SELECT)


class DropdownOption(Base, TimestampMixin):
    """
    A selectable value for either the single-select or the multi-select field.

    ``value`` is unique within a ``type``; the same value may exist once per type.
    """
    __tablename__ = "dropdown_options"
    __table_args__ = (
        UniqueConstraint("type", "value", name="uq_dropdown_options_type_value"),
    )

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)

    type: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    label: Mapped[str] = mapped_column(String(255), nullable=False)
    value: Mapped[str] = mapped_column(String(255), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    def __repr__(self) -> str:
        return f"<DropdownOption(id={self.id}, type={self.type}, value={self.value!r})>"


async def get_options_by_type(db: AsyncSession, option_type: str) -> list[DropdownOption]:
    """Active options of one type, ordered by label."""
    result = await db.execute(
        select(DropdownOption)
        .where(DropdownOption.type == option_type, DropdownOption.is_active.is_(True))
        .order_by(DropdownOption.label)
    )
    return list(result.scalars().all())


async def get_options_grouped_by_type(db: AsyncSession) -> dict[str, list[DropdownOption]]:
    """Active options keyed by type; every type is present even when empty."""
    return {option_type: await get_options_by_type(db, option_type) for option_type in OPTION_TYPES}
