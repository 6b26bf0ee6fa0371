"""
Record model: the owner-scoped resource protected by the records policy.
"""
from sqlalchemy import String, ForeignKey, Table, Column, DateTime, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Mapped, mapped_column, relationship

from recordhub.core.database.base import Base, TimestampMixin, generate_ulid
from recordhub.features.dropdown_options.models import DropdownOption
from recordhub.features.users.models import User


# Record-multi-select option relationship; the composite key keeps each pair unique
record_multi_options = Table(
    "record_multi_options",
    Base.metadata,
    Column("record_id", String(26), ForeignKey("records.id", ondelete="CASCADE"), primary_key=True),
    Column(
        "dropdown_option_id",
        String(26),
        ForeignKey("dropdown_options.id", ondelete="CASCADE"),
        primary_key=True,
        index=True
    ),
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
)


class Record(Base, TimestampMixin):
    """
    A record with one free-text field, an optional single-select option and
    any number of multi-select options.

    ``created_by`` is set once at creation and decides ownership for the
    ``*_own`` permissions.
    """
    __tablename__ = "records"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)

    text_field: Mapped[str] = mapped_column(String(255), nullable=False)
    single_select_id: Mapped[str | None] = mapped_column(
        String(26),
        ForeignKey("dropdown_options.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )
    created_by: Mapped[str] = mapped_column(
        String(26),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    single_select: Mapped[DropdownOption | None] = relationship(DropdownOption, lazy="selectin")
    multi_select_options: Mapped[list[DropdownOption]] = relationship(
        DropdownOption,
        secondary=record_multi_options,
        lazy="selectin"
    )
    creator: Mapped[User] = relationship(User, lazy="selectin")

    def __repr__(self) -> str:
        return f"<Record(id={self.id}, created_by={self.created_by})>"

    @property
    def multi_select_ids(self) -> list[str]:
        return [option.id for option in self.multi_select_options]


async def option_is_referenced(db: AsyncSession, option_id: str) -> bool:
    """Whether any record points at the option as its single or a multi selection."""
    single = select(Record.id).where(Record.single_select_id == option_id)
    multi = select(record_multi_options.c.record_id).where(record_multi_options.c.dropdown_option_id == option_id)
    result = await db.execute(select(or_(single.exists(), multi.exists())))
    return bool(result.scalar())
