"""
User model with ULID primary keys.
"""
from collections.abc import Iterable
from datetime import datetime
from sqlalchemy import String, Boolean, ForeignKey, DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship

from recordhub.core.database.base import Base, TimestampMixin, generate_ulid
from recordhub.features.permissions.models import Role
from recordhub.features.permissions.registry import WEBADMIN


class User(Base, TimestampMixin):
    """
    An authenticated principal.

    Permissions come only from the user's single role. A user without a role
    (bootstrap state) has no permissions; the checks return False rather than
    raising.
    """
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)

    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    role_id: Mapped[str | None] = mapped_column(
        String(26),
        ForeignKey("roles.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    last_login_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    role: Mapped[Role | None] = relationship(Role, lazy="selectin")

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email!r})>"

    def get_permissions(self) -> frozenset[str]:
        # No per-user cache: the role's own cache is the single source, so a
        # grant/revoke on the role is visible here immediately.
        if self.role is None:
            return frozenset()
        return self.role.permission_names

    def has_permission(self, name: str) -> bool:
        return name in self.get_permissions()

    def has_any_permission(self, names: Iterable[str]) -> bool:
        return not self.get_permissions().isdisjoint(names)

    def has_all_permissions(self, names: Iterable[str]) -> bool:
        return self.get_permissions().issuperset(names)

    def has_role(self, slug: str) -> bool:
        return self.role is not None and self.role.slug == slug

    def is_superadmin(self) -> bool:
        return self.has_role(WEBADMIN)


class RevokedToken(Base):
    """Bearer tokens invalidated by logout, keyed by their JWT id."""
    __tablename__ = "revoked_tokens"

    jti: Mapped[str] = mapped_column(String(36), primary_key=True)
    user_id: Mapped[str] = mapped_column(
        String(26),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    def __repr__(self) -> str:
        return f"<RevokedToken(jti={self.jti!r}, user_id={self.user_id})>"
