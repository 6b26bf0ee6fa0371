"""
Permission and Role models.

Every user holds exactly one role; a role is a named bundle of permissions
from the registry. The role's effective permission set is cached on the
instance and dropped whenever the set is changed through this module.
"""
from collections.abc import Iterable
from sqlalchemy import String, ForeignKey, Table, Column, Text, DateTime, select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Mapped, mapped_column, relationship

from recordhub.core.database.base import Base, TimestampMixin, generate_ulid
from recordhub.features.permissions.registry import collect_permission_keys
from recordhub.utils import get_logger


log = get_logger(__name__)


class PermissionNotSeededError(LookupError):
    """Raised when a catalog permission has no row in the permissions table."""

    def __init__(self, names: Iterable[str]):
        self.names = tuple(names)
        super().__init__(f"Permission(s) not seeded: {', '.join(self.names)}")


# Role-Permission relationship
role_permissions = Table(
    "role_permissions",
    Base.metadata,
    Column("role_id", String(26), ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
    Column("permission_id", String(26), ForeignKey("permissions.id", ondelete="CASCADE"), primary_key=True),
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
)


class Permission(Base, TimestampMixin):
    """
    Seeded copy of a registry entry.

    Rows mirror ``registry.PERMISSIONS`` and are read-only at runtime.
    """
    __tablename__ = "permissions"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)

    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    display_name: Mapped[str] = mapped_column(String(100), nullable=False)
    group: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    roles: Mapped[list["Role"]] = relationship(
        "Role",
        secondary=role_permissions,
        back_populates="permissions",
        lazy="selectin"
    )

    def __repr__(self) -> str:
        return f"<Permission(id={self.id}, name={self.name!r}, group={self.group})>"


class Role(Base, TimestampMixin):
    """
    Role model for grouping permissions.

    ``slug`` is the stable identifier code branches on (e.g. "webadmin", "user");
    never compare ids or display names.
    """
    __tablename__ = "roles"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)

    name: Mapped[str] = mapped_column(String(50), nullable=False)
    slug: Mapped[str] = mapped_column(String(50), unique=True, nullable=False, index=True)

    permissions: Mapped[list["Permission"]] = relationship(
        "Permission",
        secondary=role_permissions,
        back_populates="roles",
        lazy="selectin"
    )

    def __repr__(self) -> str:
        return f"<Role(id={self.id}, slug={self.slug!r})>"

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def permission_names(self) -> frozenset[str]:
        """Effective permission set (cached per instance)."""
        # ORM-loaded instances skip __init__, so the cache attribute may not exist yet
        cached = getattr(self, "_permission_names_cache", None)
        if cached is None:
            cached = frozenset(permission.name for permission in self.permissions)
            self._permission_names_cache = cached
        return cached

    def invalidate_permission_cache(self) -> None:
        self._permission_names_cache = None

    def has_permission(self, name: str) -> bool:
        return name in self.permission_names

    def has_any_permission(self, names: Iterable[str]) -> bool:
        return not self.permission_names.isdisjoint(names)

    def has_all_permissions(self, names: Iterable[str]) -> bool:
        return self.permission_names.issuperset(names)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def grant_permissions(self, db: AsyncSession, names: Iterable[str]) -> None:
        """Add permissions to the role, keeping the ones it already has."""
        added = await _load_permissions(db, names)
        current = {permission.name: permission for permission in self.permissions}
        for permission in added:
            current.setdefault(permission.name, permission)
        await self._replace_permissions(db, list(current.values()))
        log.info("Granted %s to role %s", [p.name for p in added], self.slug)

    async def revoke_permissions(self, db: AsyncSession, names: Iterable[str]) -> None:
        """Remove permissions from the role; names it does not hold are ignored."""
        removed = set(collect_permission_keys(names))
        await self._replace_permissions(
            db, [permission for permission in self.permissions if permission.name not in removed]
        )
        log.info("Revoked %s from role %s", sorted(removed), self.slug)

    async def sync_permissions(self, db: AsyncSession, names: Iterable[str]) -> None:
        """Replace the role's permissions with exactly ``names``."""
        permissions = await _load_permissions(db, names)
        await self._replace_permissions(db, permissions)
        log.info("Synced role %s to %s", self.slug, [p.name for p in permissions])

    async def _replace_permissions(self, db: AsyncSession, permissions: list["Permission"]) -> None:
        # Assign a new list instead of mutating in place so readers of the old
        # collection never see a half-applied change.
        self.permissions = permissions
        await db.flush()
        self.invalidate_permission_cache()


async def _load_permissions(db: AsyncSession, names: Iterable[str]) -> list[Permission]:
    keys = collect_permission_keys(names)
    if not keys:
        return []
    result = await db.execute(select(Permission).where(Permission.name.in_(keys)))
    permissions = list(result.scalars().all())
    if len(permissions) != len(keys):
        found = {permission.name for permission in permissions}
        raise PermissionNotSeededError(key for key in keys if key not in found)
    return permissions


async def find_role_by_slug(db: AsyncSession, slug: str) -> Role | None:
    result = await db.execute(select(Role).where(Role.slug == slug))
    return result.scalar_one_or_none()


async def list_roles(db: AsyncSession) -> list[Role]:
    result = await db.execute(select(Role).order_by(Role.name))
    return list(result.scalars().all())

