"""
Seed script to populate the permission catalog, system roles and demo data.

Run this script to create:
- The permissions listed in the registry
- The system roles (webadmin, user) and their permissions
- Demo users (admin@example.com as webadmin, user@example.com as user)
- Dropdown options (Option A-C, Tag 1-4) and sample records

Every step is idempotent; existing rows are left as they are.

Usage:
    python -m scripts.seed
"""
import asyncio
import os
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from recordhub.core.database.engine import AsyncSessionLocal, init_db
from recordhub.features.dropdown_options.models import (
    TYPE_MULTI_SELECT,
    TYPE_SINGLE_SELECT,
    DropdownOption,
)
from recordhub.features.permissions.models import Permission, Role
from recordhub.features.permissions.registry import PERMISSIONS, SYSTEM_ROLES, USER, WEBADMIN
from recordhub.features.records.models import Record
from recordhub.features.users.auth import hash_password
from recordhub.features.users.models import User
from recordhub.utils import get_logger


log = get_logger(__name__)

DEMO_PASSWORD = os.environ.get("SEED_PASSWORD", "password")

DEMO_USERS = [
    ("admin@example.com", "Admin User", WEBADMIN),
    ("user@example.com", "Regular User", USER),
]

DEFAULT_OPTIONS = [
    (TYPE_SINGLE_SELECT, "Option A", "option_a"),
    (TYPE_SINGLE_SELECT, "Option B", "option_b"),
    (TYPE_SINGLE_SELECT, "Option C", "option_c"),
    (TYPE_MULTI_SELECT, "Tag 1", "tag_1"),
    (TYPE_MULTI_SELECT, "Tag 2", "tag_2"),
    (TYPE_MULTI_SELECT, "Tag 3", "tag_3"),
    (TYPE_MULTI_SELECT, "Tag 4", "tag_4"),
]

# text, single-select value, multi-select values
SAMPLE_RECORDS = [
    ("Sample Record 1", "option_a", ["tag_1", "tag_2"]),
    ("Sample Record 2", "option_b", ["tag_2", "tag_3"]),
    ("Sample Record 3", "option_c", ["tag_1", "tag_2", "tag_3"]),
]


async def seed_permissions(db: AsyncSession) -> dict[str, Permission]:
    """
    Create the registry permissions, refreshing labels of existing rows.

    Returns:
        Dictionary mapping permission names to Permission objects
    """
    log.info("Creating permissions...")
    result = await db.execute(select(Permission))
    permissions_map = {permission.name: permission for permission in result.scalars().all()}

    for definition in PERMISSIONS:
        permission = permissions_map.get(definition.key)
        if permission is None:
            permission = Permission(name=definition.key)
            db.add(permission)
            permissions_map[definition.key] = permission
            log.info("Created permission: %s", definition.key)
        permission.display_name = definition.display_name
        permission.group = definition.group
        permission.description = definition.description

    await db.flush()
    return permissions_map


async def seed_roles(db: AsyncSession, permissions_map: dict[str, Permission]) -> dict[str, Role]:
    """
    Create the system roles with their default permissions.

    Roles that already exist keep whatever permissions they have now.
    """
    log.info("Creating system roles...")
    roles = {}

    for definition in SYSTEM_ROLES:
        result = await db.execute(select(Role).where(Role.slug == definition.slug))
        role = result.scalar_one_or_none()

        if role:
            log.debug("Role '%s' already exists, skipping", definition.slug)
            roles[definition.slug] = role
            continue

        role = Role(
            name=definition.name,
            slug=definition.slug,
            permissions=[permissions_map[name] for name in definition.permissions]
        )
        db.add(role)
        roles[definition.slug] = role
        log.info("Created role '%s' with %d permissions", definition.slug, len(definition.permissions))

    await db.flush()
    return roles


async def seed_users(db: AsyncSession, roles: dict[str, Role]) -> dict[str, User]:
    log.info("Creating demo users...")
    users = {}

    for email, name, role_slug in DEMO_USERS:
        result = await db.execute(select(User).where(User.email == email))
        user = result.scalar_one_or_none()
        if user is None:
            user = User(
                email=email,
                name=name,
                password_hash=hash_password(DEMO_PASSWORD),
                role=roles[role_slug]
            )
            db.add(user)
            log.info("Created user %s (%s)", email, role_slug)
        users[email] = user

    await db.flush()
    return users


async def seed_dropdown_options(db: AsyncSession) -> dict[tuple[str, str], DropdownOption]:
    log.info("Creating dropdown options...")
    options = {}

    for option_type, label, value in DEFAULT_OPTIONS:
        result = await db.execute(
            select(DropdownOption).where(DropdownOption.type == option_type, DropdownOption.value == value)
        )
        option = result.scalar_one_or_none()
        if option is None:
            option = DropdownOption(type=option_type, label=label, value=value, is_active=True)
            db.add(option)
        options[(option_type, value)] = option

    await db.flush()
    return options


async def seed_records(
    db: AsyncSession,
    owner: User,
    options: dict[tuple[str, str], DropdownOption]
) -> None:
    log.info("Creating sample records...")

    for text, single_value, multi_values in SAMPLE_RECORDS:
        result = await db.execute(select(Record.id).where(Record.text_field == text))
        if result.first() is not None:
            continue

        db.add(Record(
            text_field=text,
            single_select_id=options[(TYPE_SINGLE_SELECT, single_value)].id,
            created_by=owner.id,
            multi_select_options=[options[(TYPE_MULTI_SELECT, value)] for value in multi_values]
        ))

    await db.flush()


async def seed_roles_and_permissions(db: AsyncSession) -> dict[str, Role]:
    """Seed the permission catalog and system roles. Safe to run repeatedly."""
    permissions_map = await seed_permissions(db)
    return await seed_roles(db, permissions_map)


async def main():
    """Main function to seed the database."""
    log.info("Starting seeding...")

    # Initialize database tables first
    log.info("Initializing database tables...")
    await init_db()

    async with AsyncSessionLocal() as db:
        try:
            roles = await seed_roles_and_permissions(db)
            users = await seed_users(db, roles)
            options = await seed_dropdown_options(db)
            await seed_records(db, users["admin@example.com"], options)
            await db.commit()
        except Exception as e:
            log.error("Error seeding database: %s", e, exc_info=True)
            await db.rollback()
            raise

    log.info("Seeding completed successfully!")
    for email, _name, role_slug in DEMO_USERS:
        log.info("  - %s (%s)", email, role_slug)


if __name__ == "__main__":
    asyncio.run(main())
