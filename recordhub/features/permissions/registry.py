"""
Canonical permission catalog and system role definitions.

The catalog is closed: permissions are seeded from here and never created or
renamed at runtime. Code refers to permissions through the constants below.
"""
from collections.abc import Iterable
from dataclasses import dataclass


class UnknownPermissionError(ValueError):
    """Raised when a permission name is not part of the catalog."""

    def __init__(self, names: Iterable[str]):
        self.names = tuple(names)
        super().__init__(f"Unknown permission(s): {', '.join(self.names)}")


@dataclass(frozen=True)
class PermissionDefinition:
    """Describes a permission entry in the registry."""
    key: str
    display_name: str
    group: str
    description: str


@dataclass(frozen=True)
class SystemRoleDefinition:
    """Seed data for built-in roles."""
    slug: str
    name: str
    permissions: tuple[str, ...]


# Permission keys -----------------------------------------------------------

RECORDS_VIEW = "records.view"
RECORDS_VIEW_ALL = "records.view_all"
RECORDS_CREATE = "records.create"
RECORDS_UPDATE = "records.update"
RECORDS_UPDATE_OWN = "records.update_own"
RECORDS_DELETE = "records.delete"
RECORDS_DELETE_OWN = "records.delete_own"

DROPDOWN_OPTIONS_VIEW = "dropdown_options.view"
DROPDOWN_OPTIONS_MANAGE = "dropdown_options.manage"

USERS_VIEW = "users.view"
USERS_MANAGE = "users.manage"

# Role slugs ----------------------------------------------------------------

WEBADMIN = "webadmin"  # superadmin: bypasses every authorization rule
USER = "user"


PERMISSIONS: tuple[PermissionDefinition, ...] = (
    # Records
    PermissionDefinition(
        key=RECORDS_VIEW,
        display_name="View Records",
        group="records",
        description="Allows viewing records in the system",
    ),
    PermissionDefinition(
        key=RECORDS_VIEW_ALL,
        display_name="View All Records",
        group="records",
        description="Allows viewing all records, not just own records",
    ),
    PermissionDefinition(
        key=RECORDS_CREATE,
        display_name="Create Records",
        group="records",
        description="Allows creating new records",
    ),
    PermissionDefinition(
        key=RECORDS_UPDATE,
        display_name="Update Any Record",
        group="records",
        description="Allows updating any record in the system",
    ),
    PermissionDefinition(
        key=RECORDS_UPDATE_OWN,
        display_name="Update Own Records",
        group="records",
        description="Allows updating only records created by the user",
    ),
    PermissionDefinition(
        key=RECORDS_DELETE,
        display_name="Delete Any Record",
        group="records",
        description="Allows deleting any record in the system",
    ),
    PermissionDefinition(
        key=RECORDS_DELETE_OWN,
        display_name="Delete Own Records",
        group="records",
        description="Allows deleting only records created by the user",
    ),
    # Dropdown options
    PermissionDefinition(
        key=DROPDOWN_OPTIONS_VIEW,
        display_name="View Dropdown Options",
        group="dropdown_options",
        description="Allows viewing dropdown options",
    ),
    PermissionDefinition(
        key=DROPDOWN_OPTIONS_MANAGE,
        display_name="Manage Dropdown Options",
        group="dropdown_options",
        description="Allows creating, updating, and deleting dropdown options",
    ),
    # Users
    PermissionDefinition(
        key=USERS_VIEW,
        display_name="View Users",
        group="users",
        description="Allows viewing user information",
    ),
    PermissionDefinition(
        key=USERS_MANAGE,
        display_name="Manage Users",
        group="users",
        description="Allows creating, updating, and deleting users",
    ),
)

PERMISSION_REGISTRY: dict[str, PermissionDefinition] = {definition.key: definition for definition in PERMISSIONS}


SYSTEM_ROLES: tuple[SystemRoleDefinition, ...] = (
    # Webadmin gets everything even though it bypasses checks anyway
    SystemRoleDefinition(
        slug=WEBADMIN,
        name="Web Administrator",
        permissions=tuple(definition.key for definition in PERMISSIONS),
    ),
    SystemRoleDefinition(
        slug=USER,
        name="User",
        permissions=(RECORDS_VIEW, RECORDS_VIEW_ALL, DROPDOWN_OPTIONS_VIEW),
    ),
)


def list_permissions() -> tuple[PermissionDefinition, ...]:
    return PERMISSIONS


def list_permissions_by_group(group: str) -> tuple[PermissionDefinition, ...]:
    return tuple(definition for definition in PERMISSIONS if definition.group == group)


def permission_groups() -> tuple[str, ...]:
    """Return the distinct groups in catalog order."""
    return tuple(dict.fromkeys(definition.group for definition in PERMISSIONS))


def is_known_permission(name: str) -> bool:
    return name in PERMISSION_REGISTRY


def collect_permission_keys(names: Iterable[str]) -> tuple[str, ...]:
    """
    Validate permission names against the catalog.

    Returns:
        The names, de-duplicated, in the order given

    Raises:
        UnknownPermissionError: if any name is not in the catalog
    """
    keys = tuple(dict.fromkeys(names))
    unknown = [key for key in keys if key not in PERMISSION_REGISTRY]
    if unknown:
        raise UnknownPermissionError(unknown)
    return keys
