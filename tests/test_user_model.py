import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from recordhub.features.permissions.models import Role
from recordhub.features.permissions.registry import (
    DROPDOWN_OPTIONS_VIEW,
    RECORDS_CREATE,
    RECORDS_VIEW,
    RECORDS_VIEW_ALL,
    USER,
    WEBADMIN,
)


pytestmark = pytest.mark.asyncio


async def test_user_without_role_has_no_permissions(make_user) -> None:
    user = await make_user()

    assert user.get_permissions() == frozenset()
    assert not user.has_permission(RECORDS_VIEW)
    assert not user.has_any_permission([RECORDS_VIEW, RECORDS_CREATE])
    assert not user.has_role(USER)
    assert not user.is_superadmin()


async def test_user_permissions_come_from_role(make_user) -> None:
    user = await make_user(USER)

    assert user.get_permissions() == frozenset({RECORDS_VIEW, RECORDS_VIEW_ALL, DROPDOWN_OPTIONS_VIEW})
    assert user.has_all_permissions([RECORDS_VIEW, RECORDS_VIEW_ALL])
    assert not user.has_permission(RECORDS_CREATE)
    assert user.has_role(USER)
    assert not user.is_superadmin()


async def test_role_changes_are_visible_through_user(db: AsyncSession, make_user, roles: dict[str, Role]) -> None:
    user = await make_user(USER)
    assert not user.has_permission(RECORDS_CREATE)

    await roles[USER].grant_permissions(db, [RECORDS_CREATE])

    assert user.has_permission(RECORDS_CREATE)


async def test_webadmin_is_superadmin(make_user) -> None:
    admin = await make_user(WEBADMIN)
    assert admin.is_superadmin()
    assert admin.has_role(WEBADMIN)
