import pytest
from httpx import AsyncClient

from recordhub.core.database.engine import AsyncSessionLocal
from recordhub.features.permissions.models import find_role_by_slug
from recordhub.features.permissions.registry import (
    DROPDOWN_OPTIONS_VIEW,
    RECORDS_CREATE,
    RECORDS_VIEW,
    RECORDS_VIEW_ALL,
    USER,
    USERS_MANAGE,
    USERS_VIEW,
    WEBADMIN,
)

from tests.utils import auth_headers


pytestmark = pytest.mark.asyncio


async def test_permission_catalog(async_client: AsyncClient, make_user) -> None:
    user = await make_user(USER)

    response = await async_client.get("/permissions", headers=auth_headers(user))
    assert response.status_code == 200
    assert len(response.json()) == 11

    response = await async_client.get("/permissions", params={"group": "users"}, headers=auth_headers(user))
    assert [permission["name"] for permission in response.json()] == [USERS_VIEW, USERS_MANAGE]

    response = await async_client.get("/permissions/groups", headers=auth_headers(user))
    assert response.json() == {"groups": ["records", "dropdown_options", "users"]}


async def test_roles_require_users_view(async_client: AsyncClient, make_user, make_role) -> None:
    user = await make_user(USER)
    response = await async_client.get("/roles", headers=auth_headers(user))
    assert response.status_code == 403
    assert response.json()["detail"] == f"Permission denied: requires one of {[USERS_VIEW]}"

    viewer = await make_user(await make_role(USERS_VIEW))
    response = await async_client.get("/roles", headers=auth_headers(viewer))
    assert response.status_code == 200
    assert {role["slug"] for role in response.json()} >= {USER, WEBADMIN}

    response = await async_client.get(f"/roles/{USER}", headers=auth_headers(viewer))
    assert response.status_code == 200
    assert {permission["name"] for permission in response.json()["permissions"]} == {
        RECORDS_VIEW,
        RECORDS_VIEW_ALL,
        DROPDOWN_OPTIONS_VIEW,
    }

    response = await async_client.get("/roles/nope", headers=auth_headers(viewer))
    assert response.status_code == 404


async def test_grant_revoke_sync(async_client: AsyncClient, make_user) -> None:
    admin = await make_user(WEBADMIN)
    member = await make_user(USER)
    headers = auth_headers(admin)

    response = await async_client.post(
        f"/roles/{USER}/permissions", json={"permissions": [RECORDS_CREATE]}, headers=headers
    )
    assert response.status_code == 200
    assert RECORDS_CREATE in {permission["name"] for permission in response.json()["permissions"]}

    me = await async_client.get("/auth/user", headers=auth_headers(member))
    assert RECORDS_CREATE in me.json()["permissions"]

    response = await async_client.request(
        "DELETE", f"/roles/{USER}/permissions", json={"permissions": [RECORDS_VIEW_ALL]}, headers=headers
    )
    assert response.status_code == 200
    assert {permission["name"] for permission in response.json()["permissions"]} == {
        RECORDS_VIEW,
        RECORDS_CREATE,
        DROPDOWN_OPTIONS_VIEW,
    }

    response = await async_client.put(
        f"/roles/{USER}/permissions", json={"permissions": [RECORDS_VIEW]}, headers=headers
    )
    assert response.status_code == 200

    async with AsyncSessionLocal() as session:
        role = await find_role_by_slug(session, USER)
        assert role.permission_names == frozenset({RECORDS_VIEW})


async def test_unknown_permission_names_are_rejected(async_client: AsyncClient, make_user) -> None:
    admin = await make_user(WEBADMIN)

    response = await async_client.put(
        f"/roles/{USER}/permissions",
        json={"permissions": [RECORDS_VIEW, "records.teleport"]},
        headers=auth_headers(admin),
    )

    assert response.status_code == 422
    assert response.json()["detail"]["permissions"] == ["records.teleport"]

    async with AsyncSessionLocal() as session:
        role = await find_role_by_slug(session, USER)
        assert RECORDS_VIEW_ALL in role.permission_names


async def test_role_mutation_requires_users_manage(async_client: AsyncClient, make_user, make_role) -> None:
    viewer = await make_user(await make_role(USERS_VIEW))

    response = await async_client.put(
        f"/roles/{USER}/permissions", json={"permissions": [RECORDS_VIEW]}, headers=auth_headers(viewer)
    )

    assert response.status_code == 403
