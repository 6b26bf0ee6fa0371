from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
from fastapi import Depends, FastAPI
from httpx import ASGITransport, AsyncClient

from recordhub.features.permissions.dependencies import require_permission, require_role
from recordhub.features.permissions.registry import (
    RECORDS_CREATE,
    RECORDS_VIEW,
    USER,
    WEBADMIN,
)
from recordhub.features.users.models import User

from tests.utils import auth_headers


pytestmark = pytest.mark.asyncio


def build_app() -> FastAPI:
    app = FastAPI()

    @app.get("/create-or-view")
    async def create_or_view(user: User = Depends(require_permission(RECORDS_CREATE, RECORDS_VIEW))):
        return {"id": user.id}

    @app.get("/create")
    async def create_only(user: User = Depends(require_permission(RECORDS_CREATE))):
        return {"id": user.id}

    @app.get("/admin-only")
    async def admin_only(user: User = Depends(require_role(WEBADMIN))):
        return {"id": user.id}

    return app


@pytest_asyncio.fixture()
async def client(database: None) -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=build_app())
    async with AsyncClient(transport=transport, base_url="http://testserver") as http:
        yield http


async def test_require_permission_any_of(client: AsyncClient, make_user) -> None:
    user = await make_user(USER)

    assert (await client.get("/create-or-view", headers=auth_headers(user))).status_code == 200

    response = await client.get("/create", headers=auth_headers(user))
    assert response.status_code == 403
    assert response.json()["detail"] == f"Permission denied: requires one of {[RECORDS_CREATE]}"


async def test_require_permission_superadmin_bypass(client: AsyncClient, make_user) -> None:
    admin = await make_user(WEBADMIN)
    assert (await client.get("/create", headers=auth_headers(admin))).status_code == 200


async def test_require_permission_unauthenticated(client: AsyncClient) -> None:
    assert (await client.get("/create")).status_code == 401


async def test_require_role(client: AsyncClient, make_user) -> None:
    admin = await make_user(WEBADMIN)
    user = await make_user(USER)

    assert (await client.get("/admin-only", headers=auth_headers(admin))).status_code == 200

    response = await client.get("/admin-only", headers=auth_headers(user))
    assert response.status_code == 403
