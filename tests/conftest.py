"""Shared pytest fixtures for RecordHub tests."""

import os
import tempfile

# Settings are read at import time, so the environment must be in place
# before anything under recordhub is imported.
_DB_DIR = tempfile.mkdtemp(prefix="recordhub-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_DB_DIR, 'recordhub.sqlite')}"
os.environ["JWT_SECRET"] = "recordhub-test-secret-0123456789abcdef"
os.environ["RATE_LIMIT_ENABLED"] = "0"

from collections.abc import AsyncIterator, Awaitable, Callable  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from fastapi import FastAPI  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession  # noqa: E402

from recordhub.core.database.engine import AsyncSessionLocal, drop_db, init_db  # noqa: E402
from recordhub.features.permissions.models import Role  # noqa: E402
from recordhub.features.users.models import User  # noqa: E402
from recordhub.main import app as recordhub_app  # noqa: E402
from scripts.seed import seed_roles_and_permissions  # noqa: E402
from tests.utils import PASSWORD_HASH  # noqa: E402

UserFactory = Callable[..., Awaitable[User]]


@pytest_asyncio.fixture()
async def database() -> AsyncIterator[None]:
    """Recreate every table for the test."""
    await drop_db()
    await init_db()
    yield


@pytest_asyncio.fixture()
async def db(database: None) -> AsyncIterator[AsyncSession]:
    """A session on the freshly created database."""
    async with AsyncSessionLocal() as session:
        yield session


@pytest_asyncio.fixture()
async def roles(db: AsyncSession) -> dict[str, Role]:
    """The seeded system roles keyed by slug."""
    seeded = await seed_roles_and_permissions(db)
    await db.commit()
    return seeded


@pytest_asyncio.fixture()
async def make_user(db: AsyncSession, roles: dict[str, Role]) -> UserFactory:
    """Factory creating committed users, optionally with a role."""
    counter = 0

    async def _make(role: Role | str | None = None, *, email: str | None = None, is_active: bool = True) -> User:
        nonlocal counter
        counter += 1
        if isinstance(role, str):
            role = roles[role]
        user = User(
            email=email or f"user{counter}@example.com",
            name=f"User {counter}",
            password_hash=PASSWORD_HASH,
            role=role,
            is_active=is_active,
        )
        db.add(user)
        await db.commit()
        return user

    return _make


@pytest_asyncio.fixture()
async def make_role(db: AsyncSession, roles: dict[str, Role]) -> Callable[..., Awaitable[Role]]:
    """Factory creating a committed custom role holding exactly ``permissions``."""
    counter = 0

    async def _make(*permissions: str) -> Role:
        nonlocal counter
        counter += 1
        role = Role(name=f"Custom {counter}", slug=f"custom-{counter}", permissions=[])
        db.add(role)
        await db.flush()
        await role.sync_permissions(db, permissions)
        await db.commit()
        return role

    return _make


@pytest.fixture()
def app(database: None) -> FastAPI:
    return recordhub_app


@pytest_asyncio.fixture()
async def async_client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    """Provide an HTTPX async client bound to the FastAPI app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client
