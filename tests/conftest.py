"""Test fixtures — a fresh in-memory database per test.

Learn: Testing pattern for async SQLAlchemy + FastAPI:

1. The JWT settings are required at import time, so the environment is
   filled in here before anything from canwegame is imported.
2. Each test gets its own in-memory SQLite database (aiosqlite +
   StaticPool so every connection sees the same memory DB), with the
   schema created from the models and foreign keys switched on.
3. The app's get_db dependency is overridden to hand out that session.

No test sees another test's rows, and there is no Postgres to run.
"""

import os

os.environ.setdefault("CANWEGAME_DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("CANWEGAME_JWT_SECRET", "test-signing-secret-0123456789-abcdefghijklmnop")
os.environ.setdefault("CANWEGAME_JWT_ISSUER", "canwegame-tests")
os.environ.setdefault("CANWEGAME_JWT_AUDIENCE", "canwegame-test-clients")
os.environ.setdefault("CANWEGAME_JWT_EXPIRY_MINUTES", "30")
os.environ.setdefault("CANWEGAME_BCRYPT_ROUNDS", "4")

import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from canwegame.db.engine import enable_sqlite_foreign_keys, get_db  # noqa: E402
from canwegame.db.models import Base  # noqa: E402
from canwegame.main import app  # noqa: E402


@pytest_asyncio.fixture()
async def db_session():
    """Per-test session on a brand-new in-memory database."""
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    enable_sqlite_foreign_keys(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session = AsyncSession(engine, expire_on_commit=False)
    try:
        yield session
    finally:
        await session.close()
        await engine.dispose()


@pytest_asyncio.fixture()
async def client(db_session):
    """HTTP client with the app's get_db overridden for testing.

    Learn: Auth is NOT overridden. Tests register and log in through the
    real endpoints (see make_user) and send real Bearer tokens, so the
    whole token pipeline is exercised everywhere.
    """

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture()
async def make_user(client):
    """Factory: register + log in a user, return (user_id, auth headers)."""

    async def _make(username: str, password: str = "Secret1!pass", email: str | None = None):
        r = await client.post(
            "/api/v1/auth/register",
            json={
                "username": username,
                "email": email or f"{username}@example.com",
                "password": password,
            },
        )
        assert r.status_code == 201, r.text
        user_id = r.json()["id"]

        r = await client.post(
            "/api/v1/auth/login",
            json={"username": username, "password": password},
        )
        assert r.status_code == 200, r.text
        headers = {"Authorization": f"Bearer {r.json()['token']}"}
        return user_id, headers

    return _make
