import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from pwdlib import PasswordHash
from pwdlib.hashers.bcrypt import BcryptHasher
from sqlalchemy.pool import StaticPool

import standup.models  # noqa: F401
from standup.database import Base, Store, build_engine, build_session_maker, get_store
from standup.main import app
from standup.routers import auth
from standup.services import roster, rooms

PASSCODE = "1234"


@pytest.fixture(autouse=True)
def fast_passcode_hash(monkeypatch):
    """bcrypt at its minimum cost so room creation stays fast."""
    monkeypatch.setattr(auth, "_password_hash", PasswordHash((BcryptHasher(rounds=4),)))


@pytest_asyncio.fixture
async def store():
    """A Store over a fresh in-memory SQLite database."""
    engine = build_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield Store(build_session_maker(engine), serialize=True)
    await engine.dispose()


@pytest_asyncio.fixture
async def client(store):
    app.dependency_overrides[get_store] = lambda: store
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def room(store):
    """A room created straight through the service layer."""
    return await store.run(rooms.create_room, "Daily FE", "daily-fe", "not-a-real-hash")


@pytest_asyncio.fixture
async def roster_of_three(store, room):
    """Ana and Bea vote in poker, Caio only attends."""
    ana = await store.run(roster.add_participant, room.id, "Ana", True)
    bea = await store.run(roster.add_participant, room.id, "Bea", True)
    caio = await store.run(roster.add_participant, room.id, "Caio", False)
    return ana, bea, caio


@pytest_asyncio.fixture
async def authed_slug(client):
    """Create ``daily-fe`` over HTTP and log the client into it."""
    response = await client.post(
        "/api/rooms", json={"name": "Daily FE", "slug": "daily-fe", "passcode": PASSCODE}
    )
    assert response.status_code == 201
    response = await client.post("/api/rooms/daily-fe/auth", json={"passcode": PASSCODE})
    assert response.status_code == 200
    return "daily-fe"
