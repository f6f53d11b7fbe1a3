import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import models  # noqa: F401
from core.base import Base
from core.depends import get_catalog, get_session
from core.exceptions import CatalogUnavailable
from main import app

PASSWORD = "secret123"

CATALOG_GAMES = [
    {"catalog_id": 101, "title": "Chess", "cover_url": None, "release_year": 1990, "summary": None},
    {"catalog_id": 102, "title": "Chess Ultra", "cover_url": "https://images.igdb.com/c.jpg", "release_year": 2017, "summary": "Chess, again."},
    {"catalog_id": 200, "title": "Portal 2", "cover_url": None, "release_year": 2011, "summary": "Puzzles."},
]


class FakeCatalog:
    """Stands in for the IGDB client; flip ``fail`` to simulate an upstream outage."""

    def __init__(self):
        self.games = list(CATALOG_GAMES)
        self.fail = False
        self.calls = []

    async def search(self, query, limit=20):
        self.calls.append(("search", query, limit))
        if self.fail:
            raise CatalogUnavailable("Failed to search games")
        return [game for game in self.games if query.lower() in game["title"].lower()][:limit]

    async def random(self, limit=10):
        self.calls.append(("random", limit))
        if self.fail:
            raise CatalogUnavailable("Failed to fetch games")
        return self.games[:limit]


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, autocommit=False, expire_on_commit=False)


@pytest_asyncio.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def catalog():
    return FakeCatalog()


@pytest.fixture
def test_app(session_factory, catalog):
    async def override_get_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_catalog] = lambda: catalog
    yield app
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def make_client(test_app):
    """Each client keeps its own cookie jar, i.e. its own browser session."""
    clients = []

    def factory():
        client = AsyncClient(transport=ASGITransport(app=test_app), base_url="http://testserver")
        clients.append(client)
        return client

    yield factory
    for client in clients:
        await client.aclose()


@pytest_asyncio.fixture
async def client(make_client):
    return make_client()


@pytest.fixture
def signup(make_client):
    """Return a helper that registers a user and hands back their logged-in client."""
    async def _signup(username, password=PASSWORD):
        user_client = make_client()
        response = await user_client.post("/auth/signup", json={"username": username, "password": password})
        assert response.status_code == 201, response.text
        user_client.user = response.json()["user"]
        return user_client

    return _signup
