"""
Configuration des tests / Test configuration.
Base SQLite en mémoire neuve pour chaque test / Fresh in-memory SQLite database per test.
"""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import fleetdesk.models  # noqa: F401
from factories import new_user, new_vehicle
from fleetdesk.database import Base, configure_sqlite, get_db
from fleetdesk.main import app
from fleetdesk.models.user import UserRole
from fleetdesk.rate_limit import limiter

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
async def engine():
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    configure_sqlite(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    """Session pour les tests de services / Session for service tests."""
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory):
    """Client HTTP branché sur la base de test / HTTP client bound to the test database."""

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    limiter.reset()
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


# ─── Données / Data ───
# Chaque appel ouvre et ferme sa propre session : la connexion est partagée (StaticPool).
# Each call opens and closes its own session: the connection is shared (StaticPool).


@pytest.fixture
def make(session_factory):
    async def _make(obj):
        async with session_factory() as session:
            session.add(obj)
            await session.commit()
        return obj

    return _make


@pytest.fixture
def fetch(session_factory):
    async def _fetch(model, pk):
        async with session_factory() as session:
            return await session.get(model, pk)

    return _fetch


@pytest.fixture
async def dispatcher(make):
    return await make(new_user("Dispatcher", UserRole.DISPATCHER, email="dispatcher@test.local"))


@pytest.fixture
async def driver(make):
    return await make(new_user("Jan Novak", UserRole.DRIVER))


@pytest.fixture
async def vehicle(make):
    return await make(new_vehicle())
