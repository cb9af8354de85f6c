import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from storecart.database import Base, get_session
from storecart.main import app
from storecart.store import CartStore


@pytest.fixture
async def engine(tmp_path):
    """A fresh SQLite database file per test, with the cart tables created."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'carts.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


@pytest.fixture
async def session(session_maker):
    async with session_maker() as session:
        yield session


@pytest.fixture
def store(session) -> CartStore:
    return CartStore(session)


@pytest.fixture
async def client(session_maker):
    """HTTP client bound to the app, with sessions from the test database."""

    async def override_get_session():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
