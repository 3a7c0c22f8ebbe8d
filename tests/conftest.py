"""Pytest configuration and fixtures."""

import asyncio
from collections.abc import AsyncGenerator
from pathlib import Path

import httpx
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from app.config import Settings
from app.database import get_session
from app.main import app
from app.models.menu_item import MenuItem
from app.models.restaurant import Base, Restaurant
from coffeemania_sync.fetcher import Fetcher
from coffeemania_sync.storage import Storage
from tests.pages import BASE_URL, FakeSite


@pytest.fixture
async def engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine, None]:
    """Fresh SQLite database file per test, tables created."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def storage(engine: AsyncEngine) -> Storage:
    return Storage(engine)


@pytest.fixture
async def session(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Provide database session for tests."""
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session


@pytest.fixture
async def client(session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Provide test client with overridden database session."""

    async def override_get_session() -> AsyncGenerator[AsyncSession, None]:
        yield session

    app.dependency_overrides[get_session] = override_get_session

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def site() -> FakeSite:
    return FakeSite()


@pytest.fixture
async def fetcher(site: FakeSite) -> AsyncGenerator[Fetcher, None]:
    """Fetcher over the fake site, no pacing delay."""
    async with httpx.AsyncClient(transport=site.transport) as http:
        yield Fetcher(http, asyncio.Semaphore(5), delay_range=(0.0, 0.0))


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        base_url=BASE_URL,
        images_dir=str(tmp_path / "images"),
        restaurant_images_dir=str(tmp_path / "restaurant_images"),
        fetch_delay_min=0.0,
        fetch_delay_max=0.0,
        max_concurrent_requests=5,
        listing_mode="static",
    )


@pytest.fixture
async def sample_catalog(session: AsyncSession) -> None:
    """Create a small menu and two restaurants in the test database."""
    session.add_all(
        [
            MenuItem(id=101, category="Десерты", name="Чизкейк", price="350 ₽", calories=250),
            MenuItem(id=102, category="Десерты", name="Медовик", price="320 ₽", calories=410),
            MenuItem(id=201, category="Завтраки", name="Сырники", price="450 ₽", calories=380),
            Restaurant(restaurant_id="42", name="Кофемания Никитская", address="Большая Никитская, 13"),
            Restaurant(restaurant_id="43", name="Кофемания Кудринская", address="Кудринская пл., 1"),
        ]
    )
    await session.commit()
