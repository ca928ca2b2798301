"""Service test fixtures — file-backed SQLite database, SQL unit of work, FastAPI test client.

Invariants:
    - Every test gets a fresh SQLite file under tmp_path
    - db_manager is patched so routes and SqlUnitOfWork use the test database
    - Seed helpers write reference data (profiles, badge catalog) directly through the ORM

Design Decisions:
    - File-backed SQLite over :memory:: each unit of work gets its own connection,
      so a stale snapshot and a committed write really are in different transactions
    - PostgreSQL-only behaviour (FOR UPDATE) is not exercised here
"""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncSession, async_sessionmaker, create_async_engine,
)

import storycompass.infrastructure.database as db_module
from storycompass.db.base import Base
from storycompass.infrastructure.database import DatabaseSessionManager
from storycompass.infrastructure.unit_of_work import sql_uow_factory
from storycompass.main import app
from storycompass.models.badge import Badge
from storycompass.models.user_profile import UserProfile


@pytest.fixture
async def test_engine(tmp_path):
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'storycompass.db'}", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
def db_manager(test_engine, test_session_factory):
    """DatabaseSessionManager bound to the test engine (no pool configuration)."""
    manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    manager.engine = test_engine
    manager._session_factory = test_session_factory
    return manager


@pytest.fixture
def uow_factory(db_manager):
    return sql_uow_factory(db_manager)


@pytest.fixture
async def client(db_manager):
    """FastAPI test client with db_manager patched to the test database."""
    original_manager = db_module.db_manager
    db_module.db_manager = db_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    db_module.db_manager = original_manager


@pytest.fixture
def seed_badges(test_db):
    """Insert (id, age_group, axis, tier, tier_order, required_score) catalog rows."""
    async def _seed(*rows):
        for badge_id, age_group, axis, tier, tier_order, required in rows:
            test_db.add(Badge(
                id=badge_id, age_group_id=age_group, axis=axis, tier=tier,
                tier_order=tier_order, required_score=required,
                title=f"{axis} {tier}", description="",
            ))
        await test_db.commit()
    return _seed


@pytest.fixture
def seed_profile(test_db):
    async def _seed(profile_id: str, age_group: str | None = None):
        test_db.add(UserProfile(id=profile_id, name=profile_id, age_group=age_group))
        await test_db.commit()
    return _seed


@pytest.fixture
async def courage_catalog(seed_badges):
    """Bronze 5 / silver 10 / gold 15 on `courage` for age group 6-9."""
    await seed_badges(
        ("courage-bronze", "6-9", "courage", "bronze", 1, 5.0),
        ("courage-silver", "6-9", "courage", "silver", 2, 10.0),
        ("courage-gold", "6-9", "courage", "gold", 3, 15.0),
    )
