"""Shared test fixtures.

Tests run against a throwaway SQLite file through aiosqlite. The database URL
has to be in the environment before any arena module builds the engine.
"""

import os
import tempfile
from datetime import UTC, datetime
from decimal import Decimal

os.environ.setdefault(
    "ARENA_DATABASE_URL", f"sqlite+aiosqlite:///{os.path.join(tempfile.gettempdir(), 'arena_test.db')}"
)
os.environ.setdefault("ARENA_FACILITY_TIMEZONE", "UTC")

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from arena.core.auth import create_access_token, hash_password  # noqa: E402
from arena.core.database import async_session_factory, engine  # noqa: E402
from arena.main import app  # noqa: E402
from arena.models import (  # noqa: E402
    Base,
    Coach,
    Court,
    CourtType,
    Equipment,
    EquipmentType,
    PricingRule,
    RuleType,
    User,
    UserRole,
)

# 2030-06-15 is a Saturday, 2030-06-17 a Monday
SATURDAY = datetime(2030, 6, 15, tzinfo=UTC)
MONDAY = datetime(2030, 6, 17, tzinfo=UTC)


def at(day: datetime, hour: int, minute: int = 0) -> datetime:
    return day.replace(hour=hour, minute=minute)


@pytest.fixture(autouse=True)
async def _fresh_database():
    """Dispose stale pool connections and rebuild the schema before each test.

    The global engine is created at import time. pytest-asyncio runs each test
    in a new event loop, and pooled connections bound to the old loop fail
    with 'Future attached to a different loop'.
    """
    await engine.dispose()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield
    await engine.dispose()


@pytest.fixture
async def db():
    async with async_session_factory() as session:
        yield session


@pytest.fixture
async def client():
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def facility():
    """Two courts, a coach, rentable equipment, two members and an admin."""
    async with async_session_factory() as session:
        outdoor = Court(name="Outdoor Court 1", type=CourtType.OUTDOOR, base_price=Decimal("10.00"))
        indoor = Court(name="Indoor Court 1", type=CourtType.INDOOR, base_price=Decimal("15.00"))
        coach = Coach(
            name="Coach Mike",
            price_per_hour=Decimal("20.00"),
            weekly_availability={
                "monday": [{"start": "09:00", "end": "17:00"}],
                "saturday": [{"start": "10:00", "end": "16:00"}],
            },
        )
        rackets = Equipment(
            name="Racket", type=EquipmentType.RACKET, total_quantity=3, price_per_unit=Decimal("3.00")
        )
        alice = User(email="alice@example.com", name="Alice", hashed_password=hash_password("alice123"))
        bob = User(email="bob@example.com", name="Bob", hashed_password=hash_password("bob12345"))
        carol = User(email="carol@example.com", name="Carol", hashed_password=hash_password("carol123"))
        admin = User(
            email="admin@example.com",
            name="Admin",
            hashed_password=hash_password("admin123"),
            role=UserRole.ADMIN,
        )
        session.add_all([outdoor, indoor, coach, rackets, alice, bob, carol, admin])
        await session.commit()

        return {
            "outdoor": outdoor,
            "indoor": indoor,
            "coach": coach,
            "rackets": rackets,
            "alice": alice,
            "bob": bob,
            "carol": carol,
            "admin": admin,
        }


@pytest.fixture
async def weekend_and_peak_rules():
    async with async_session_factory() as session:
        weekend = PricingRule(
            name="Weekend Surcharge", rule_type=RuleType.WEEKEND, fixed_amount=Decimal("5.00"), priority=2
        )
        peak = PricingRule(
            name="Peak Hour Premium",
            rule_type=RuleType.PEAK_HOUR,
            multiplier=Decimal("1.5"),
            conditions={"startTime": "18:00", "endTime": "21:00"},
            priority=1,
        )
        session.add_all([weekend, peak])
        await session.commit()
        return [weekend, peak]


def auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}
