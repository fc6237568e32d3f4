import os
import uuid
from datetime import datetime, timedelta, timezone

# Settings are read at import time, give the app something to start with
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("GOOGLE_AI_API_KEY", "test-google-ai-key")

import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from medbay.core.security import create_access_token, hash_password
from medbay.main import app
from medbay.core import models
from medbay.core.database import Base, get_db
from medbay.ai_feature.llm import get_llm

# Every test gets its own in-memory database
TEST_DATABASE_URL = "sqlite+aiosqlite://"


class FakeLLM:
    """Replays canned replies in order and records every prompt it was given."""

    def __init__(self, replies=None):
        self.replies = list(replies or [])
        self.prompts = []

    async def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if not self.replies:
            raise AssertionError("FakeLLM ran out of replies")
        return self.replies.pop(0)


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(test_engine):
    session_factory = async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False
    )
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture(scope="function")
async def fake_llm():
    return FakeLLM()


# Client
@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession, fake_llm: FakeLLM):
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_llm] = lambda: fake_llm

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


# Crew member
@pytest_asyncio.fixture(scope="function")
async def test_crew(db_session: AsyncSession):
    crew_member = models.Crew(
        first_name="Ada",
        last_name="Quartermaster",
        email=f"crew_{uuid.uuid4().hex[:8]}@example.com",
        password=hash_password("password123"),
    )
    db_session.add(crew_member)
    await db_session.commit()
    await db_session.refresh(crew_member)
    return crew_member


# Token for crew member
@pytest_asyncio.fixture(scope="function")
async def auth_headers(test_crew):
    token = create_access_token({"user_id": test_crew.id})
    return {"Authorization": f"Bearer {token}"}


# Catalog: id 1 Ibuprofen, id 2 Diphenhydramine, id 3 deleted Aspirin
@pytest_asyncio.fixture(scope="function")
async def catalog(db_session: AsyncSession):
    supplies = [
        models.Supply(
            type="Tablet",
            name="Ibuprofen (Advil)",
            strength_or_volume="200mg",
            route_of_use="Oral",
            quantity_in_pack=100,
            possible_side_effects="Stomach upset",
            location="Cabinet A",
        ),
        models.Supply(
            type="Capsule",
            name="Diphenhydramine (Benadryl)",
            strength_or_volume="25mg",
            route_of_use="Oral",
            quantity_in_pack=60,
            possible_side_effects="Drowsiness",
            location="Cabinet B",
        ),
        models.Supply(
            type="Tablet",
            name="Aspirin",
            strength_or_volume="81mg",
            route_of_use="Oral",
            quantity_in_pack=30,
            location="Cabinet A",
            is_deleted=True,
        ),
    ]
    db_session.add_all(supplies)
    await db_session.commit()
    for supply in supplies:
        await db_session.refresh(supply)
    return supplies


@pytest_asyncio.fixture(scope="function")
async def now():
    return datetime.now(timezone.utc)


# Lots of the first catalog supply, one per bucket
@pytest_asyncio.fixture(scope="function")
async def lots(db_session: AsyncSession, catalog, test_crew, now):
    supply_id = catalog[0].id
    rows = {
        "current": models.Inventory(
            supply_id=supply_id, quantity=10, expiry_date=now + timedelta(days=30)
        ),
        "no_expiry": models.Inventory(supply_id=supply_id, quantity=5, expiry_date=None),
        "expired": models.Inventory(
            supply_id=supply_id, quantity=7, expiry_date=now - timedelta(days=1)
        ),
        "personal": models.Inventory(
            supply_id=supply_id,
            quantity=3,
            expiry_date=now + timedelta(days=30),
            user_id=test_crew.id,
        ),
        "personal_expired": models.Inventory(
            supply_id=supply_id,
            quantity=1,
            expiry_date=now - timedelta(days=10),
            user_id=test_crew.id,
        ),
    }
    db_session.add_all(rows.values())
    await db_session.commit()
    for row in rows.values():
        await db_session.refresh(row)
    return rows
