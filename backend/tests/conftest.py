"""
Pytest fixtures for test database, client, and authentication.

Each test gets its own SQLite database file so concurrent sessions behave
like separate connections to one database. Set TEST_DATABASE_URL to run the
same suite against PostgreSQL.
"""

import os
from dataclasses import dataclass
from datetime import datetime, timezone, timedelta
from typing import AsyncGenerator

import fakeredis
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from event_reviews.main import app
from event_reviews.core.config import Settings
from event_reviews.core.security import create_access_token
from event_reviews.db.base import Base
from event_reviews.db.session import create_engine, create_session_factory, get_db
from event_reviews.models import Booking, Event, User
from event_reviews.services.rating_cache import RatingCache

from tests.fakes import InMemoryReviewStore


@dataclass
class Seed:
    organizer: User
    other_organizer: User
    traveler: User
    stranger: User
    past_event: Event
    future_event: Event


@pytest_asyncio.fixture(scope="function")
async def engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """Create tables on a fresh database, drop them afterwards."""
    url = os.environ.get("TEST_DATABASE_URL") or f"sqlite+aiosqlite:///{tmp_path / 'reviews.db'}"
    engine = create_engine(Settings(DATABASE_URL=url))

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return create_session_factory(engine)


@pytest_asyncio.fixture(scope="function")
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def seed(db_session: AsyncSession) -> Seed:
    """Two organizers, a traveler with a confirmed booking on a finished event, and a stranger."""
    now = datetime.now(timezone.utc)
    organizer = User(email="org@example.com", full_name="Olivia Organizer", role="organizer")
    other_organizer = User(email="org2@example.com", full_name="Oscar Organizer", role="organizer")
    traveler = User(
        email="trav@example.com",
        full_name="Tina Traveler",
        role="traveler",
        profile_image_url="https://cdn.example.com/avatars/tina.png",
    )
    stranger = User(email="stranger@example.com", full_name="Sam Stranger", role="traveler")
    db_session.add_all([organizer, other_organizer, traveler, stranger])
    await db_session.flush()

    past_event = Event(
        title="Sunset Kayak Tour",
        start_time=now - timedelta(days=3),
        end_time=now - timedelta(days=2),
        organizer_id=organizer.id,
    )
    future_event = Event(
        title="Harbour Food Walk",
        start_time=now + timedelta(days=5),
        end_time=now + timedelta(days=5, hours=3),
        organizer_id=organizer.id,
    )
    db_session.add_all([past_event, future_event])
    await db_session.flush()

    db_session.add_all([
        Booking(event_id=past_event.id, traveler_id=traveler.id, status="confirmed"),
        Booking(event_id=future_event.id, traveler_id=traveler.id, status="confirmed"),
        Booking(event_id=past_event.id, traveler_id=stranger.id, status="cancelled"),
    ])
    await db_session.commit()

    return Seed(
        organizer=organizer,
        other_organizer=other_organizer,
        traveler=traveler,
        stranger=stranger,
        past_event=past_event,
        future_event=future_event,
    )


async def add_attended_event(
    db_session: AsyncSession,
    organizer_id: int,
    traveler_ids: list[int],
    title: str = "Old Town Walking Tour",
) -> Event:
    """Create a finished event with a confirmed booking for each traveler."""
    now = datetime.now(timezone.utc)
    event = Event(
        title=title,
        start_time=now - timedelta(days=10),
        end_time=now - timedelta(days=9),
        organizer_id=organizer_id,
    )
    db_session.add(event)
    await db_session.flush()
    db_session.add_all(
        [Booking(event_id=event.id, traveler_id=t, status="confirmed") for t in traveler_ids]
    )
    await db_session.commit()
    return event


@pytest_asyncio.fixture(scope="function")
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client that overrides the DB dependency with the test database."""

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.state.redis = None

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
    app.state.redis = None


def auth_headers_for(user: User) -> dict:
    token = create_access_token(data={"sub": str(user.id)})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def traveler_headers(seed: Seed) -> dict:
    return auth_headers_for(seed.traveler)


@pytest.fixture
def memory_store() -> InMemoryReviewStore:
    return InMemoryReviewStore()


@pytest.fixture
def no_cache() -> RatingCache:
    return RatingCache(None)


@pytest.fixture
def fake_redis() -> fakeredis.FakeAsyncRedis:
    """A Redis double with its own server so cached keys never leak between tests."""
    return fakeredis.FakeAsyncRedis(server=fakeredis.FakeServer(), decode_responses=True)
