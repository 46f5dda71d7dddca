"""Shared fixtures: an in-memory SQLite database, a controllable clock and campaign members."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET", "test-secret")

import uuid
from datetime import datetime, timedelta

import pytest
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import worldnotes.db.models  # noqa: F401
from worldnotes.core.db import Base
from worldnotes.db.repositories import NoteRepository
from worldnotes.domains.notes.entities import Note, Principal, Role, Visibility
from worldnotes.domains.notes.services import NoteEditCoordinator


def enable_foreign_keys(engine) -> None:
    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


class FrozenClock:
    """Clock that only moves when a test advances it"""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    enable_foreign_keys(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(datetime(2026, 1, 1, 12, 0, 0))


@pytest.fixture
def coordinator(session, clock) -> NoteEditCoordinator:
    return NoteEditCoordinator(session, clock=clock)


@pytest.fixture
def campaign_id() -> uuid.UUID:
    return uuid.uuid4()


@pytest.fixture
def alice(campaign_id) -> Principal:
    return Principal(uuid.uuid4(), "Alice", campaign_id, Role.PLAYER)


@pytest.fixture
def bob(campaign_id) -> Principal:
    return Principal(uuid.uuid4(), "Bob", campaign_id, Role.PLAYER)


@pytest.fixture
def carol(campaign_id) -> Principal:
    return Principal(uuid.uuid4(), "Carol", campaign_id, Role.SCRIBE)


@pytest.fixture
def game_master(campaign_id) -> Principal:
    return Principal(uuid.uuid4(), "Game Master", campaign_id, Role.OWNER)


@pytest.fixture
def make_note(session):
    """Insert a note directly through the repository and commit it"""

    async def _make_note(
        owner: Principal,
        visibility: Visibility = Visibility.SHARED,
        title: str = "Start",
        content=None,
    ) -> Note:
        note = Note.create_note(
            campaign_id=owner.campaign_id,
            owner_id=owner.user_id,
            title=title,
            content=content if content is not None else [{"type": "paragraph", "text": title}],
            content_html=f"<p>{title}</p>",
            visibility=visibility,
        )
        created = await NoteRepository(session).create(note)
        await session.commit()
        return created

    return _make_note
