from types import SimpleNamespace
from unittest.mock import patch

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from database import Base, get_db
from main import app
from routers import rate_limit


class FakeBlobStore:
    """In-memory stand-in for the R2 adapter that records every call."""

    def __init__(self, keys=(), fail_keys=()):
        self.objects = set(keys)
        self.fail_keys = set(fail_keys)
        self.deleted = []
        self.signed = []

    def sign_read_url(self, key, ttl_seconds=None):
        self.signed.append((key, ttl_seconds))
        return f"https://blobs.test/{key}?expires={ttl_seconds}"

    def delete_object(self, key):
        self.deleted.append(key)
        if key in self.fail_keys:
            raise RuntimeError("r2 unavailable")
        self.objects.discard(key)


@pytest.fixture(autouse=True)
def reset_local_rate_limit_counters():
    """Keep in-memory rate-limit state isolated between tests."""
    previous = getattr(app.state, "disable_rate_limits", False)
    app.state.disable_rate_limits = True
    rate_limit._local_counters.clear()
    yield
    rate_limit._local_counters.clear()
    app.state.disable_rate_limits = previous


@pytest.fixture
def statement_log():
    return []


@pytest_asyncio.fixture
async def session_maker(tmp_path, statement_log):
    db_path = tmp_path / "research.db"
    engine = create_async_engine(f"sqlite+aiosqlite:///{db_path}")
    maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    @event.listens_for(engine.sync_engine, "before_cursor_execute")
    def _record_statement(conn, cursor, statement, parameters, context, executemany):
        statement_log.append(statement)

    yield maker
    await engine.dispose()


@pytest.fixture
def blob_store():
    return FakeBlobStore()


@pytest_asyncio.fixture
async def api_client(session_maker, statement_log, blob_store):
    async def override_get_db():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    with (
        patch("services.research_files.get_blob_store", return_value=blob_store) as research_blob_store,
        patch("services.swipes.get_blob_store", return_value=blob_store) as swipe_blob_store,
    ):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            yield SimpleNamespace(
                client=client,
                session_maker=session_maker,
                statements=statement_log,
                blob_store=blob_store,
                research_blob_store=research_blob_store,
                swipe_blob_store=swipe_blob_store,
            )

    app.dependency_overrides.pop(get_db, None)
