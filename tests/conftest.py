"""
Pytest fixtures for the test database, clock, catalog rows, services and client.

Each test gets a fresh SQLite file (via aiosqlite) unless TEST_DATABASE_URL points
somewhere else, so allocation runs against a real transactional store.
"""

import os

os.environ.setdefault("REDIS_ENABLED", "false")
os.environ.setdefault("ENVIRONMENT", "test")

from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker

from ticket_queue.main import app
from ticket_queue.api.deps import get_clock
from ticket_queue.db.base import Base
from ticket_queue.db.session import get_db, serialize_sqlite_transactions
from ticket_queue.infrastructure.sql_catalog import SqlSalesRoundGateway, SqlTicketTypeCatalog
from ticket_queue.infrastructure.sql_store import SqlPurchaseRequestStore
from ticket_queue.models import SalesRound, TicketType
from ticket_queue.services.purchase_request_service import PurchaseRequestService

T0 = datetime(2026, 3, 1, 10, 0, tzinfo=timezone.utc)


class FrozenClock:
    """Clock that only moves when told to."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta


@pytest.fixture
def clock() -> FrozenClock:
    """Ten minutes into the default sales round."""
    return FrozenClock(T0 + timedelta(minutes=10))


@pytest_asyncio.fixture
async def engine(tmp_path):
    url = os.environ.get("TEST_DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    test_engine = create_async_engine(url, echo=False)
    if test_engine.dialect.name == "sqlite":
        serialize_sqlite_transactions(test_engine)
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield test_engine

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def make_sales_round(session_factory):
    """
    Insert a round through its own session, so a rollback in the session under
    test never expires the returned object.
    """

    async def _make(**overrides) -> SalesRound:
        values = {
            "event_id": 1,
            "name": "General sale",
            "window_start": T0,
            "window_end": T0 + timedelta(hours=1),
        }
        values.update(overrides)
        async with session_factory() as session:
            sales_round = SalesRound(**values)
            session.add(sales_round)
            await session.commit()
        return sales_round

    return _make


@pytest_asyncio.fixture
async def sales_round(make_sales_round) -> SalesRound:
    """A round open for one hour from T0."""
    return await make_sales_round()


@pytest_asyncio.fixture
async def ticket_types(session_factory) -> list[TicketType]:
    types = [
        TicketType(event_id=1, name="Category 1"),
        TicketType(event_id=1, name="Category 2"),
    ]
    async with session_factory() as session:
        session.add_all(types)
        await session.commit()
    return types


@pytest.fixture
def store(db_session: AsyncSession) -> SqlPurchaseRequestStore:
    return SqlPurchaseRequestStore(db_session)


@pytest.fixture
def service(db_session: AsyncSession, store, clock) -> PurchaseRequestService:
    return PurchaseRequestService(
        store=store,
        sales_rounds=SqlSalesRoundGateway(db_session),
        ticket_types=SqlTicketTypeCatalog(db_session),
        clock=clock,
    )


@pytest_asyncio.fixture
async def client(session_factory, clock) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client on its own sessions per request, with the frozen clock."""

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def customer_headers() -> dict:
    return {"X-Customer-Id": "customer-1"}
