"""
Test configuration and fixtures for Votekeeper backend tests.
"""
import pytest
import pytest_asyncio
from typing import AsyncGenerator
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import NullPool

import votekeeper.models  # noqa: F401  (registers tables on the metadata)
from votekeeper.main import app
from votekeeper.db.base import Base, get_db, serialize_sqlite_writers
from votekeeper.core.config import settings
from votekeeper.core.deps import get_clock
from votekeeper.core.security import create_access_token
from votekeeper.models.ledger import LedgerAccount
from votekeeper.services.clock import ManualClock
from votekeeper.services.ledger import Ledger
from votekeeper.services.voting_core import VotingCore

ADMIN = settings.ADMIN_ADDRESS
ESCROW = settings.ESCROW_ADDRESS


@pytest_asyncio.fixture(scope="function")
async def db_engine(tmp_path):
    """Create a test database engine backed by a per-test SQLite file."""
    engine = serialize_sqlite_writers(create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        echo=False,
        poolclass=NullPool,
    ))
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine) -> async_sessionmaker:
    """Session factory for tests that need their own transactions."""
    return async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False
    )


@pytest_asyncio.fixture(scope="function")
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def clock() -> ManualClock:
    """Height source the tests advance by hand."""
    return ManualClock(height=100)


@pytest.fixture
def core(db_session: AsyncSession, clock: ManualClock) -> VotingCore:
    """Voting core bound to the test session."""
    return VotingCore(db_session, clock, Ledger(db_session, ESCROW), ADMIN)


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession, clock: ManualClock) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client with database session and clock overrides."""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest_asyncio.fixture(scope="function")
async def committing_client(session_factory, clock: ManualClock) -> AsyncGenerator[AsyncClient, None]:
    """Test client where every request commits or rolls back its own transaction."""
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


def auth_headers_for(address: str) -> dict:
    """Authorization headers for an address."""
    return {"Authorization": f"Bearer {create_access_token(subject=address)}"}


@pytest.fixture
def admin_headers() -> dict:
    return auth_headers_for(ADMIN)


async def fund(db: AsyncSession, address: str, amount: int) -> LedgerAccount:
    """Give an address a ledger balance."""
    account = LedgerAccount(address=address, balance=amount)
    db.add(account)
    await db.flush()
    return account


@pytest_asyncio.fixture
async def open_session(core: VotingCore):
    """A fresh session with options Red and Blue, open for 100 heights."""
    return await core.start_session(ADMIN, "Favourite colour?", 100, ["Red", "Blue"])


async def in_transaction(session_factory, clock: ManualClock, operation):
    """Run ``operation(core)`` in its own committed transaction, as one request does."""
    async with session_factory() as db:
        core = VotingCore(db, clock, Ledger(db, ESCROW), ADMIN)
        try:
            result = await operation(core)
            await db.commit()
            return result
        except Exception:
            await db.rollback()
            raise
