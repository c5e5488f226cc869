"""
Pytest configuration and fixtures for backend tests.
"""
import os

# Must be set before votechain.core.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("VOTE_ANONYMIZATION_SALT", "test-salt")

import pytest
import pytest_asyncio
from datetime import datetime, timedelta
from typing import AsyncGenerator, Dict, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool
from httpx import AsyncClient, ASGITransport

from votechain.main import app
from votechain.api.v1.deps import get_ledger_client
from votechain.core.database import Base, get_db
from votechain.core.exceptions import LedgerUnavailable
from votechain.core.security import create_access_token, hash_password
from votechain.ledger.ledger_client import AnchorReceipt, LedgerRecord, NetworkStatus
from votechain.models.user import User
from votechain.models.election import Election, Candidate, VotingPolicy
from votechain.store.vote_store import VoteStore


# Test database URL (SQLite for testing)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


class FakeLedger:
    """
    In-memory stand-in for LedgerClient.

    Set ``submit_error`` / ``query_error`` / ``count_error`` to an exception
    instance to make the matching call fail.
    """

    def __init__(self, available: bool = True):
        self.available = available
        self.anchored: Dict[Tuple[str, str], int] = {}
        self.block_height = 100
        self.submit_error: Optional[Exception] = None
        self.query_error: Optional[Exception] = None
        self.count_error: Optional[Exception] = None
        self.submissions = 0

    def is_available(self) -> bool:
        return self.available

    async def submit_hash(self, election_id, vote_hash, voter_hash=None) -> AnchorReceipt:
        self.submissions += 1
        if not self.available:
            raise LedgerUnavailable("Ledger client is not configured")
        if self.submit_error:
            raise self.submit_error
        self.block_height += 1
        self.anchored[(election_id, vote_hash)] = self.block_height
        return AnchorReceipt(
            tx_ref="0x" + vote_hash,
            block_height=self.block_height,
            gas_used=21000,
            confirmations=1,
        )

    async def query_hash(self, election_id, vote_hash) -> LedgerRecord:
        if self.query_error:
            raise self.query_error
        block = self.anchored.get((election_id, vote_hash))
        return LedgerRecord(
            confirmed=block is not None,
            block_height=block or 0,
            submitter_ref="0x" + "1" * 40 if block else "",
        )

    async def get_vote_count(self, election_id) -> int:
        if self.count_error:
            raise self.count_error
        return sum(1 for (eid, _) in self.anchored if eid == election_id)

    async def network_status(self) -> NetworkStatus:
        if not self.available:
            return NetworkStatus(connected=False)
        return NetworkStatus(
            connected=True,
            block_height=self.block_height,
            gas_price="1.5",
            network_id=11155111,
            contract_address="0x" + "2" * 40,
        )

    async def close(self) -> None:
        pass


@pytest_asyncio.fixture(scope="function")
async def test_db() -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session_maker = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session_maker() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def ledger() -> FakeLedger:
    return FakeLedger()


@pytest.fixture
def offline_ledger() -> FakeLedger:
    """A ledger client that was never configured."""
    return FakeLedger(available=False)


@pytest.fixture
def store(test_db: AsyncSession) -> VoteStore:
    return VoteStore(test_db)


@pytest_asyncio.fixture(scope="function")
async def client(test_db: AsyncSession, ledger: FakeLedger) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client with the test database and fake ledger."""
    async def override_get_db():
        yield test_db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_ledger_client] = lambda: ledger

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


async def _create_user(db: AsyncSession, email: str, full_name: str) -> User:
    user = User(
        email=email,
        full_name=full_name,
        hashed_password=hash_password("password123"),
    )
    db.add(user)
    await db.commit()
    return user


def _headers_for(user: User) -> dict:
    token = create_access_token({"sub": str(user.id), "email": user.email})
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def test_user(test_db: AsyncSession) -> User:
    """The organiser who owns the test elections."""
    return await _create_user(test_db, "organiser@example.com", "Election Organiser")


@pytest_asyncio.fixture
async def other_user(test_db: AsyncSession) -> User:
    return await _create_user(test_db, "someone@example.com", "Someone Else")


@pytest.fixture
def auth_headers(test_user: User) -> dict:
    """Create authentication headers for the organiser."""
    return _headers_for(test_user)


@pytest.fixture
def other_auth_headers(other_user: User) -> dict:
    return _headers_for(other_user)


async def make_election(
    db: AsyncSession,
    creator: Optional[User] = None,
    start_offset: timedelta = timedelta(hours=-1),
    end_offset: timedelta = timedelta(days=1),
    voting_policy: VotingPolicy = VotingPolicy.SINGLE,
    requires_registration: bool = False,
    title: str = "Test Election 2026",
) -> Election:
    """Create an election with three candidates, relative to now."""
    now = datetime.utcnow()
    election = Election(
        title=title,
        description="A test election for unit testing",
        start_time=now + start_offset,
        end_time=now + end_offset,
        voting_policy=voting_policy,
        requires_registration=requires_registration,
        vote_count=0,
        creator_id=creator.id if creator else None,
    )
    election.candidates = [
        Candidate(name="Candidate A", description="Party Alpha"),
        Candidate(name="Candidate B", description="Party Beta"),
        Candidate(name="Candidate C", description="Party Gamma"),
    ]
    db.add(election)
    await db.commit()
    return election


@pytest_asyncio.fixture
async def test_election(test_db: AsyncSession, test_user: User) -> Election:
    """An active single-choice election owned by ``test_user``."""
    return await make_election(test_db, creator=test_user)


@pytest_asyncio.fixture
async def multi_election(test_db: AsyncSession, test_user: User) -> Election:
    """An active multiple-choice election that requires an email."""
    return await make_election(
        test_db,
        creator=test_user,
        voting_policy=VotingPolicy.MULTIPLE,
        requires_registration=True,
        title="Committee Election",
    )


@pytest_asyncio.fixture
async def ended_election(test_db: AsyncSession, test_user: User) -> Election:
    return await make_election(
        test_db,
        creator=test_user,
        start_offset=timedelta(days=-2),
        end_offset=timedelta(days=-1),
        title="Past Election",
    )


@pytest_asyncio.fixture
async def future_election(test_db: AsyncSession, test_user: User) -> Election:
    return await make_election(
        test_db,
        creator=test_user,
        start_offset=timedelta(days=1),
        end_offset=timedelta(days=2),
        title="Upcoming Election",
    )
