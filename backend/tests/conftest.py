"""
Pytest fixtures for testing.
"""
import pytest
import pytest_asyncio
from datetime import date, timedelta
from typing import AsyncGenerator, Dict, List, Optional

from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

# Import database module BEFORE app to allow override
import jobmatch.database
from jobmatch.database import Base
# Import ALL models so Base.metadata knows about all tables
from jobmatch.models.job import Job
from jobmatch.models.profile import Profile
from jobmatch.models.notification import Notification
from jobmatch.schemas.job import ExternalJobRecord

# Now import app (after we can override database)
from jobmatch.main import app as fastapi_app


# Test database URL (use in-memory SQLite for fast tests)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


class FakeJobSource:
    """In-memory stand-in for AirtableClient."""

    def __init__(self, records: Optional[List[ExternalJobRecord]] = None):
        self.records = list(records or [])
        self.fetch_error: Optional[Exception] = None
        self.ack_error: Optional[Exception] = None
        self.acks: List[tuple] = []

    async def fetch_active_records(self) -> List[ExternalJobRecord]:
        if self.fetch_error:
            raise self.fetch_error
        return list(self.records)

    async def fetch_record(self, record_id: str) -> Optional[ExternalJobRecord]:
        if self.fetch_error:
            raise self.fetch_error
        return next((record for record in self.records if record.id == record_id), None)

    async def update_sync_status(self, record_id: str, sync_status: str) -> None:
        self.acks.append((record_id, sync_status))
        if self.ack_error:
            raise self.ack_error


def make_record(record_id: str = "rec001", **overrides) -> ExternalJobRecord:
    """Airtable record with every required field filled in."""
    fields: Dict[str, object] = {
        "Title": "Frontend Engineer",
        "Company": "Acme",
        "Location": "Remote",
        "Job Type": "Full-time",
        "Experience Level": "Mid",
        "Status": "Active",
        "Skills Required": "React, TypeScript",
        "Posted Date": (date.today() - timedelta(days=2)).isoformat(),
        "Remote Friendly": True,
    }
    fields.update(overrides)
    return ExternalJobRecord(id=record_id, fields=fields)


@pytest.fixture
def fake_source() -> FakeJobSource:
    return FakeJobSource([make_record("rec001"), make_record("rec002", Title="Backend Engineer")])


@pytest_asyncio.fixture
async def db() -> AsyncGenerator[AsyncSession, None]:
    """
    Create a fresh database for each test.
    Ensures cleanup happens even if test fails.
    """
    # StaticPool keeps a single connection alive so every session sees the same in-memory database
    test_engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # Create all tables FIRST
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    # THEN replace the app's engine and sessionmaker
    # This ensures get_db() uses sessions connected to DB with tables
    original_engine = jobmatch.database.engine
    original_sessionmaker = jobmatch.database.AsyncSessionLocal

    jobmatch.database.engine = test_engine
    jobmatch.database.AsyncSessionLocal = async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False
    )

    # Create session for direct test use
    async_session = async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False
    )

    session = async_session()

    try:
        yield session
    finally:
        await session.close()

        async with test_engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
        await test_engine.dispose()

        jobmatch.database.engine = original_engine
        jobmatch.database.AsyncSessionLocal = original_sessionmaker
        fastapi_app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def async_client(db: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """
    Create an async HTTP client for testing endpoints.

    The db fixture already replaced jobmatch.database.engine with test engine,
    so all endpoints will automatically use the test database.
    """
    transport = ASGITransport(app=fastapi_app)

    async with AsyncClient(
        transport=transport,
        base_url="http://test",
        follow_redirects=True  # Follow 307 redirects for trailing slashes
    ) as client:
        yield client


@pytest_asyncio.fixture
async def test_profile(db: AsyncSession) -> Profile:
    """
    Create a job seeker profile for tests that need an identity.
    """
    profile = Profile(
        email="seeker@example.com",
        full_name="Test Seeker",
        location="Remote",
        experience_level="mid",
        skills=["React", "Node.js"],
        preferred_job_types=["Full-time"],
        remote_preference="Remote",
    )
    db.add(profile)
    await db.commit()
    await db.refresh(profile)
    return profile


@pytest_asyncio.fixture
async def client(async_client: AsyncClient, test_profile: Profile) -> AsyncClient:
    """
    Authenticated client with httpOnly cookie.

    The cookie contains just the profile id.
    """
    async_client.cookies.set("auth_token", str(test_profile.id))
    return async_client


@pytest_asyncio.fixture
async def stored_jobs(db: AsyncSession) -> List[Job]:
    """Three synced jobs: a strong remote match, a weak onsite one and an expired one."""
    today = date.today()
    jobs = [
        Job(
            external_id="recA",
            title="Frontend Engineer",
            company="Acme",
            location="Remote",
            job_type="Full-time",
            experience_level="Mid",
            skills_required=["React", "Node.js"],
            remote_friendly=True,
            status="Active",
            sync_status="synced",
            posted_date=today - timedelta(days=1),
        ),
        Job(
            external_id="recB",
            title="Data Analyst",
            company="Globex",
            location="Berlin",
            job_type="Contract",
            experience_level="Senior",
            skills_required=["SQL", "Excel"],
            remote_friendly=False,
            status="Active",
            sync_status="synced",
            posted_date=today - timedelta(days=60),
        ),
        Job(
            external_id="recC",
            title="Old React Role",
            company="Initech",
            location="Remote",
            skills_required=["React"],
            status="Expired",
            sync_status="inactive",
        ),
    ]
    db.add_all(jobs)
    await db.commit()
    return jobs
