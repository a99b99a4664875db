"""
Test configuration and fixtures
"""

from datetime import datetime, timedelta

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from app.app import create_app
from app.config import Settings
from app.database import create_db_engine, create_session_factory
from app.domain.entities import GeoLocation, RequestStatus
from app.models import Base
from app.repositories.postgres_repository import PostgresItemRequestRepository
from app.repositories.request_repository import NewItemRequest

TEST_PAGE_SIZE = 5

BASE_DATE = datetime(2024, 1, 1, 12, 0, 0)


@pytest.fixture
def test_settings():
    """Settings pointing at an in-memory SQLite database."""
    return Settings(DATABASE_URL="sqlite:///:memory:", PAGINATION_PAGE_SIZE=TEST_PAGE_SIZE)


@pytest.fixture(scope="function")
def engine(test_settings):
    """Create a fresh in-memory database for each test"""
    engine = create_db_engine(test_settings)
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def repository(session_factory):
    """SQL repository backed by the in-memory database."""
    return PostgresItemRequestRepository(session_factory)


@pytest.fixture
def sample_records():
    """
    Ten item requests, one per hour, newest last.

    Records 4 and 5 share a creation time to exercise the name tie-break.
    Every third record carries a location.
    """
    statuses = [
        RequestStatus.PENDING,
        RequestStatus.APPROVED,
        RequestStatus.REJECTED,
        RequestStatus.COMPLETED,
        RequestStatus.APPROVED,
        RequestStatus.PENDING,
        RequestStatus.APPROVED,
        RequestStatus.PENDING,
        RequestStatus.COMPLETED,
        RequestStatus.APPROVED,
    ]
    names = [
        "Alice Smith",
        "Bob Jones",
        "Carol White",
        "Dan Brown",
        "Aaron Black",
        "Eve Green",
        "Frank Hill",
        "Grace Lee",
        "Henry King",
        "Ivy Young",
    ]
    records = []
    for i, (name, status) in enumerate(zip(names, statuses)):
        created = BASE_DATE + timedelta(hours=i if i != 4 else 3)
        location = None
        if i % 3 == 0:
            location = GeoLocation(longitude=-122.4 + i, latitude=37.7 + i)
        records.append(
            NewItemRequest(
                requestor_name=name,
                item_requested=f"Item {i}",
                request_created_date=created,
                last_edited_date=created,
                status=status,
                location=location,
            )
        )
    return records


@pytest_asyncio.fixture
async def seeded_repository(repository, sample_records):
    """Repository pre-filled with ``sample_records``."""
    for record in sample_records:
        await repository.insert_one(record)
    return repository


@pytest.fixture
def client(test_settings):
    """Create a test client running the full application lifespan"""
    app = create_app(test_settings)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def create_payload():
    """Valid create body"""
    return {
        "requestorName": "John Doe",
        "itemRequested": "Desk",
        "status": "approved",
        "location": {"type": "Point", "coordinates": [-73.98, 40.75]},
    }
