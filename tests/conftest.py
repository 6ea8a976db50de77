"""Pytest fixtures and configuration for userservice tests."""

import os

# Configure the module-level engine and cache before userservice is imported
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("USER_CACHE_BACKEND", "memory")

import pytest
from unittest.mock import MagicMock
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

from userservice.cache.user_cache import InMemoryCacheBackend, UserCache
from userservice.database.database import Base
from userservice.database.user_repository import UserRepository
from userservice.events.publisher import EventPublisher
from userservice.models.user import User


# Use in-memory SQLite database for tests
TEST_DATABASE_URL = "sqlite:///:memory:"

SEED_USERS = [
    ("alice.smith@example.com", "Alice", "Smith", "+1-555-0101"),
    ("bob.jones@example.com", "Bob", "Jones", "+1-555-0102"),
    ("carol.smithers@example.org", "Carol", "Smithers", "+44-20-7946-0103"),
    ("dave.o_brien@example.com", "Dave", "O_Brien", "+1-555-0104"),
    ("erin.brown@sample.net", "Erin", "Brown", "+1-555-0105"),
]


@pytest.fixture(scope="function")
def db_session():
    """Create a database session for testing.

    Uses an in-memory SQLite database that is created fresh for each test.
    """
    # Create engine with StaticPool for in-memory database
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )

    @event.listens_for(Engine, "connect")
    def set_sqlite_pragmas(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    # Register models and create all tables
    from userservice.database import models  # noqa: F401
    Base.metadata.create_all(bind=engine)

    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        event.remove(Engine, "connect", set_sqlite_pragmas)


@pytest.fixture
def user_repository(db_session: Session):
    """Create a UserRepository instance for testing."""
    return UserRepository(db_session)


@pytest.fixture
def sample_user_base():
    """Base user data; override keys as needed."""
    return {
        "email": "test.user@example.com",
        "first_name": "Test",
        "last_name": "User",
        "phone_number": "+1-555-0100",
    }


@pytest.fixture
def sample_user(sample_user_base):
    """Create an unsaved sample User."""
    return User(**sample_user_base)


@pytest.fixture
def seeded_users(user_repository):
    """Persist SEED_USERS (ids 1..5, in order) and return them."""
    created = []
    for email, first_name, last_name, phone_number in SEED_USERS:
        created.append(
            user_repository.create(
                User(email=email, first_name=first_name, last_name=last_name, phone_number=phone_number)
            )
        )
    return created


@pytest.fixture
def user_cache():
    """Fresh in-memory user cache."""
    return UserCache(InMemoryCacheBackend(max_size=100, ttl_seconds=60), ttl_seconds=60)


@pytest.fixture
def event_publisher():
    """Mock publisher that records published events."""
    publisher = MagicMock(spec=EventPublisher)
    publisher.publish_email_updated.return_value = "job-1"
    return publisher


@pytest.fixture
def test_client(db_session: Session, user_cache, event_publisher):
    """Create a FastAPI test client with overridden database, cache and publisher dependencies."""
    from userservice.api.app import app
    from userservice.cache.user_cache import get_user_cache
    from userservice.database.database import get_db
    from userservice.events.publisher import get_event_publisher

    # Override the get_db dependency to use our test database session
    def override_get_db():
        try:
            yield db_session
        finally:
            pass  # Don't close the session here, let the fixture handle it

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_user_cache] = lambda: user_cache
    app.dependency_overrides[get_event_publisher] = lambda: event_publisher

    with TestClient(app) as client:
        yield client

    # Clean up dependency overrides
    app.dependency_overrides.clear()
