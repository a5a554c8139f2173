"""
Test configuration and fixtures for pytest.

This module provides shared fixtures used across all tests:
- Test database (SQLite in-memory for speed)
- Test client (FastAPI TestClient)
- Authentication helpers
- Inventory data (location, areas, bins) and AI settings
- A mocked AI provider (no network calls, no token costs)
"""

import json
import pytest
from typing import Generator, Dict, Any
from unittest.mock import AsyncMock, MagicMock

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from app.main import app
from app.db.base import Base
from app.db.session import get_db
from app.models.user import User
from app.models.location import Location, LocationMember
from app.models.area import Area
from app.models.bin import Bin
from app.models.ai_settings import UserAiSettings
from app.core.security import create_access_token
from app.ai.providers.base import AIResponse, ProviderConfig, ProviderType
from app.services.inventory_store import SqlInventoryStore
from app.services.rate_limiter import ai_rate_limiter


# ---------------------------------------------------------------------------
# TEST DATABASE SETUP
# ---------------------------------------------------------------------------
# Use SQLite in-memory for fast tests
# StaticPool keeps the same connection across all operations

SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},  # Required for SQLite
    poolclass=StaticPool,  # Keep connection alive across operations
)

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


# ---------------------------------------------------------------------------
# DATABASE FIXTURES
# ---------------------------------------------------------------------------

@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """
    Create a fresh database for each test function.

    - Creates all tables
    - Yields a session for the test
    - Drops all tables after test (clean slate)
    """
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db: Session) -> Generator[TestClient, None, None]:
    """
    Create a test client with the test database.

    Overrides the get_db dependency to use our test database and
    starts every test with an empty AI request budget.
    """
    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    ai_rate_limiter.reset()

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
    ai_rate_limiter.reset()


@pytest.fixture
def store(db: Session) -> SqlInventoryStore:
    return SqlInventoryStore(db)


# ---------------------------------------------------------------------------
# USER FIXTURES
# ---------------------------------------------------------------------------

@pytest.fixture
def test_user(db: Session) -> User:
    """
    Create a test user in the database.

    Returns:
        User with email "test@example.com"
    """
    user = User(email="test@example.com", display_name="Test User", is_active=True)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def test_user_token(test_user: User) -> str:
    return create_access_token(subject=str(test_user.id))


@pytest.fixture
def auth_headers(test_user_token: str) -> dict:
    """
    Create authorization headers with the test user's token.

    Returns:
        Dict with Authorization header
    """
    return {"Authorization": f"Bearer {test_user_token}"}


# ---------------------------------------------------------------------------
# INVENTORY FIXTURES
# ---------------------------------------------------------------------------

@pytest.fixture
def test_location(db: Session, test_user: User) -> Location:
    """A location the test user is a member of."""
    location = Location(name="Home")
    db.add(location)
    db.commit()
    db.add(LocationMember(location_id=location.id, user_id=test_user.id, role="owner"))
    db.commit()
    db.refresh(location)
    return location


@pytest.fixture
def other_location(db: Session) -> Location:
    """A location the test user does NOT belong to."""
    location = Location(name="Someone else's garage")
    db.add(location)
    db.commit()
    db.refresh(location)
    return location


@pytest.fixture
def garage(db: Session, test_location: Location) -> Area:
    area = Area(location_id=test_location.id, name="Garage")
    db.add(area)
    db.commit()
    db.refresh(area)
    return area


@pytest.fixture
def foreign_area(db: Session, other_location: Location) -> Area:
    """An area in a location the test user does NOT belong to."""
    area = Area(location_id=other_location.id, name="Their Attic")
    db.add(area)
    db.commit()
    db.refresh(area)
    return area


@pytest.fixture
def bins(db: Session, test_location: Location, garage: Area) -> Dict[str, Bin]:
    """
    Three bins in the test location.

    Returns:
        Dict keyed by name: "Tools", "Empty Box", "Batteries"
    """
    records = {
        "Tools": Bin(
            location_id=test_location.id,
            area_id=garage.id,
            name="Tools",
            items=["hammer", "Tape Measure"],
            tags=["tools"],
            notes="Top shelf",
            icon="Wrench",
            color="red",
            short_code="TLS234",
        ),
        "Empty Box": Bin(
            location_id=test_location.id,
            name="Empty Box",
            items=[],
            tags=[],
            notes="",
            short_code="EMP345",
        ),
        "Batteries": Bin(
            location_id=test_location.id,
            name="Batteries",
            items=["AA batteries (x8)"],
            tags=["electronics"],
            notes="",
            short_code="BAT456",
        ),
    }
    for record in records.values():
        db.add(record)
    db.commit()
    for record in records.values():
        db.refresh(record)
    return records


# ---------------------------------------------------------------------------
# AI FIXTURES
# ---------------------------------------------------------------------------

@pytest.fixture
def ai_settings(db: Session, test_user: User) -> UserAiSettings:
    """OpenAI settings for the test user."""
    row = UserAiSettings(
        user_id=test_user.id,
        provider="openai",
        api_key="sk-test-key-1234",
        model="gpt-4o-mini",
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


@pytest.fixture
def provider_config() -> ProviderConfig:
    return ProviderConfig(
        provider=ProviderType.OPENAI,
        api_key="sk-test-key-1234",
        model="gpt-4o-mini",
    )


def make_json_response(data: Any) -> AIResponse:
    """AIResponse as generate_json returns it."""
    return AIResponse(
        content=json.dumps(data),
        provider=ProviderType.OPENAI,
        model="gpt-4o-mini",
        data=data,
    )


@pytest.fixture
def mock_provider() -> MagicMock:
    """
    Stand-in for an AIProvider.

    Set `mock_provider.generate_json.return_value` (or side_effect)
    in the test.
    """
    provider = MagicMock()
    provider.generate_json = AsyncMock()
    provider.test_connection = AsyncMock(return_value=None)
    return provider


@pytest.fixture
def json_response():
    """Factory fixture: json_response(data) -> AIResponse."""
    return make_json_response
