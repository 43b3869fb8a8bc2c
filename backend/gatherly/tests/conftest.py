"""
Shared fixtures: an in-memory database wired into the app.
"""
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from gatherly.db.base import Base
from gatherly.db.session import get_db, init_db
from gatherly.main import app

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db():
    """Fresh schema for every test."""
    init_db(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    """Test client whose requests use the test database."""
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def dinner_payload():
    """A potluck dinner with two guests and three needs."""
    return {
        "name": "Friday Potluck",
        "description": "Bring something tasty",
        "date": "2026-11-06T19:00:00",
        "location": "12 Elm Street",
        "creator": "auth0|host-1",
        "host_name": "Host",
        "event_type": "eatery",
        "needs": [
            {"item": "Main course", "cost": "30.00", "claimed_by": "auth0|host-1"},
            {"item": "Dessert"},
            {"item": "Drinks"},
        ],
        "invitees": [
            {"name": "Alice", "email_or_phone": "alice@example.com", "reminder_preference": "email"},
            {"name": "Bob", "email_or_phone": "+15555550100", "reminder_preference": "sms"},
        ],
    }


@pytest.fixture
def dinner(client, dinner_payload):
    response = client.post("/api/events", json=dinner_payload)
    assert response.status_code == 201
    return response.json()
