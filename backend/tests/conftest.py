"""Pytest configuration and fixtures."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from api.helpers import get_alert_engine, get_price_resolver, get_snapshot_runner
from database import Base, get_db
from main import app
from services.alert_engine import AlertEngine
from services.price_resolver import PriceResolver
from services.snapshot_job import SnapshotJobRunner
# Pytest fixtures - imported to make them available to tests
from tests.fixtures import (  # noqa: F401
    holding,
    price_alert,
)
from tests.fixtures.mocks import MockPriceProvider


@pytest.fixture(name="db")
def db_fixture():
    """Create an in-memory SQLite database for testing."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)

    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(name="primary_provider")
def primary_provider_fixture():
    """Primary provider mock with no prices configured."""
    return MockPriceProvider(name="tcgdex")


@pytest.fixture(name="secondary_provider")
def secondary_provider_fixture():
    """Secondary provider mock with no prices configured."""
    return MockPriceProvider(name="boutique")


@pytest.fixture(name="resolver")
def resolver_fixture(primary_provider, secondary_provider):
    """PriceResolver wired to the mock providers."""
    return PriceResolver(primary=primary_provider, secondary=secondary_provider)


@pytest.fixture(name="client")
def client_fixture(db, resolver, primary_provider):
    """Create a test client with the test database and mock providers."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    async def override_get_price_resolver():
        yield resolver

    snapshot_runner = SnapshotJobRunner(provider=primary_provider, delay_seconds=0)
    alert_engine = AlertEngine()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_price_resolver] = override_get_price_resolver
    app.dependency_overrides[get_snapshot_runner] = lambda: snapshot_runner
    app.dependency_overrides[get_alert_engine] = lambda: alert_engine
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture(name="user_headers")
def user_headers_fixture():
    """Headers identifying the authenticated test user."""
    return {"X-User-Id": "user-1"}
