"""
Pytest configuration and shared fixtures for Cable Inventory tests.

Database tests run against an in-memory SQLite database created through the
same engine factory as production, so foreign keys are enforced and every
transaction opens with BEGIN IMMEDIATE.
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from cable_inventory.config import Settings, get_settings
from cable_inventory.db.base import Base
from cable_inventory.db.session import create_db_engine, get_db
import cable_inventory.models  # noqa: F401


HEADER = (
    "Datacenter,MSF,Item Name,Item Type,Item Group,Dimension Group,"
    "Current Location,OnHand Quantity,Quantity To Move,New Location,Notes,Operation Result"
)


def make_csv(rows: list[dict], header: str = HEADER) -> str:
    """Build an inventory export from row dicts keyed by column name."""
    columns = [column.strip() for column in header.split(",")]
    lines = [header]
    for row in rows:
        lines.append(",".join(str(row.get(column, "")) for column in columns))
    return "\n".join(lines) + "\n"


@pytest.fixture
def make_export():
    """Factory building CSV export text from row dicts."""
    return make_csv


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "integration: mark test as integration test requiring database"
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(database_url="sqlite://", log_format="text")


@pytest.fixture
def test_engine():
    """Fresh in-memory database per test."""
    engine = create_db_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return sessionmaker(bind=test_engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def test_db(session_factory):
    """Create a new database session for each test."""
    db = session_factory()
    try:
        yield db
    finally:
        db.rollback()
        db.close()


@pytest.fixture
def client(session_factory, settings):
    """Create test client with database and settings dependency overrides."""
    from cable_inventory.main import app

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_settings] = lambda: settings

    # No lifespan: the schema already exists on the test engine.
    yield TestClient(app)

    app.dependency_overrides.clear()
