"""
Pytest configuration and fixtures for the event reactions API.

This module provides:
- Test settings with an isolated data directory per test
- Database and store fixtures with cleanup
- Service fixtures for the scoped and unscoped profiles
- FastAPI test clients running the real application lifespan
"""

from pathlib import Path
from typing import Generator

import pytest
from event_reactions.core.config import Settings
from event_reactions.db.database import ReactionDatabase
from event_reactions.db.repository import ReactionStore
from event_reactions.services.reaction_service import ReactionService
from fastapi.testclient import TestClient


def _make_settings(data_dir: Path, **overrides) -> Settings:
    values = {
        "DEBUG": True,
        "DATA_DIR": str(data_dir),
        "ENVIRONMENT": "testing",
        "SCOPING_ENABLED": True,
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Create test settings with an isolated data directory.

    Returns:
        Settings: Scoped-profile settings pointing at a temporary directory
    """
    return _make_settings(tmp_path / "data")


@pytest.fixture
def reaction_database(tmp_path: Path) -> Generator[ReactionDatabase, None, None]:
    """Provide an initialized reaction database that is closed afterwards."""
    database = ReactionDatabase(str(tmp_path / "reactions.db"))
    database.initialize()
    yield database
    database.close()


@pytest.fixture
def reaction_store(reaction_database: ReactionDatabase) -> ReactionStore:
    return ReactionStore(reaction_database)


@pytest.fixture
def reaction_service(reaction_store: ReactionStore) -> ReactionService:
    """Reaction service in the scoped (per-event/per-user) profile."""
    return ReactionService(reaction_store, scoping_enabled=True)


@pytest.fixture
def unscoped_reaction_service(reaction_store: ReactionStore) -> ReactionService:
    """Reaction service in the global (unscoped) profile."""
    return ReactionService(reaction_store, scoping_enabled=False)


def _client_for(settings: Settings) -> Generator[TestClient, None, None]:
    # Import app here to avoid triggering Settings validation at module load time
    from event_reactions.core.config import get_settings
    from event_reactions.main import app

    app.dependency_overrides[get_settings] = lambda: settings
    try:
        with TestClient(app) as client:
            yield client
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def test_client(test_settings: Settings) -> Generator[TestClient, None, None]:
    """Create a FastAPI test client.

    The client is used as a context manager so the application lifespan opens
    a fresh store in the test data directory and closes it afterwards.
    """
    yield from _client_for(test_settings)


@pytest.fixture
def unscoped_client(tmp_path: Path) -> Generator[TestClient, None, None]:
    """Test client running the global (unscoped) profile."""
    yield from _client_for(_make_settings(tmp_path / "data", SCOPING_ENABLED=False))


@pytest.fixture
def production_client(tmp_path: Path) -> Generator[TestClient, None, None]:
    """Test client running with ENVIRONMENT=production."""
    yield from _client_for(_make_settings(tmp_path / "data", ENVIRONMENT="production"))


def pytest_configure(config):
    """Configure pytest with custom markers.

    Args:
        config: Pytest configuration object
    """
    config.addinivalue_line("markers", "integration: mark test as an integration test")
    config.addinivalue_line("markers", "unit: mark test as a unit test")
