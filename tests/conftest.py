"""
Shared pytest fixtures for all tests.

This module provides common fixtures including:
- Sample tree data
- Mock tree repository
- FastAPI test client wired to the mock repository
"""
import pytest
from unittest.mock import MagicMock
from fastapi.testclient import TestClient

from nearest_trees.main import app
from nearest_trees.api.limiter import limiter
from nearest_trees.domain.models import QueryPoint, Tree
from nearest_trees.infrastructure.spatial_store import (
    TreeRepository,
    get_tree_repository,
)


# ============================================================
# Sample Data Fixtures
# ============================================================

@pytest.fixture
def query_point() -> QueryPoint:
    """A query point in central Amsterdam."""
    return QueryPoint(lat=52.37, lng=4.90)


@pytest.fixture
def sample_trees() -> list[Tree]:
    """Five trees around the query point, already ordered by distance."""
    return [
        Tree(id="101", boomsoort="Tilia x europaea", boomhoogte=12.5,
             coordinates=(4.90010, 52.37005), distance=9),
        Tree(id="102", boomsoort="Ulmus hollandica", boomhoogte="c. 9 tot 12 m.",
             coordinates=(4.90030, 52.37010), distance=23),
        Tree(id="103", boomsoort="Platanus x hispanica", boomhoogte=18.0,
             coordinates=(4.89950, 52.36980), distance=39),
        Tree(id="104", boomsoort=None, boomhoogte=None,
             coordinates=(4.90100, 52.37040), distance=79),
        Tree(id="105", boomsoort="Acer platanoides", boomhoogte=7.0,
             coordinates=(4.89800, 52.37100), distance=180),
    ]


# ============================================================
# Mock Repository Fixtures
# ============================================================

@pytest.fixture
def mock_repository(sample_trees):
    """Create a mock tree repository honouring the limit argument."""
    repository = MagicMock(spec=TreeRepository)
    repository.fetch_nearest.side_effect = lambda point, limit: sample_trees[:limit]
    repository.ping.return_value = True
    return repository


# ============================================================
# FastAPI Test Client Fixtures
# ============================================================

@pytest.fixture(autouse=True)
def reset_rate_limits():
    """Start every test with empty rate-limit counters."""
    limiter.reset()
    yield
    limiter.reset()


@pytest.fixture
def test_client() -> TestClient:
    """Create a synchronous test client for FastAPI."""
    return TestClient(app)


@pytest.fixture
def client_with_repository(test_client, mock_repository):
    """Test client whose tree repository is the mock repository."""
    app.dependency_overrides[get_tree_repository] = lambda: mock_repository
    try:
        yield test_client
    finally:
        app.dependency_overrides.clear()
