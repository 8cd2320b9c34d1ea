"""
Integration tests for API endpoints.

Tests the full HTTP request/response cycle with a mocked spatial store.
"""
import pytest
from unittest.mock import MagicMock, patch

from nearest_trees.main import app
from nearest_trees.config import settings
from nearest_trees.infrastructure.spatial_store import (
    SpatialStoreError,
    TreeRepository,
    get_tree_repository,
)


@pytest.fixture
def failing_client(test_client):
    """Test client whose repository raises the configured exception."""
    repository = MagicMock(spec=TreeRepository)
    app.dependency_overrides[get_tree_repository] = lambda: repository
    try:
        yield test_client, repository
    finally:
        app.dependency_overrides.clear()


# ============================================================
# Health Check Tests
# ============================================================

class TestHealthEndpoints:
    """Tests for health check endpoints."""

    def test_health_endpoint(self, test_client):
        """Health endpoint should return healthy status."""
        response = test_client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert "service" in data
        assert "version" in data

    def test_database_health(self, client_with_repository):
        response = client_with_repository.get("/health/db")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "database": True}

    def test_database_unavailable(self, client_with_repository, mock_repository):
        mock_repository.ping.return_value = False

        response = client_with_repository.get("/health/db")

        assert response.status_code == 503
        assert response.json()["database"] is False


# ============================================================
# Nearest Trees Endpoint Tests
# ============================================================

class TestNearestTreesEndpoint:
    """Tests for GET /api/trees."""

    def test_returns_requested_number_of_trees(self, client_with_repository):
        response = client_with_repository.get(
            "/api/trees", params={"lat": "52.37", "lng": "4.90", "limit": "3"}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert len(data["trees"]) == 3
        for tree in data["trees"]:
            assert isinstance(tree["distance"], int)
            assert tree["distance"] >= 0

    def test_response_structure(self, client_with_repository):
        response = client_with_repository.get(
            "/api/trees", params={"lat": "52.37", "lng": "4.90", "limit": "2"}
        )

        data = response.json()
        assert data["userLocation"] == {"lat": 52.37, "lng": 4.90}
        first = data["trees"][0]
        assert set(first) == {"id", "boomsoort", "boomhoogte", "coordinates", "distance"}
        assert first["id"] == "101"
        assert first["boomsoort"] == "Tilia x europaea"
        assert first["boomhoogte"] == 12.5
        assert first["coordinates"] == [4.90010, 52.37005]

    def test_results_sorted_and_closest_is_first(self, client_with_repository):
        response = client_with_repository.get(
            "/api/trees", params={"lat": "52.37", "lng": "4.90", "limit": "5"}
        )

        data = response.json()
        distances = [tree["distance"] for tree in data["trees"]]
        assert distances == sorted(distances)
        assert data["closest"] == data["trees"][0]

    def test_limit_defaults_to_one(self, client_with_repository, mock_repository):
        response = client_with_repository.get(
            "/api/trees", params={"lat": "52.37", "lng": "4.90"}
        )

        assert response.status_code == 200
        assert len(response.json()["trees"]) == 1
        _, limit = mock_repository.fetch_nearest.call_args[0]
        assert limit == settings.default_limit

    @pytest.mark.parametrize("raw_limit", ["abc", "-2", "0", "1e30", "99999999999999999999"])
    def test_malformed_limit_falls_back(self, client_with_repository, raw_limit):
        response = client_with_repository.get(
            "/api/trees", params={"lat": "52.37", "lng": "4.90", "limit": raw_limit}
        )

        assert response.status_code == 200
        assert len(response.json()["trees"]) == 1

    def test_string_height_passes_through(self, client_with_repository):
        response = client_with_repository.get(
            "/api/trees", params={"lat": "52.37", "lng": "4.90", "limit": "2"}
        )

        assert response.json()["trees"][1]["boomhoogte"] == "c. 9 tot 12 m."

    @pytest.mark.parametrize(
        "params",
        [
            {"lng": "4.90"},
            {"lat": "52.37"},
            {},
            {"lat": "", "lng": "4.90"},
        ],
    )
    def test_missing_coordinates(self, client_with_repository, mock_repository, params):
        response = client_with_repository.get("/api/trees", params=params)

        assert response.status_code == 400
        assert response.json() == {"error": "Latitude and longitude are required"}
        mock_repository.fetch_nearest.assert_not_called()

    @pytest.mark.parametrize(
        "params",
        [
            {"lat": "abc", "lng": "4.90"},
            {"lat": "52.37", "lng": "xyz"},
            {"lat": "NaN", "lng": "4.90"},
            {"lat": "52.37", "lng": "4_90"},
        ],
    )
    def test_invalid_coordinates(self, client_with_repository, params):
        response = client_with_repository.get("/api/trees", params=params)

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid latitude or longitude"}

    def test_no_trees_found(self, client_with_repository, mock_repository):
        mock_repository.fetch_nearest.side_effect = None
        mock_repository.fetch_nearest.return_value = []

        response = client_with_repository.get(
            "/api/trees", params={"lat": "0", "lng": "0", "limit": "5"}
        )

        assert response.status_code == 200
        data = response.json()
        assert data == {"message": "No trees found"}
        assert "trees" not in data

    def test_store_error_is_generic(self, failing_client):
        client, repository = failing_client
        repository.fetch_nearest.side_effect = SpatialStoreError(
            "password authentication failed for user trees_user"
        )

        response = client.get("/api/trees", params={"lat": "52.37", "lng": "4.90"})

        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error"}
        assert "password" not in response.text

    def test_unexpected_error_is_generic(self, failing_client):
        client, repository = failing_client
        repository.fetch_nearest.side_effect = RuntimeError("secret internals")

        response = client.get("/api/trees", params={"lat": "52.37", "lng": "4.90"})

        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error"}
        assert "secret" not in response.text

    def test_post_not_implemented(self, test_client):
        response = test_client.post("/api/trees", json={})

        assert response.status_code == 501
        assert response.json() == {"error": "Method not implemented"}


# ============================================================
# Map Client Tests
# ============================================================

class TestMapClient:
    """Tests for the map page, its assets and configuration."""

    def test_map_page_served(self, test_client):
        response = test_client.get("/")

        assert response.status_code == 200
        assert "text/html" in response.headers["content-type"]
        assert 'id="map"' in response.text
        assert "/static/map.js" in response.text
        assert "leaflet" in response.text

    def test_map_script_served(self, test_client):
        response = test_client.get("/static/map.js")

        assert response.status_code == 200
        assert "/api/trees" in response.text
        assert "Location request timed out." in response.text
        assert "fitBounds" in response.text

    def test_stylesheet_served(self, test_client):
        response = test_client.get("/static/map.css")

        assert response.status_code == 200

    def test_map_config(self, test_client):
        response = test_client.get("/api/map-config")

        assert response.status_code == 200
        data = response.json()
        assert data["limit"] == settings.map_default_limit
        assert data["geolocationTimeoutMs"] == settings.geolocation_timeout_ms
        assert data["geolocationMaxAgeMs"] == settings.geolocation_max_age_ms
        assert data["tileUrl"] == settings.map_tile_url
        assert "tileAttribution" in data


# ============================================================
# Response Format Tests
# ============================================================

class TestResponseFormats:
    """Tests for API response formats."""

    def test_openapi_schema_available(self, test_client):
        """OpenAPI schema should be available."""
        response = test_client.get("/openapi.json")

        assert response.status_code == 200
        data = response.json()
        assert "openapi" in data
        assert "paths" in data
        assert "/api/trees" in data["paths"]
        assert "/api/map-config" in data["paths"]

    def test_docs_endpoint_available(self, test_client):
        """Swagger docs should be available."""
        response = test_client.get("/docs")

        assert response.status_code == 200
        assert "swagger" in response.text.lower() or "html" in response.headers.get("content-type", "")

    def test_redoc_endpoint_available(self, test_client):
        """ReDoc should be available."""
        response = test_client.get("/redoc")

        assert response.status_code == 200


# ============================================================
# CORS Tests
# ============================================================

class TestCORS:
    """Tests for CORS configuration."""

    def test_cors_headers_present(self, test_client):
        """CORS preflight should be answered for the trees endpoint."""
        response = test_client.options(
            "/api/trees",
            headers={
                "Origin": "http://example.com",
                "Access-Control-Request-Method": "GET",
            }
        )

        assert response.status_code == 200
        assert "access-control-allow-origin" in response.headers


# ============================================================
# Rate Limiting Tests
# ============================================================

class TestRateLimiting:
    """Tests for rate limiting functionality."""

    def test_rate_limit_documented_in_openapi(self, test_client):
        """Rate limit should be documented in OpenAPI."""
        response = test_client.get("/openapi.json")

        data = response.json()
        assert "429" in data["paths"]["/api/trees"]["get"]["responses"]

    @pytest.mark.skipif(not settings.rate_limit_enabled, reason="rate limiting disabled")
    def test_rate_limit_enforced(self, client_with_repository):
        params = {"lat": "52.37", "lng": "4.90"}
        for _ in range(settings.rate_limit_requests):
            assert client_with_repository.get("/api/trees", params=params).status_code == 200

        response = client_with_repository.get("/api/trees", params=params)

        assert response.status_code == 429
        assert "error" in response.json()


# ============================================================
# Server Runner Tests
# ============================================================

class TestRunner:
    """Tests for the uvicorn entry point."""

    def test_run_serves_app_with_configured_address(self):
        from nearest_trees.main import run

        with patch("nearest_trees.main.uvicorn.run") as uvicorn_run:
            run()

        uvicorn_run.assert_called_once_with(
            app,
            host=settings.host,
            port=settings.port,
            log_level=settings.log_level.lower(),
        )


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
