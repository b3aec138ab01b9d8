"""
Integration tests for health API endpoints.
"""
from unittest.mock import patch


class TestHealthEndpoints:
    """Tests for health check endpoints."""

    def test_health_check(self, api_client):
        """Test basic health check endpoint."""
        response = api_client.get("/api/v1/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["version"] == "1.0.0"
        assert data["database"] is True
        assert "timestamp" in data

    def test_health_reports_degraded_database(self, api_client):
        with patch("backend.api.v1.health._database_ok", return_value=False):
            response = api_client.get("/api/v1/health")

        assert response.status_code == 200
        assert response.json()["status"] == "degraded"
        assert response.json()["database"] is False

    def test_readiness_probe(self, api_client):
        response = api_client.get("/api/v1/health/ready")
        assert response.status_code == 200
        assert response.json()["status"] == "ready"

    def test_readiness_probe_without_database(self, api_client):
        """Test that readiness fails with 503 and no internal details."""
        with patch("backend.api.v1.health._database_ok", return_value=False):
            response = api_client.get("/api/v1/health/ready")

        assert response.status_code == 503
        assert response.json() == {"status": "not ready", "error": "Database connection failed"}

    def test_liveness_probe(self, api_client):
        response = api_client.get("/api/v1/health/live")
        assert response.status_code == 200
        assert response.json()["status"] == "alive"

    def test_root(self, api_client):
        response = api_client.get("/")
        assert response.status_code == 200
        assert response.json()["name"] == "DiceConfig"
