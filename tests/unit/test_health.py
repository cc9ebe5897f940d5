"""Unit tests for health endpoint

Verifies the service health check reports the catalog load mode.
"""

import pytest

from case_content.api.routes import cases as cases_routes
from case_content.data import SEED_ORDER, STATIC_CASES
from case_content.infrastructure.persistence import CaseRepository


@pytest.mark.unit
class TestHealthCheck:
    """Test health check endpoint"""

    def test_health_returns_healthy(self, client):
        """Happy path: seeded in-memory catalog reports healthy"""
        response = client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["version"] == "1.0.0"
        assert body["database"] == "inmemory"
        assert body["catalog_mode"] == "seed_then_remote"

    def test_health_reports_degraded_on_static_fallback(self, client, monkeypatch, failing_store):
        """Catalog served from the bundled dataset reports degraded"""
        fallback_repository = CaseRepository(failing_store, STATIC_CASES, SEED_ORDER)
        monkeypatch.setattr(cases_routes, "_case_repository", fallback_repository)

        client.post("/api/v1/cases/reload")
        body = client.get("/health").json()

        assert body["status"] == "degraded"
        assert body["catalog_mode"] == "static_fallback"
