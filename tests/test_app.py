"""Tests for the application shell: health, metrics exposition, request IDs."""

import pytest

from registrar.core.metrics import _normalize_path, get_registry, track_registration
from registrar.main import APP_VERSION


class TestHealth:
    @pytest.mark.asyncio
    async def test_health(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["version"] == APP_VERSION

    @pytest.mark.asyncio
    async def test_root(self, client):
        response = await client.get("/")

        assert response.json()["name"] == "Registrar API"


class TestCorrelation:
    @pytest.mark.asyncio
    async def test_request_id_is_echoed(self, client):
        response = await client.get("/health", headers={"X-Request-ID": "req-123"})

        assert response.headers["X-Request-ID"] == "req-123"
        assert response.headers["X-Correlation-ID"]

    @pytest.mark.asyncio
    async def test_problem_carries_request_id(self, client):
        response = await client.get(
            "/api/v1/pre-register/by-code/1357", headers={"X-Request-ID": "req-456"}
        )

        assert response.status_code == 404
        problem = response.json()
        assert problem["trace_id"] == "req-456"
        assert problem["instance"] == "/api/v1/pre-register/by-code/1357"
        assert problem["type"].startswith("urn:registrar:problem:")

    @pytest.mark.asyncio
    async def test_problem_timestamp_is_utc(self, client):
        response = await client.get("/api/v1/pre-register/by-code/1357")

        timestamp = response.json()["timestamp"]
        assert timestamp.endswith("Z")
        assert "+00:00" not in timestamp


class TestMetrics:
    def test_normalize_path(self):
        assert _normalize_path("/api/v1/groups/8d0c2f6e-1b2a-4c3d-9e8f-001122334455") == "/api/v1/groups/:id"
        assert _normalize_path("/api/v1/pre-register/by-code/1234") == "/api/v1/pre-register/by-code/:id"

    def test_registration_counter_in_exposition(self):
        track_registration("company", "created")
        track_registration("company", "created")

        text = get_registry().format_prometheus()

        assert 'registrar_registrations_total{kind="company",outcome="created"} 2.0' in text

    @pytest.mark.asyncio
    async def test_metrics_endpoint(self, client):
        await client.get("/api/v1/settings/website")

        response = await client.get("/metrics")

        assert response.status_code == 200
        assert "http_requests_total" in response.text
        assert 'path="/api/v1/settings/website"' in response.text

    @pytest.mark.asyncio
    async def test_errors_are_counted(self, client):
        await client.get("/api/v1/groups")

        assert get_registry().errors_total[("unauthorized",)].value == 1
