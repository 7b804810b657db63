"""
Integration tests for the health check endpoints.

- /health y /health/live - liveness, sin dependencias externas
- /health/db - conectividad con la base de datos
- /health/ready - readiness, 503 si la base de datos no responde
"""

from fastapi.testclient import TestClient

from customs_ops.api.deps import get_db_session
from customs_ops.main import app


class _BrokenSession:
    async def execute(self, *args, **kwargs):
        raise ConnectionError("database is down")


async def _broken_db_session():
    yield _BrokenSession()


class TestHealthChecks:
    def test_basic_health_endpoint(self, client: TestClient):
        response = client.get("/health")
        assert response.status_code == 200

        data = response.json()
        assert data["status"] == "ok"
        assert data["service"] == "customs-ops-api"

    def test_liveness_endpoint(self, client: TestClient):
        response = client.get("/health/live")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_database_health_check(self, client: TestClient):
        response = client.get("/health/db")
        assert response.status_code == 200, f"DB health check falló: {response.json()}"
        assert response.json() == {"status": "healthy", "component": "database"}

    def test_readiness_endpoint(self, client: TestClient):
        response = client.get("/health/ready")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ready"
        assert data["checks"]["database"] == "healthy"

    def test_health_does_not_require_user_header(self):
        with TestClient(app) as anonymous:
            assert anonymous.get("/health").status_code == 200

    def test_unreachable_database_is_reported(self, client: TestClient):
        app.dependency_overrides[get_db_session] = _broken_db_session
        try:
            db = client.get("/health/db")
            ready = client.get("/health/ready")
        finally:
            app.dependency_overrides.clear()

        assert db.status_code == 503
        assert db.json()["status"] == "unhealthy"
        assert ready.status_code == 503
        assert ready.json()["checks"]["database"] == "unhealthy"
