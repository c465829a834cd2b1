"""
Unit tests for health endpoints.
"""

from otp_gate.core.deps import get_store
from otp_gate.core.exceptions import StoreError
from otp_gate.core.store import MemoryStore
from main import app


class UnreachableStore(MemoryStore):
    def ping(self):
        raise StoreError("Redis PING failed")


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_root(client):
    response = client.get("/")
    assert response.status_code == 200


def test_detailed_health(client):
    response = client.get("/health/detailed")

    assert response.status_code == 200
    data = response.json()
    assert data["checks"]["store"]["status"] == "healthy"
    assert data["checks"]["store"]["backend"] == "MemoryStore"


def test_detailed_health_store_down(client):
    app.dependency_overrides[get_store] = lambda: UnreachableStore()

    response = client.get("/health/detailed")

    assert response.status_code == 503
    assert response.json()["checks"]["store"]["status"] == "unhealthy"
