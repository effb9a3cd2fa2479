"""
Tests for the public health check endpoint.
"""

from fastapi.testclient import TestClient

from foodcost.main import app

client = TestClient(app)


def test_health_returns_ok():
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "service": "foodcost-backend"}
