"""Tests for health endpoints and the shared error body."""

from fastapi import FastAPI
from fastapi.testclient import TestClient


def test_liveness(client: TestClient) -> None:
    """Test the liveness endpoint."""
    response = client.get("/health/live")
    assert response.status_code == 200
    assert response.json() == {"status": "alive"}


def test_readiness(client: TestClient) -> None:
    """Ready once services are on app.state."""
    response = client.get("/health/ready")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ready"
    assert data["database"] is True
    assert all(data["services"].values())
    assert "environment" in data


def test_readiness_without_services() -> None:
    """Without a database the app still answers, reporting degraded."""
    from learntrack.main import create_app

    app: FastAPI = create_app()
    client = TestClient(app)

    response = client.get("/health/ready")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "degraded"
    assert data["services"]["quiz_service"] is False


def test_missing_service_unavailable(client: TestClient, app: FastAPI, student_headers) -> None:
    """Routes answer 503 when their service is not wired."""
    del app.state.quiz_service

    response = client.get(
        "/v1/lessons/00000000-0000-0000-0000-000000000000/quiz",
        headers=student_headers,
    )

    assert response.status_code == 503
    assert response.json()["error"] == "service_unavailable"


def test_health(client: TestClient) -> None:
    """Test the general health endpoint."""
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["app_name"] == "learntrack"
    assert "version" in data


def test_root(client: TestClient) -> None:
    """Test the root endpoint."""
    response = client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "learntrack API"
    assert "version" in data


def test_request_id_echoed(client: TestClient) -> None:
    """Error bodies carry the caller's request id."""
    response = client.get(
        "/v1/progress/courses/not-a-uuid",
        headers={"X-Request-ID": "req-123"},
    )

    body = response.json()
    assert body["request_id"] == "req-123"
    assert set(body) == {"error", "details", "status_code", "request_id"}
