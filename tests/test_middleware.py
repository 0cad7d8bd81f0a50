"""
Tests for the HTTP middleware stack: security headers, compression and
request logging.
"""

import pytest
from fastapi.testclient import TestClient

from accounts_api.api.middleware import CONTENT_SECURITY_POLICY, SECURE_HEADERS
from accounts_api.services.user_repository import UserRepository

API = "/api/v1"


def test_security_headers_on_responses(client: TestClient) -> None:
    response = client.get(f"{API}/health")
    for name, value in SECURE_HEADERS.items():
        assert response.headers[name] == value
    assert response.headers["Content-Security-Policy"] == CONTENT_SECURITY_POLICY


def test_security_headers_on_error_responses(client: TestClient) -> None:
    response = client.get(f"{API}/users/not-an-id")
    assert response.status_code == 400
    assert response.headers["X-Content-Type-Options"] == "nosniff"


def test_docs_served_without_content_security_policy(client: TestClient) -> None:
    response = client.get(f"{API}/docs")
    assert response.status_code == 200
    assert "Content-Security-Policy" not in response.headers
    assert response.headers["X-Frame-Options"] == "SAMEORIGIN"


def test_large_responses_are_compressed(client: TestClient) -> None:
    for i in range(12):
        client.post(
            f"{API}/users",
            json={"name": f"User {i}", "email": f"user{i}@example.com", "password": "password123"},
        )
    response = client.get(f"{API}/users", headers={"Accept-Encoding": "gzip"})
    assert response.status_code == 200
    assert response.headers["content-encoding"] == "gzip"
    assert len(response.json()["data"]) == 12


def test_small_responses_are_not_compressed(client: TestClient) -> None:
    response = client.get(f"{API}/users", headers={"Accept-Encoding": "gzip"})
    assert "content-encoding" not in response.headers


def test_unhandled_error_is_answered_and_request_logged(
    client: TestClient, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    def broken(self: UserRepository) -> None:
        raise RuntimeError("cursor exploded")

    monkeypatch.setattr(UserRepository, "find_all", broken)
    with caplog.at_level("INFO"):
        response = client.get(f"{API}/users")

    assert response.status_code == 500
    assert response.json() == {
        "status": 500,
        "message": "Internal server error",
        "code": "SERVER_ERROR",
    }
    assert "cursor exploded" not in response.text
    errors = [r for r in caplog.records if r.levelname == "ERROR"]
    assert len(errors) == 1
    assert any(
        r.getMessage().startswith(f"-> GET {API}/users 500") for r in caplog.records
    )
