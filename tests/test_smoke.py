"""Fast smoke checks for critical workflows."""

import pytest
from fastapi.testclient import TestClient

API = "/api/v1"


@pytest.mark.smoke
def test_smoke_health_endpoint(client: TestClient) -> None:
    response = client.get(f"{API}/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


@pytest.mark.smoke
def test_smoke_user_lifecycle(client: TestClient) -> None:
    created = client.post(
        f"{API}/users",
        json={"name": "Smoke", "email": "smoke@example.com", "password": "smokepassword"},
    )
    assert created.status_code == 201
    user_id = created.json()["data"]["id"]

    assert client.get(f"{API}/users/{user_id}").status_code == 200
    assert client.put(f"{API}/users/{user_id}", json={"name": "Smoked"}).status_code == 200
    assert client.delete(f"{API}/users/{user_id}").status_code == 204
    assert client.get(f"{API}/users/{user_id}").status_code == 404
