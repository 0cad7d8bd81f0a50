"""
Pytest configuration and fixtures.
Provides settings, an in-memory document store, host metrics, and a test client.
"""

from typing import Any, Generator

import mongomock
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from pymongo.collection import Collection

from accounts_api.core.config import Settings
from accounts_api.db.database import USERS_COLLECTION, DatabaseManager
from accounts_api.main import create_app
from accounts_api.schemas.health import UsageSnapshot
from accounts_api.services.user_repository import UserRepository

API = "/api/v1"
TEST_DATABASE = "accounts_test"


class StaticHostMetrics:
    """Host metrics with fixed readings."""

    def __init__(
        self,
        cpu_load: float = 12.5,
        cpu_cores: int = 8,
        memory_free: int = 4_000_000_000,
    ) -> None:
        self.load = cpu_load
        self.cores = cpu_cores
        self.memory_free = memory_free

    def cpu_load(self) -> float:
        return self.load

    def cpu_cores(self) -> int:
        return self.cores

    def memory(self) -> UsageSnapshot:
        total = 16_000_000_000
        used = total - self.memory_free
        return UsageSnapshot(
            total=total, free=self.memory_free, used=used, used_percent=round(used / total * 100, 2)
        )

    def disk(self) -> UsageSnapshot:
        return UsageSnapshot(
            total=500_000_000_000, free=200_000_000_000, used=300_000_000_000, used_percent=60.0
        )


@pytest.fixture(name="settings")
def settings_fixture() -> Settings:
    """Settings for tests; no .env file, no retry delay."""
    return Settings(
        _env_file=None,  # type: ignore[call-arg]
        MONGO_PATH="localhost:27017",
        MONGO_USER="tester",
        MONGO_PASSWORD="secret",
        MONGO_DATABASE=TEST_DATABASE,
        DB_CONNECT_RETRY_DELAY=0,
        HEALTH_CPU_SAMPLE_INTERVAL=0,
        HEALTH_PROBE_TIMEOUT=2.0,
    )


@pytest.fixture(name="mongo_client")
def mongo_client_fixture() -> mongomock.MongoClient:
    return mongomock.MongoClient()


@pytest.fixture(name="database")
def database_fixture(settings: Settings, mongo_client: mongomock.MongoClient) -> DatabaseManager:
    """Database manager whose client factory hands out the in-memory client."""

    def client_factory(*args: Any, **kwargs: Any) -> mongomock.MongoClient:
        return mongo_client

    return DatabaseManager(settings, client_factory=client_factory)


@pytest.fixture(name="users_collection")
def users_collection_fixture(mongo_client: mongomock.MongoClient) -> Collection:
    collection = mongo_client[TEST_DATABASE][USERS_COLLECTION]
    collection.create_index("email", unique=True)
    return collection


@pytest.fixture(name="repository")
def repository_fixture(users_collection: Collection) -> UserRepository:
    return UserRepository(users_collection)


@pytest.fixture(name="metrics")
def metrics_fixture() -> StaticHostMetrics:
    return StaticHostMetrics()


@pytest.fixture(name="app")
def app_fixture(
    settings: Settings, database: DatabaseManager, metrics: StaticHostMetrics
) -> FastAPI:
    return create_app(settings, database=database, metrics=metrics)


@pytest.fixture(name="client")
def client_fixture(app: FastAPI) -> Generator[TestClient, None, None]:
    """
    Create a test client; entering it runs the startup bootstrap.
    """
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture(name="created_user")
def created_user_fixture(client: TestClient) -> dict[str, Any]:
    """
    Create a regular user through the API.
    """
    response = client.post(
        f"{API}/users",
        json={
            "name": "Test User",
            "email": "test@example.com",
            "password": "testpassword123",
        },
    )
    assert response.status_code == 201
    return response.json()["data"]
