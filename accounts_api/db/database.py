"""
Document store connection management using PyMongo.

Owns the long-lived client (and its connection pool), tracks the connection
state reported by the health check, and runs the startup bootstrap that
retries a bounded number of times before giving up.
"""

import asyncio
import time
from enum import Enum, IntEnum
from typing import Any, Awaitable, Callable, Optional

from pymongo import ASCENDING, MongoClient, monitoring
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import ConnectionFailure, PyMongoError

from accounts_api.core.config import Settings
from accounts_api.core.logging import get_logger

logger = get_logger(__name__)

USERS_COLLECTION = "users"

ClientFactory = Callable[..., Any]


class ConnectionState(IntEnum):
    """Connection states exposed by the health report."""

    DISCONNECTED = 0
    CONNECTED = 1
    CONNECTING = 2
    DISCONNECTING = 3

    @property
    def label(self) -> str:
        return self.name.lower()


class BootstrapState(str, Enum):
    """Outcome of the startup connection bootstrap."""

    ATTEMPTING = "attempting"
    CONNECTED = "connected"
    FAILED = "failed"


class HeartbeatStateListener(monitoring.ServerHeartbeatListener):
    """Feeds the driver's server heartbeats into the manager's connection state."""

    def __init__(self, manager: "DatabaseManager") -> None:
        self.manager = manager

    def started(self, event: monitoring.ServerHeartbeatStartedEvent) -> None:
        pass

    def succeeded(self, event: monitoring.ServerHeartbeatSucceededEvent) -> None:
        self.manager.mark_reachable(True)

    def failed(self, event: monitoring.ServerHeartbeatFailedEvent) -> None:
        self.manager.mark_reachable(False)


class DatabaseManager:
    """Holds the MongoDB client for the lifetime of the application."""

    def __init__(
        self,
        settings: Settings,
        client_factory: ClientFactory = MongoClient,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.settings = settings
        self._client_factory = client_factory
        self._sleep = sleep
        self.client: Optional[Any] = None
        self.state = ConnectionState.DISCONNECTED
        self.bootstrap_state: Optional[BootstrapState] = None
        self.attempts = 0
        self.heartbeat_listener = HeartbeatStateListener(self)

    @property
    def database(self) -> Database:
        if self.client is None:
            raise RuntimeError("Database client is not initialised; call connect() first")
        return self.client[self.settings.MONGO_DATABASE]

    @property
    def users(self) -> Collection:
        return self.database[USERS_COLLECTION]

    def _open(self) -> None:
        """Create a client, verify it answers, and ensure indexes."""
        client = self._client_factory(
            self.settings.MONGO_URI,
            authSource=self.settings.MONGO_AUTH_SOURCE,
            serverSelectionTimeoutMS=self.settings.MONGO_SERVER_SELECTION_TIMEOUT_MS,
            socketTimeoutMS=self.settings.MONGO_SOCKET_TIMEOUT_MS,
            connectTimeoutMS=self.settings.MONGO_CONNECT_TIMEOUT_MS,
            maxPoolSize=self.settings.MONGO_MAX_POOL_SIZE,
            event_listeners=[self.heartbeat_listener],
        )
        try:
            client.admin.command("ping")
            # Email uniqueness is enforced by the store, not by the application
            client[self.settings.MONGO_DATABASE][USERS_COLLECTION].create_index(
                [("email", ASCENDING)], unique=True
            )
        except PyMongoError:
            client.close()
            raise
        self.client = client

    async def connect(self) -> BootstrapState:
        """
        Connect with a fixed delay between attempts.

        Makes one initial attempt plus ``DB_CONNECT_RETRIES`` retries.

        Returns:
            BootstrapState.CONNECTED on success, BootstrapState.FAILED once
            every attempt has been used
        """
        retries_left = self.settings.DB_CONNECT_RETRIES
        delay = self.settings.DB_CONNECT_RETRY_DELAY
        self.bootstrap_state = BootstrapState.ATTEMPTING
        self.attempts = 0

        while self.bootstrap_state is BootstrapState.ATTEMPTING:
            logger.info("Attempting MongoDB connection...")
            self.attempts += 1
            self.state = ConnectionState.CONNECTING
            try:
                await asyncio.to_thread(self._open)
            except PyMongoError as e:
                self.state = ConnectionState.DISCONNECTED
                if retries_left == 0:
                    logger.error(f"Failed to connect to MongoDB: {e}")
                    self.bootstrap_state = BootstrapState.FAILED
                    break
                logger.warning(
                    f"Connection failed, retrying in {delay:g}s... "
                    f"({retries_left} attempts remaining)"
                )
                retries_left -= 1
                await self._sleep(delay)
            else:
                self.state = ConnectionState.CONNECTED
                self.bootstrap_state = BootstrapState.CONNECTED
                logger.info(f"Connected to database {self.settings.MONGO_DATABASE} successfully")

        return self.bootstrap_state

    def mark_reachable(self, reachable: bool) -> None:
        """
        Record whether the server currently answers.

        Ignored outside the open lifetime, so bootstrap and shutdown keep
        their own states.
        """
        if self.client is None or self.state is ConnectionState.DISCONNECTING:
            return
        state = ConnectionState.CONNECTED if reachable else ConnectionState.DISCONNECTED
        if state is not self.state:
            if reachable:
                logger.info("MongoDB connection restored")
            else:
                logger.warning("MongoDB connection lost")
        self.state = state

    def ping(self) -> float:
        """
        Round-trip a ping command.

        A connection failure marks the manager disconnected before it is
        re-raised.

        Returns:
            Elapsed time in milliseconds
        """
        if self.client is None:
            raise RuntimeError("Database client is not initialised; call connect() first")
        start = time.perf_counter()
        try:
            self.client.admin.command("ping")
        except ConnectionFailure:
            self.mark_reachable(False)
            raise
        self.mark_reachable(True)
        return round((time.perf_counter() - start) * 1000, 2)

    def close(self) -> None:
        """Close the client and release its pool."""
        if self.client is None:
            self.state = ConnectionState.DISCONNECTED
            return
        self.state = ConnectionState.DISCONNECTING
        try:
            self.client.close()
        finally:
            self.client = None
            self.state = ConnectionState.DISCONNECTED
            logger.info("Database connection closed")
