"""
Application configuration management using Pydantic Settings.
All settings can be overridden via environment variables.
"""

from functools import lru_cache
from urllib.parse import quote_plus
from typing import Any, List, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Application
    PROJECT_NAME: str = "Accounts API"
    VERSION: str = "1.0.0"
    BUILD: str = "unknown"
    ENVIRONMENT: Literal["development", "production"] = "development"
    PORT: int = Field(default=3000, ge=1, le=65535)
    API_V1_PREFIX: str = "/api/v1"
    DEBUG: bool = False
    GZIP_MINIMUM_SIZE: int = Field(default=1024, ge=0)

    # Database (required, the process refuses to start without them)
    MONGO_PATH: str
    MONGO_USER: str
    MONGO_PASSWORD: str
    MONGO_DATABASE: str
    MONGO_AUTH_SOURCE: str = "admin"
    MONGO_SERVER_SELECTION_TIMEOUT_MS: int = 5000
    MONGO_SOCKET_TIMEOUT_MS: int = 45000
    MONGO_CONNECT_TIMEOUT_MS: int = 10000
    MONGO_MAX_POOL_SIZE: int = 10

    # Connection bootstrap
    DB_CONNECT_RETRIES: int = Field(default=5, ge=0)
    DB_CONNECT_RETRY_DELAY: float = Field(default=5.0, ge=0)

    # CORS
    BACKEND_CORS_ORIGINS: List[str] = ["*"]

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v: Any) -> List[str] | str:
        """Parse CORS origins from string or list."""
        if isinstance(v, str) and not v.startswith("["):
            return [i.strip() for i in v.split(",")]
        elif isinstance(v, (list, str)):
            return v
        raise ValueError(v)

    # Health checks
    HEALTH_PROBE_TIMEOUT: float = 5.0
    HEALTH_CPU_SAMPLE_INTERVAL: float = 0.1
    HEALTH_DISK_PATH: str = "/"

    @property
    def MONGO_URI(self) -> str:
        """Build the MongoDB connection string."""
        return (
            f"mongodb://{quote_plus(self.MONGO_USER)}:{quote_plus(self.MONGO_PASSWORD)}"
            f"@{self.MONGO_PATH}/{self.MONGO_DATABASE}"
        )

    @property
    def is_production(self) -> bool:
        """Check if the app is running in production mode."""
        return self.ENVIRONMENT == "production"


@lru_cache
def get_settings() -> Settings:
    """
    Build the settings once per process.

    Raises:
        pydantic.ValidationError: If a required variable is missing
    """
    return Settings()  # type: ignore
