"""Pydantic schemas for request/response validation."""

from accounts_api.schemas.health import (
    ApplicationInfo,
    CpuSnapshot,
    DatabaseSnapshot,
    FrameworkInfo,
    HealthReport,
    SystemSnapshot,
    UsageSnapshot,
)
from accounts_api.schemas.user import (
    OBJECT_ID_PATTERN,
    UserCreate,
    UserEnvelope,
    UserListEnvelope,
    UserResponse,
    UserUpdate,
)

__all__ = [
    "ApplicationInfo",
    "CpuSnapshot",
    "DatabaseSnapshot",
    "FrameworkInfo",
    "HealthReport",
    "OBJECT_ID_PATTERN",
    "SystemSnapshot",
    "UsageSnapshot",
    "UserCreate",
    "UserEnvelope",
    "UserListEnvelope",
    "UserResponse",
    "UserUpdate",
]
