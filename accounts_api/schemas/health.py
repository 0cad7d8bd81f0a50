"""
Health report schemas.

Snapshots built from a failed probe carry ``unavailable=True`` and zeroed
readings; the field is omitted from responses otherwise.
"""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class CpuSnapshot(BaseModel):
    usage: float = 0.0
    cores: int = 0
    unavailable: Optional[bool] = None


class UsageSnapshot(BaseModel):
    """Byte totals for memory or a disk volume."""

    model_config = ConfigDict(populate_by_name=True)

    total: int = 0
    free: int = 0
    used: int = 0
    used_percent: float = Field(default=0.0, alias="usedPercent")
    unavailable: Optional[bool] = None


class SystemSnapshot(BaseModel):
    cpu: CpuSnapshot
    memory: UsageSnapshot
    disk: UsageSnapshot


class DatabaseSnapshot(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    host: str
    state: int
    status: str
    response_time: Optional[float] = Field(default=None, alias="responseTime")
    unavailable: Optional[bool] = None


class FrameworkInfo(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    version: str
    python_version: str = Field(alias="pythonVersion")


class ApplicationInfo(BaseModel):
    environment: str
    version: str
    build: str


class HealthReport(BaseModel):
    """Aggregated health of the process, the host and the database."""

    status: Literal["healthy", "unhealthy"]
    message: str
    timestamp: str
    uptime: float
    system: SystemSnapshot
    database: DatabaseSnapshot
    framework: FrameworkInfo
    application: ApplicationInfo
