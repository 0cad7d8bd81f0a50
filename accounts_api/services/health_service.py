"""
Health aggregation service.

Collects the database status and host metrics concurrently and folds them
into a single report. Each probe is isolated: a probe that raises or times
out is replaced by a zeroed snapshot marked ``unavailable`` and the report is
still produced.
"""

import asyncio
import platform
import time
from datetime import datetime, timezone
from typing import Awaitable, Optional, Protocol, TypeVar

import fastapi
import psutil
from pymongo.errors import PyMongoError

from accounts_api.core.config import Settings
from accounts_api.core.logging import get_logger
from accounts_api.db.database import ConnectionState, DatabaseManager
from accounts_api.schemas.health import (
    ApplicationInfo,
    CpuSnapshot,
    DatabaseSnapshot,
    FrameworkInfo,
    HealthReport,
    SystemSnapshot,
    UsageSnapshot,
)

logger = get_logger(__name__)

T = TypeVar("T")

CPU_LOAD_LIMIT = 90.0
MIN_AVAILABLE_MEMORY = 1_000_000_000

HEALTHY_MESSAGE = "System is healthy"
UNHEALTHY_MESSAGE = "System health check detected issues"


class HostMetrics(Protocol):
    """Source of host readings; every method may block."""

    def cpu_load(self) -> float: ...

    def cpu_cores(self) -> int: ...

    def memory(self) -> UsageSnapshot: ...

    def disk(self) -> UsageSnapshot: ...


def used_percent(used: int, total: int) -> float:
    if total <= 0:
        return 0.0
    return round(used / total * 100, 2)


class PsutilHostMetrics:
    """Host readings backed by psutil."""

    def __init__(self, cpu_interval: float = 0.1, disk_path: str = "/") -> None:
        self.cpu_interval = cpu_interval
        self.disk_path = disk_path

    def cpu_load(self) -> float:
        return float(psutil.cpu_percent(interval=self.cpu_interval))

    def cpu_cores(self) -> int:
        cores = psutil.cpu_count(logical=True)
        if cores is None:
            raise RuntimeError("CPU core count is not available on this platform")
        return cores

    def memory(self) -> UsageSnapshot:
        vm = psutil.virtual_memory()
        return UsageSnapshot(
            total=vm.total,
            free=vm.available,
            used=vm.used,
            used_percent=used_percent(vm.used, vm.total),
        )

    def disk(self) -> UsageSnapshot:
        usage = psutil.disk_usage(self.disk_path)
        return UsageSnapshot(
            total=usage.total,
            free=usage.free,
            used=usage.used,
            used_percent=used_percent(usage.used, usage.total),
        )


def is_healthy(database_state: int, cpu_load: float, available_memory: int) -> bool:
    """
    Overall verdict.

    Healthy only when the database is connected, CPU load is below 90% and
    more than 1 GB of memory is available.
    """
    return (
        database_state == ConnectionState.CONNECTED
        and cpu_load < CPU_LOAD_LIMIT
        and available_memory > MIN_AVAILABLE_MEMORY
    )


class HealthService:
    """Builds health reports for the ``/health`` endpoint."""

    def __init__(
        self,
        settings: Settings,
        database: DatabaseManager,
        metrics: Optional[HostMetrics] = None,
    ) -> None:
        self.settings = settings
        self.database = database
        self.metrics = metrics or PsutilHostMetrics(
            cpu_interval=settings.HEALTH_CPU_SAMPLE_INTERVAL,
            disk_path=settings.HEALTH_DISK_PATH,
        )
        self.process_started_at = psutil.Process().create_time()

    async def _guard(self, name: str, probe: Awaitable[T], default: T) -> T:
        """Await a probe within the timeout, substituting ``default`` on failure."""
        try:
            return await asyncio.wait_for(probe, timeout=self.settings.HEALTH_PROBE_TIMEOUT)
        except Exception as e:  # a failed probe must not abort the report
            logger.warning(f"Health probe '{name}' failed: {e!r}")
            return default

    def _database_default(self) -> DatabaseSnapshot:
        state = ConnectionState.DISCONNECTED
        return DatabaseSnapshot(
            name=self.settings.MONGO_DATABASE,
            host=self.settings.MONGO_PATH,
            state=int(state),
            status=state.label,
            unavailable=True,
        )

    async def database_status(self) -> DatabaseSnapshot:
        """
        Report the connection state, plus ping latency when connected.

        A failed ping drops ``responseTime``. The state is read after the
        ping, so a connection the driver has lost reports as disconnected.
        """
        response_time = None
        if self.database.state is ConnectionState.CONNECTED:
            try:
                response_time = await asyncio.to_thread(self.database.ping)
            except (PyMongoError, RuntimeError) as e:
                logger.debug(f"Database ping failed: {e!r}")
        state = self.database.state
        return DatabaseSnapshot(
            name=self.settings.MONGO_DATABASE,
            host=self.settings.MONGO_PATH,
            state=int(state),
            status=state.label,
            response_time=response_time,
        )

    async def get_health(self) -> HealthReport:
        """Run all probes concurrently and assemble the report."""
        database, cpu_load, cpu_cores, memory, disk = await asyncio.gather(
            self._guard("database", self.database_status(), self._database_default()),
            self._guard("cpu_load", asyncio.to_thread(self.metrics.cpu_load), None),
            self._guard("cpu_cores", asyncio.to_thread(self.metrics.cpu_cores), None),
            self._guard(
                "memory", asyncio.to_thread(self.metrics.memory), UsageSnapshot(unavailable=True)
            ),
            self._guard(
                "disk", asyncio.to_thread(self.metrics.disk), UsageSnapshot(unavailable=True)
            ),
        )

        cpu = CpuSnapshot(
            usage=round(cpu_load, 2) if cpu_load is not None else 0.0,
            cores=cpu_cores if cpu_cores is not None else 0,
            unavailable=True if cpu_load is None or cpu_cores is None else None,
        )
        healthy = is_healthy(database.state, cpu_load or 0.0, memory.free)

        return HealthReport(
            status="healthy" if healthy else "unhealthy",
            message=HEALTHY_MESSAGE if healthy else UNHEALTHY_MESSAGE,
            timestamp=datetime.now(timezone.utc).isoformat(timespec="milliseconds"),
            uptime=round(time.time() - self.process_started_at, 3),
            system=SystemSnapshot(cpu=cpu, memory=memory, disk=disk),
            database=database,
            framework=FrameworkInfo(
                name="FastAPI",
                version=fastapi.__version__,
                python_version=platform.python_version(),
            ),
            application=ApplicationInfo(
                environment=self.settings.ENVIRONMENT,
                version=self.settings.VERSION,
                build=self.settings.BUILD,
            ),
        )

