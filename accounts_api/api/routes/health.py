"""
Health check route for monitoring and service discovery.
Reports process, host and database status; always answers 200.
"""

from typing import Annotated

from fastapi import APIRouter, Depends

from accounts_api.api.deps import get_health_service
from accounts_api.schemas.health import HealthReport
from accounts_api.services.health_service import HealthService

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthReport, response_model_exclude_none=True)
async def health_check(
    health_service: Annotated[HealthService, Depends(get_health_service)],
) -> HealthReport:
    """
    Aggregated health check.
    The verdict is informational: an unhealthy system still returns 200.

    Returns:
        Health report
    """
    return await health_service.get_health()
