"""
API dependencies for FastAPI dependency injection.
Hands route handlers the components built once at startup.
"""

from typing import Annotated

from fastapi import Depends, Request

from accounts_api.db.database import DatabaseManager
from accounts_api.services.health_service import HealthService
from accounts_api.services.user_repository import UserRepository


def get_database(request: Request) -> DatabaseManager:
    return request.app.state.database


def get_user_repository(
    database: Annotated[DatabaseManager, Depends(get_database)],
) -> UserRepository:
    """
    Dependency that provides a repository bound to the users collection.

    Args:
        database: Application database manager

    Returns:
        User repository instance
    """
    return UserRepository(database.users)


def get_health_service(request: Request) -> HealthService:
    return request.app.state.health_service
