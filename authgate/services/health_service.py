"""
Health checks for downstream dependencies.
"""
import asyncio
from typing import Protocol

import structlog
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from authgate.database import create_engine
from authgate.exceptions import DependencyUnhealthyError

logger = structlog.get_logger()


class HealthChecker(Protocol):
    """Anything that can report on a dependency."""

    async def check(self) -> dict: ...

    async def close(self) -> None: ...


class DatabaseHealthChecker:
    """Checks database reachability with SELECT 1."""

    def __init__(self, database_url: str, timeout: float = 2.0):
        self.database_url = database_url
        self.timeout = timeout
        self._engine: AsyncEngine | None = None

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            self._engine = create_engine(self.database_url)
        return self._engine

    async def check(self) -> dict:
        """
        Probe the database.

        Returns:
            {"status": "up", "message": ...}

        Raises:
            DependencyUnhealthyError: if the database is unreachable or slow
        """
        try:
            async with asyncio.timeout(self.timeout):
                async with self.engine.connect() as conn:
                    await conn.execute(text("SELECT 1"))
        except TimeoutError as e:
            raise DependencyUnhealthyError("database did not answer in time", original_error=e) from e
        except (SQLAlchemyError, OSError) as e:
            raise DependencyUnhealthyError(f"database unreachable: {e.__class__.__name__}", original_error=e) from e

        return {"status": "up", "message": "It's healthy"}

    async def close(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None


async def run_health_check(checker: HealthChecker) -> dict:
    """
    Run a checker and serialize the outcome.

    Unhealthy dependencies become a "down" body; the caller always answers 200.
    """
    try:
        return await checker.check()
    except DependencyUnhealthyError as e:
        logger.warning("dependency_unhealthy", detail=e.message)
        return {
            "status": "down",
            "message": "It's not healthy",
            "error": e.message,
        }
