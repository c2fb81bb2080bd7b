"""
Database engine for the health check.

authgate stores no user records; the database is only probed by /health.
"""
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine


def create_engine(database_url: str) -> AsyncEngine:
    """Create an async engine with a small pool and pre-ping enabled."""
    return create_async_engine(
        database_url,
        pool_pre_ping=True,
        pool_size=2,
        max_overflow=0,
    )
