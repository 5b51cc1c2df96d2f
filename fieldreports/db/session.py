from __future__ import annotations

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from fieldreports.core.config import settings

_engine: Optional[AsyncEngine] = None


def build_engine(dsn: str) -> AsyncEngine:
    if dsn.startswith("sqlite"):
        return create_async_engine(dsn)
    return create_async_engine(
        dsn,
        pool_pre_ping=True,
        pool_recycle=3600,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_timeout=30,
    )


def get_engine() -> AsyncEngine:
    """Return the process-wide async engine (created on first use)."""
    global _engine
    if _engine is None:
        _engine = build_engine(settings.DATABASE_DSN)
    return _engine


async def dispose_engine() -> None:
    global _engine
    if _engine is not None:
        await _engine.dispose()
        _engine = None
