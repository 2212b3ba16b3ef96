from typing import Any

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from .schema import Base


def get_engine(database_url: str, **options: Any) -> AsyncEngine:
    """
    Build the async engine every read model takes as its first argument.

    The engine owns the connection pool; each statement checks a connection
    out and returns it, so one engine is safe to share across concurrent
    coroutines.
    """
    return create_async_engine(database_url, **options)


async def init_schema(engine: AsyncEngine) -> None:
    """Create any missing tables."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
