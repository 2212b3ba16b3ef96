"""Repository functions for the monthly revenue series."""

from typing import Sequence

from sqlalchemy import select
from sqlalchemy.engine import RowMapping
from sqlalchemy.ext.asyncio import AsyncEngine

from ..database.schema import Revenue


async def query_revenue(engine: AsyncEngine) -> Sequence[RowMapping]:
    async with engine.connect() as conn:
        result = await conn.execute(select(Revenue.month, Revenue.revenue))
        return result.mappings().all()
