"""Repository functions for user lookups."""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.engine import RowMapping
from sqlalchemy.ext.asyncio import AsyncEngine

from ..database.schema import User


async def find_user_by_email(engine: AsyncEngine, email: str) -> Optional[RowMapping]:
    """Get the user row with exactly this email, or None."""
    stmt = select(User.id, User.name, User.email, User.password).where(User.email == email)
    async with engine.connect() as conn:
        result = await conn.execute(stmt)
        return result.mappings().first()
