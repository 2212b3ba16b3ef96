"""Repository functions for customer reads."""

from typing import Sequence

from sqlalchemy import func, or_, select
from sqlalchemy.engine import RowMapping
from sqlalchemy.ext.asyncio import AsyncEngine

from ..database.invoice_repo import STATUS_PAID, STATUS_PENDING, status_total
from ..database.schema import Customer, Invoice


async def query_customers(engine: AsyncEngine) -> Sequence[RowMapping]:
    """All customers as (id, name), name ascending."""
    stmt = select(Customer.id, Customer.name).order_by(Customer.name.asc(), Customer.id)
    async with engine.connect() as conn:
        result = await conn.execute(stmt)
        return result.mappings().all()


async def count_customers(engine: AsyncEngine) -> int:
    async with engine.connect() as conn:
        result = await conn.execute(select(func.count()).select_from(Customer))
        return int(result.scalar_one() or 0)


async def query_filtered_customers(engine: AsyncEngine, query: str) -> Sequence[RowMapping]:
    """
    Customers whose name or email contains the query, with invoice aggregates.

    LEFT JOIN keeps customers without invoices; their totals come back as
    NULL (sums) and 0 (count).
    """
    stmt = (
        select(
            Customer.id,
            Customer.name,
            Customer.email,
            Customer.image_url,
            func.count(Invoice.id).label("total_invoices"),
            status_total(STATUS_PENDING).label("total_pending"),
            status_total(STATUS_PAID).label("total_paid"),
        )
        .select_from(Customer)
        .outerjoin(Invoice, Customer.id == Invoice.customer_id)
        .where(
            or_(
                Customer.name.icontains(query, autoescape=True),
                Customer.email.icontains(query, autoescape=True),
            )
        )
        .group_by(Customer.id, Customer.name, Customer.email, Customer.image_url)
        .order_by(Customer.name.asc(), Customer.id)
    )
    async with engine.connect() as conn:
        result = await conn.execute(stmt)
        return result.mappings().all()
