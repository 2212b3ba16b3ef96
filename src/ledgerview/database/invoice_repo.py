"""Repository functions for invoice reads.

All SQL is built here from SQLAlchemy expressions; caller-supplied text only
ever reaches the database as a bound parameter.
"""

from typing import Optional, Sequence

from sqlalchemy import String, case, cast, func, or_, select
from sqlalchemy.engine import RowMapping
from sqlalchemy.ext.asyncio import AsyncEngine
from sqlalchemy.sql.elements import ColumnElement

from ..database.schema import Customer, Invoice

STATUS_PAID = "paid"
STATUS_PENDING = "pending"


def invoice_search_predicate(query: str) -> ColumnElement[bool]:
    """
    Case-insensitive substring match across an invoice and its customer.

    Matches customer name, customer email, amount (as text), date (as text)
    and status. LIKE wildcards in the query are escaped so "%" and "_" match
    literally; an empty query matches every row.

    Shared by the page-data and page-count queries so both always agree.
    """
    return or_(
        Customer.name.icontains(query, autoescape=True),
        Customer.email.icontains(query, autoescape=True),
        cast(Invoice.amount, String).icontains(query, autoescape=True),
        cast(Invoice.date, String).icontains(query, autoescape=True),
        Invoice.status.icontains(query, autoescape=True),
    )


def status_total(status: str):
    """SUM(amount) over invoices with the given status, 0 for every other row."""
    return func.sum(case((Invoice.status == status, Invoice.amount), else_=0))


async def query_latest_invoices(engine: AsyncEngine, limit: int = 5) -> Sequence[RowMapping]:
    stmt = (
        select(
            Invoice.id,
            Invoice.amount,
            Invoice.date,
            Customer.name,
            Customer.image_url,
            Customer.email,
        )
        .join(Customer, Invoice.customer_id == Customer.id)
        .order_by(Invoice.date.desc(), Invoice.id)
        .limit(limit)
    )
    async with engine.connect() as conn:
        result = await conn.execute(stmt)
        return result.mappings().all()


async def query_filtered_invoices(
    engine: AsyncEngine,
    query: str,
    *,
    limit: int,
    offset: int,
) -> Sequence[RowMapping]:
    """
    Get one page of invoices matching the search predicate.

    Ordered by date descending with invoice id as tie-breaker, so consecutive
    pages never overlap or skip rows.
    """
    stmt = (
        select(
            Invoice.id,
            Invoice.amount,
            Invoice.date,
            Invoice.status,
            Customer.name,
            Customer.email,
            Customer.image_url,
        )
        .join(Customer, Invoice.customer_id == Customer.id)
        .where(invoice_search_predicate(query))
        .order_by(Invoice.date.desc(), Invoice.id)
        .limit(limit)
        .offset(offset)
    )
    async with engine.connect() as conn:
        result = await conn.execute(stmt)
        return result.mappings().all()


async def count_filtered_invoices(engine: AsyncEngine, query: str) -> int:
    stmt = (
        select(func.count())
        .select_from(Invoice)
        .join(Customer, Invoice.customer_id == Customer.id)
        .where(invoice_search_predicate(query))
    )
    async with engine.connect() as conn:
        result = await conn.execute(stmt)
        return int(result.scalar_one() or 0)


async def query_invoice_by_id(engine: AsyncEngine, invoice_id: str) -> Optional[RowMapping]:
    stmt = select(
        Invoice.id,
        Invoice.customer_id,
        Invoice.amount,
        Invoice.status,
    ).where(Invoice.id == invoice_id)
    async with engine.connect() as conn:
        result = await conn.execute(stmt)
        return result.mappings().first()


async def count_invoices(engine: AsyncEngine) -> int:
    async with engine.connect() as conn:
        result = await conn.execute(select(func.count()).select_from(Invoice))
        return int(result.scalar_one() or 0)


async def sum_invoices_by_status(engine: AsyncEngine) -> RowMapping:
    """
    Paid and pending totals in cents.

    Both columns are NULL when the table is empty; callers coerce.
    """
    stmt = select(
        status_total(STATUS_PAID).label("paid"),
        status_total(STATUS_PENDING).label("pending"),
    ).select_from(Invoice)
    async with engine.connect() as conn:
        result = await conn.execute(stmt)
        return result.mappings().one()
