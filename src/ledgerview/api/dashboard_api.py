"""Dashboard API: revenue chart and summary cards."""

import asyncio
from typing import TYPE_CHECKING, List

from ..database.customer_repo import count_customers
from ..database.invoice_repo import count_invoices, sum_invoices_by_status
from ..database.revenue_repo import query_revenue
from ..errors import query_failure
from ..utils.currency import format_currency
from .models import CardSummary, RevenuePoint

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine


async def fetch_revenue(engine: "AsyncEngine") -> List[RevenuePoint]:
    """Monthly revenue series; revenue is coerced to a number whatever the driver returns."""
    with query_failure("fetch_revenue", "Failed to fetch revenue data."):
        rows = await query_revenue(engine)
        return [RevenuePoint(month=row["month"], revenue=float(row["revenue"])) for row in rows]


async def fetch_card_data(engine: "AsyncEngine") -> CardSummary:
    """
    Get the summary card totals.

    The invoice count, customer count and status totals are queried
    concurrently. If any of the three fails the others are cancelled and the
    whole call fails; no partial summary is returned.

    Args:
        engine: Async engine

    Returns:
        CardSummary with counts as ints and totals as display strings
        ("$0.00" when there are no invoices of that status)
    """
    with query_failure("fetch_card_data", "Failed to fetch card data."):
        tasks = [
            asyncio.ensure_future(count_invoices(engine)),
            asyncio.ensure_future(count_customers(engine)),
            asyncio.ensure_future(sum_invoices_by_status(engine)),
        ]
        try:
            invoice_count, customer_count, totals = await asyncio.gather(*tasks)
        except BaseException:
            # Stop the siblings so their connections are back in the pool before we raise
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
        return CardSummary(
            number_of_invoices=int(invoice_count),
            number_of_customers=int(customer_count),
            total_paid_invoices=format_currency(totals["paid"] or 0),
            total_pending_invoices=format_currency(totals["pending"] or 0),
        )
