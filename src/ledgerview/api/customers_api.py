"""Customers API: selection list and the customers table."""

from typing import TYPE_CHECKING, List

from ..database.customer_repo import query_customers, query_filtered_customers
from ..errors import query_failure
from ..utils.currency import format_currency
from .models import CustomerField, CustomerSummaryRow

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine


async def fetch_customers(engine: "AsyncEngine") -> List[CustomerField]:
    """All customers by name, for select inputs."""
    with query_failure("fetch_customers", "Failed to fetch all customers."):
        rows = await query_customers(engine)
        return [CustomerField(id=row["id"], name=row["name"]) for row in rows]


async def fetch_filtered_customers(engine: "AsyncEngine", query: str) -> List[CustomerSummaryRow]:
    """
    Customers whose name or email contains query, with invoice totals.

    Customers without invoices are included with zero counts and "$0.00"
    totals. Not paginated.
    """
    with query_failure("fetch_filtered_customers", "Failed to fetch customer table."):
        rows = await query_filtered_customers(engine, query)
        return [
            CustomerSummaryRow(
                id=row["id"],
                name=row["name"],
                email=row["email"],
                image_url=row["image_url"],
                total_invoices=int(row["total_invoices"] or 0),
                total_pending=format_currency(row["total_pending"] or 0),
                total_paid=format_currency(row["total_paid"] or 0),
            )
            for row in rows
        ]
