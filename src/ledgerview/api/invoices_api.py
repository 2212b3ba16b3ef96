"""Invoices API: latest invoices, search with pagination, single invoice."""

import math
from typing import TYPE_CHECKING, List, Optional

from ..database.invoice_repo import (
    count_filtered_invoices,
    query_filtered_invoices,
    query_invoice_by_id,
    query_latest_invoices,
)
from ..errors import DashboardError, ErrorKind, query_failure
from .models import FilteredInvoiceRow, InvoiceForm, LatestInvoice

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

ITEMS_PER_PAGE = 6
LATEST_INVOICES_LIMIT = 5


def page_offset(page: int) -> int:
    """Offset for a 1-indexed page. Pages below 1 are not rejected here."""
    return (page - 1) * ITEMS_PER_PAGE


async def fetch_latest_invoices(engine: "AsyncEngine") -> List[LatestInvoice]:
    """The five most recent invoices with customer identity, amounts in cents."""
    with query_failure("fetch_latest_invoices", "Failed to fetch the latest invoices."):
        rows = await query_latest_invoices(engine, limit=LATEST_INVOICES_LIMIT)
        return [LatestInvoice(**row) for row in rows]


async def fetch_filtered_invoices(
    engine: "AsyncEngine",
    query: str,
    current_page: int,
) -> List[FilteredInvoiceRow]:
    """
    One page of invoices matching a search string.

    Args:
        engine: Async engine
        query: Search text; matched case-insensitively as a substring of
            customer name, customer email, amount, date or status. "" matches all.
        current_page: 1-indexed page number

    Returns:
        At most ITEMS_PER_PAGE rows, newest first
    """
    with query_failure("fetch_filtered_invoices", "Failed to fetch invoices."):
        rows = await query_filtered_invoices(
            engine,
            query,
            limit=ITEMS_PER_PAGE,
            offset=page_offset(current_page),
        )
        return [FilteredInvoiceRow(**row) for row in rows]


async def fetch_invoices_pages(engine: "AsyncEngine", query: str) -> int:
    """Number of pages fetch_filtered_invoices yields for the same query."""
    with query_failure("fetch_invoices_pages", "Failed to fetch total number of invoices."):
        total = await count_filtered_invoices(engine, query)
        return math.ceil(int(total) / ITEMS_PER_PAGE)


async def fetch_invoice_by_id(engine: "AsyncEngine", invoice_id: str) -> Optional[InvoiceForm]:
    """
    Get one invoice for editing, amount converted from cents to dollars.

    Returns:
        InvoiceForm or None if no invoice has this id
    """
    with query_failure("fetch_invoice_by_id", "Failed to fetch invoice."):
        row = await query_invoice_by_id(engine, invoice_id)
        if row is None:
            return None
        return InvoiceForm(
            id=row["id"],
            customer_id=row["customer_id"],
            amount=row["amount"] / 100,
            status=row["status"],
        )


async def require_invoice_by_id(engine: "AsyncEngine", invoice_id: str) -> InvoiceForm:
    """Like fetch_invoice_by_id, but absence raises a NOT_FOUND DashboardError."""
    invoice = await fetch_invoice_by_id(engine, invoice_id)
    if invoice is None:
        raise DashboardError(ErrorKind.NOT_FOUND, "Invoice not found.", operation="fetch_invoice_by_id")
    return invoice
