"""Export API: invoice and customer tables as JSON or CSV."""

import csv
import json
from io import StringIO
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Sequence

from pydantic import BaseModel

from ..utils.time import utc_now_z
from .customers_api import fetch_filtered_customers
from .invoices_api import fetch_filtered_invoices

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

INVOICE_COLUMNS = ["id", "date", "status", "amount", "name", "email"]
CUSTOMER_COLUMNS = ["id", "name", "email", "total_invoices", "total_pending", "total_paid"]


def _render(
    rows: Sequence[BaseModel],
    columns: List[str],
    format: str,
    out: Path | None,
) -> str:
    data: List[Dict[str, Any]] = [row.model_dump(mode="json") for row in rows]

    if format == "json":
        export_data = {
            "export_schema_version": "1",
            "exported_at_utc": utc_now_z(),
            "data": data,
        }
        output = json.dumps(export_data, indent=2, sort_keys=True)
        if out:
            out.write_text(output, encoding="utf-8")
            return f"Exported to {out}"
        return output
    elif format == "csv":
        # Stable column order, no nested structures
        output_buffer = StringIO()
        writer = csv.writer(output_buffer)
        writer.writerow(columns)
        for row in data:
            writer.writerow([row.get(col, "") for col in columns])

        output = output_buffer.getvalue()
        if out:
            out.write_text(output, encoding="utf-8", newline="")
            return f"Exported to {out}"
        return output
    else:
        raise ValueError(f"Unsupported format: {format}")


async def export_invoices(
    engine: "AsyncEngine",
    query: str = "",
    page: int = 1,
    format: str = "json",
    out: Path | None = None,
) -> str:
    """
    Export one page of the invoices table.

    Args:
        engine: Async engine
        query: Search text, as for fetch_filtered_invoices
        page: 1-indexed page
        format: Export format ("json" or "csv")
        out: Output file path (if None, returns as string)

    Returns:
        Exported data as string (if out is None) or a confirmation after writing to file
    """
    if format not in ("json", "csv"):
        raise ValueError(f"Unsupported format: {format}")
    rows = await fetch_filtered_invoices(engine, query, page)
    return _render(rows, INVOICE_COLUMNS, format, out)


async def export_customers(
    engine: "AsyncEngine",
    query: str = "",
    format: str = "json",
    out: Path | None = None,
) -> str:
    """Export the customers table (all matches, unpaginated)."""
    if format not in ("json", "csv"):
        raise ValueError(f"Unsupported format: {format}")
    rows = await fetch_filtered_customers(engine, query)
    return _render(rows, CUSTOMER_COLUMNS, format, out)
