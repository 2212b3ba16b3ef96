"""CLI entrypoint for the ledgerview read models."""

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional

from ledgerview.api.customers_api import fetch_customers, fetch_filtered_customers
from ledgerview.api.dashboard_api import fetch_card_data, fetch_revenue
from ledgerview.api.export import export_customers, export_invoices
from ledgerview.api.invoices_api import (
    fetch_filtered_invoices,
    fetch_invoice_by_id,
    fetch_invoices_pages,
    fetch_latest_invoices,
)
from ledgerview.config.loader import load_config, resolve_database_url, resolve_engine_options
from ledgerview.database.client import get_engine, init_schema
from ledgerview.errors import DashboardError
from ledgerview.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)


def _to_jsonable(value: Any) -> Any:
    if isinstance(value, list):
        return [_to_jsonable(item) for item in value]
    if isinstance(value, dict):
        return {key: _to_jsonable(item) for key, item in value.items()}
    if hasattr(value, "model_dump"):
        return value.model_dump(mode="json")
    return value


def _print_json(payload: Any) -> None:
    print(json.dumps(_to_jsonable(payload), indent=2, sort_keys=True))


async def _cmd_init_db(engine, args: argparse.Namespace) -> None:
    await init_schema(engine)
    print("Schema ready.")


async def _cmd_cards(engine, args: argparse.Namespace) -> None:
    _print_json(await fetch_card_data(engine))


async def _cmd_revenue(engine, args: argparse.Namespace) -> None:
    _print_json(await fetch_revenue(engine))


async def _cmd_latest(engine, args: argparse.Namespace) -> None:
    _print_json(await fetch_latest_invoices(engine))


async def _cmd_invoices(engine, args: argparse.Namespace) -> None:
    # Page data and page count always use the same query string
    rows, total_pages = await asyncio.gather(
        fetch_filtered_invoices(engine, args.query, args.page),
        fetch_invoices_pages(engine, args.query),
    )
    _print_json({"page": args.page, "total_pages": total_pages, "rows": rows})


async def _cmd_invoice(engine, args: argparse.Namespace) -> Optional[int]:
    invoice = await fetch_invoice_by_id(engine, args.invoice_id)
    if invoice is None:
        print(f"Invoice not found: {args.invoice_id}", file=sys.stderr)
        return 1
    _print_json(invoice)
    return None


async def _cmd_customers(engine, args: argparse.Namespace) -> None:
    if args.query is None:
        _print_json(await fetch_customers(engine))
    else:
        _print_json(await fetch_filtered_customers(engine, args.query))


async def _cmd_export(engine, args: argparse.Namespace) -> None:
    if args.table == "invoices":
        output = await export_invoices(engine, args.query, args.page, format=args.format, out=args.out)
    else:
        output = await export_customers(engine, args.query, format=args.format, out=args.out)
    print(output)


async def _run(
    handler: Callable[[Any, argparse.Namespace], Awaitable[Optional[int]]],
    args: argparse.Namespace,
) -> Optional[int]:
    config = load_config(args.config)
    engine = get_engine(resolve_database_url(config), **resolve_engine_options(config))
    try:
        return await handler(engine, args)
    finally:
        await engine.dispose()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ledgerview",
        description="Invoice dashboard read models",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to YAML config (default: ledgerview.config.yaml if present)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands", required=True)

    init_parser = subparsers.add_parser("init-db", help="Create missing tables")
    init_parser.set_defaults(func=_cmd_init_db)

    cards_parser = subparsers.add_parser("cards", help="Show summary card totals")
    cards_parser.set_defaults(func=_cmd_cards)

    revenue_parser = subparsers.add_parser("revenue", help="Show the monthly revenue series")
    revenue_parser.set_defaults(func=_cmd_revenue)

    latest_parser = subparsers.add_parser("latest", help="Show the five most recent invoices")
    latest_parser.set_defaults(func=_cmd_latest)

    invoices_parser = subparsers.add_parser("invoices", help="Search invoices, one page at a time")
    invoices_parser.add_argument("--query", type=str, default="", help="Search text (default: match all)")
    invoices_parser.add_argument("--page", type=int, default=1, help="1-indexed page (default: 1)")
    invoices_parser.set_defaults(func=_cmd_invoices)

    invoice_parser = subparsers.add_parser("invoice", help="Show one invoice by id")
    invoice_parser.add_argument("invoice_id", type=str, help="Invoice ID")
    invoice_parser.set_defaults(func=_cmd_invoice)

    customers_parser = subparsers.add_parser("customers", help="List customers or search the customers table")
    customers_parser.add_argument(
        "--query",
        type=str,
        default=None,
        help="Search text; without it, print the plain customer list",
    )
    customers_parser.set_defaults(func=_cmd_customers)

    export_parser = subparsers.add_parser("export", help="Export invoices or customers")
    export_parser.add_argument("table", choices=["invoices", "customers"], help="Table to export")
    export_parser.add_argument("--query", type=str, default="", help="Search text (default: match all)")
    export_parser.add_argument("--page", type=int, default=1, help="Invoice page to export (default: 1)")
    export_parser.add_argument(
        "--format",
        type=str,
        choices=["json", "csv"],
        default="json",
        help="Output format (default: json)",
    )
    export_parser.add_argument("--out", type=Path, default=None, help="Write to this file instead of stdout")
    export_parser.set_defaults(func=_cmd_export)

    return parser


def main(argv: Optional[list[str]] = None) -> None:
    """Main CLI entrypoint."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    try:
        exit_code = asyncio.run(_run(args.func, args))
    except DashboardError as exc:
        print(f"[ledgerview] {exc.message}", file=sys.stderr)
        raise SystemExit(1)
    except (FileNotFoundError, ValueError) as exc:
        logger.debug("Configuration error", exc_info=True)
        print(f"[ledgerview] {exc}", file=sys.stderr)
        raise SystemExit(2)

    if exit_code:
        raise SystemExit(exit_code)


if __name__ == "__main__":
    main()
