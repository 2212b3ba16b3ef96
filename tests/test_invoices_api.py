"""Tests for the invoices read models: latest, search, pagination, by id."""

import asyncio
from datetime import date, timedelta

import pytest

from ledgerview.api.invoices_api import (
    ITEMS_PER_PAGE,
    fetch_filtered_invoices,
    fetch_invoice_by_id,
    fetch_invoices_pages,
    fetch_latest_invoices,
    page_offset,
    require_invoice_by_id,
)
from ledgerview.database.schema import Customer, Invoice
from ledgerview.errors import DashboardError, ErrorKind

ALL_IDS_NEWEST_FIRST = [
    "i04", "i11", "i05", "i06", "i07", "i09",
    "i08", "i10", "i14", "i12", "i01", "i02",
    "i03", "i13",
]


def test_latest_invoices_are_five_newest_with_customer_identity(engine):
    """Test that the latest invoices are the five newest, joined with customer fields."""
    latest = asyncio.run(fetch_latest_invoices(engine))

    assert [inv.id for inv in latest] == ["i04", "i11", "i05", "i06", "i07"]
    first = latest[0]
    assert first.name == "Evil Rabbit"
    assert first.email == "evil@rabbit.com"
    assert first.image_url == "/customers/evil-rabbit.png"
    assert first.amount == 44800  # still cents
    assert first.date.isoformat() == "2023-09-10"


def test_page_offset_is_one_indexed():
    assert page_offset(1) == 0
    assert page_offset(2) == ITEMS_PER_PAGE
    assert page_offset(4) == 18


def test_empty_query_pages_cover_all_rows_without_overlap(engine):
    """Test that the pages of an empty search cover every invoice exactly once, newest first."""
    total_pages = asyncio.run(fetch_invoices_pages(engine, ""))
    assert total_pages == 3

    seen = []
    for page in range(1, total_pages + 1):
        rows = asyncio.run(fetch_filtered_invoices(engine, "", page))
        assert len(rows) <= ITEMS_PER_PAGE
        seen.extend(rows)

    assert [row.id for row in seen] == ALL_IDS_NEWEST_FIRST
    dates = [row.date for row in seen]
    assert dates == sorted(dates, reverse=True)

    # Past the last page there is nothing
    assert asyncio.run(fetch_filtered_invoices(engine, "", total_pages + 1)) == []


def test_same_date_invoices_have_stable_order(engine):
    """Test that invoices sharing a date keep one order across calls."""
    page = asyncio.run(fetch_filtered_invoices(engine, "", 2))
    assert [row.id for row in page] == ["i08", "i10", "i14", "i12", "i01", "i02"]


@pytest.mark.parametrize(
    "query, expected_ids",
    [
        ("rabbit", ["i04", "i07", "i10", "i01", "i13"]),  # customer name
        ("OLIVEIRA.COM", ["i11", "i05", "i08", "i14", "i02"]),  # customer email, case-insensitive
        ("666", ["i07"]),  # amount as text
        ("2023-06", ["i07", "i09", "i08", "i10", "i14", "i12"]),  # date as text
        ("Paid", ["i04", "i11", "i09", "i08", "i10", "i12", "i03", "i13"]),  # status
    ],
)
def test_search_matches_every_field(engine, query, expected_ids):
    """Test that the search predicate covers name, email, amount, date and status."""
    rows = []
    for page in range(1, asyncio.run(fetch_invoices_pages(engine, query)) + 1):
        rows.extend(asyncio.run(fetch_filtered_invoices(engine, query, page)))
    assert [row.id for row in rows] == expected_ids


def test_page_count_matches_filtered_rows(engine):
    """Test that page count and page data agree for the same query."""
    assert asyncio.run(fetch_invoices_pages(engine, "paid")) == 2
    assert len(asyncio.run(fetch_filtered_invoices(engine, "paid", 1))) == 6
    assert len(asyncio.run(fetch_filtered_invoices(engine, "paid", 2))) == 2


def test_no_match_gives_zero_pages(engine):
    assert asyncio.run(fetch_invoices_pages(engine, "no such thing")) == 0
    assert asyncio.run(fetch_filtered_invoices(engine, "no such thing", 1)) == []


def test_like_wildcards_in_query_match_literally(engine):
    """Test that % and _ in the search text are not treated as wildcards."""
    assert asyncio.run(fetch_invoices_pages(engine, "%")) == 0
    assert asyncio.run(fetch_filtered_invoices(engine, "_", 1)) == []


def test_query_text_is_bound_not_interpolated(engine):
    """Test that SQL in the search text is treated as plain text."""
    hostile = "' OR 1=1 --"
    assert asyncio.run(fetch_filtered_invoices(engine, hostile, 1)) == []
    assert asyncio.run(fetch_invoices_pages(engine, hostile)) == 0


def test_filtered_row_fields(engine):
    rows = asyncio.run(fetch_filtered_invoices(engine, "666", 1))
    row = rows[0]
    assert row.model_dump(mode="json") == {
        "id": "i07",
        "amount": 666,
        "date": "2023-06-27",
        "status": "pending",
        "name": "Evil Rabbit",
        "email": "evil@rabbit.com",
        "image_url": "/customers/evil-rabbit.png",
    }


def test_invoice_by_id_converts_cents_to_dollars(engine):
    """Test that a stored 12345 cents comes back as 123.45."""
    invoice = asyncio.run(fetch_invoice_by_id(engine, "i14"))

    assert invoice is not None
    assert invoice.id == "i14"
    assert invoice.customer_id == "c2"
    assert invoice.amount == 123.45
    assert invoice.status == "pending"


def test_invoice_by_id_missing_returns_none(engine):
    """Test that an unknown id is absence, not an error."""
    assert asyncio.run(fetch_invoice_by_id(engine, "does-not-exist")) is None


def test_require_invoice_by_id_raises_not_found(engine):
    with pytest.raises(DashboardError) as exc_info:
        asyncio.run(require_invoice_by_id(engine, "does-not-exist"))
    assert exc_info.value.kind is ErrorKind.NOT_FOUND

    assert asyncio.run(require_invoice_by_id(engine, "i01")).amount == 157.95


def test_pagination_with_exact_multiple_of_page_size(make_engine):
    """Test that 12 matching rows give exactly 2 full pages."""
    rows = [Customer(id="c", name="Solo", email="solo@example.org", image_url="/solo.png")]

    start = date(2024, 1, 1)
    rows += [
        Invoice(id=f"n{i:02d}", customer_id="c", amount=100 + i, status="paid", date=start + timedelta(days=i))
        for i in range(12)
    ]
    engine = make_engine(rows)

    assert asyncio.run(fetch_invoices_pages(engine, "")) == 2
    page_two = asyncio.run(fetch_filtered_invoices(engine, "", 2))
    assert [row.id for row in page_two] == ["n05", "n04", "n03", "n02", "n01", "n00"]


def test_reads_are_idempotent(engine):
    """Test that repeated reads over unchanged data return equal results."""
    first = asyncio.run(fetch_filtered_invoices(engine, "lee", 1))
    second = asyncio.run(fetch_filtered_invoices(engine, "lee", 1))
    assert first == second
    assert asyncio.run(fetch_latest_invoices(engine)) == asyncio.run(fetch_latest_invoices(engine))
