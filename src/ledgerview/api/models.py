"""Read models returned by the API layer.

Amounts are integer cents unless a field says otherwise; formatted totals are
display strings produced by format_currency.
"""

import datetime

from pydantic import BaseModel


class RevenuePoint(BaseModel):
    month: str
    revenue: float


class LatestInvoice(BaseModel):
    id: str
    name: str
    email: str
    image_url: str
    amount: int
    date: datetime.date


class CardSummary(BaseModel):
    """Point-in-time dashboard totals, recomputed on every call."""
    number_of_invoices: int
    number_of_customers: int
    total_paid_invoices: str
    total_pending_invoices: str


class FilteredInvoiceRow(BaseModel):
    id: str
    amount: int
    date: datetime.date
    status: str
    name: str
    email: str
    image_url: str


class InvoiceForm(BaseModel):
    """Single invoice for the edit form; amount is in dollars."""
    id: str
    customer_id: str
    amount: float
    status: str


class CustomerField(BaseModel):
    id: str
    name: str


class CustomerSummaryRow(BaseModel):
    id: str
    name: str
    email: str
    image_url: str
    total_invoices: int
    total_pending: str
    total_paid: str
