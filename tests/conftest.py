"""Pytest configuration and fixtures."""

import itertools
from datetime import date

import bcrypt
import pytest
from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import NullPool

from ledgerview.database.schema import Base, Customer, Invoice, Revenue, User

USER_PASSWORD = "123456"


def _invoice(invoice_id, customer_id, amount, status, day):
    return Invoice(id=invoice_id, customer_id=customer_id, amount=amount, status=status, date=day)


def dashboard_rows():
    """Standard dataset: 4 customers (one without invoices), 14 invoices, 12 revenue months, 1 user."""
    password_hash = bcrypt.hashpw(USER_PASSWORD.encode("utf-8"), bcrypt.gensalt(rounds=4)).decode("utf-8")
    months = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]
    revenue = [2000, 1800, 2200, 2500, 2300, 3200, 3500, 3700, 2500, 2800, 3000, 4800]
    return [
        Customer(id="c1", name="Evil Rabbit", email="evil@rabbit.com", image_url="/customers/evil-rabbit.png"),
        Customer(id="c2", name="Delba de Oliveira", email="delba@oliveira.com", image_url="/customers/delba.png"),
        Customer(id="c3", name="Lee Robinson", email="lee@robinson.com", image_url="/customers/lee.png"),
        Customer(id="c4", name="Michael Novotny", email="michael@novotny.com", image_url="/customers/michael.png"),
        _invoice("i01", "c1", 15795, "pending", date(2022, 12, 6)),
        _invoice("i02", "c2", 20348, "pending", date(2022, 11, 14)),
        _invoice("i03", "c3", 3040, "paid", date(2022, 10, 29)),
        _invoice("i04", "c1", 44800, "paid", date(2023, 9, 10)),
        _invoice("i05", "c2", 34577, "pending", date(2023, 8, 5)),
        _invoice("i06", "c3", 54246, "pending", date(2023, 7, 16)),
        _invoice("i07", "c1", 666, "pending", date(2023, 6, 27)),
        _invoice("i08", "c2", 32545, "paid", date(2023, 6, 9)),
        _invoice("i09", "c3", 1250, "paid", date(2023, 6, 17)),
        _invoice("i10", "c1", 8546, "paid", date(2023, 6, 7)),
        _invoice("i11", "c2", 500, "paid", date(2023, 8, 19)),
        _invoice("i12", "c3", 8945, "paid", date(2023, 6, 3)),
        _invoice("i13", "c1", 1000, "paid", date(2022, 6, 5)),
        _invoice("i14", "c2", 12345, "pending", date(2023, 6, 7)),
        *[Revenue(month=m, revenue=r) for m, r in zip(months, revenue)],
        User(id="u1", name="User", email="user@nextmail.com", password=password_hash),
    ]


@pytest.fixture
def make_engine(tmp_path):
    """Factory: seed a fresh SQLite file with the given ORM rows and return an async engine for it."""
    counter = itertools.count()

    def _make(rows=()):
        db_path = tmp_path / f"dashboard-{next(counter)}.db"
        sync_engine = create_engine(f"sqlite:///{db_path}", echo=False)
        Base.metadata.create_all(sync_engine)
        with Session(sync_engine) as session:
            session.add_all(list(rows))
            session.commit()
        sync_engine.dispose()
        # NullPool: every asyncio.run in a test gets fresh connections on its own loop
        return create_async_engine(f"sqlite+aiosqlite:///{db_path}", poolclass=NullPool)

    return _make


@pytest.fixture
def engine(make_engine):
    """Async engine over the standard dataset."""
    return make_engine(dashboard_rows())


@pytest.fixture
def empty_engine(make_engine):
    """Async engine over an empty schema."""
    return make_engine()


@pytest.fixture
def broken_engine(tmp_path):
    """Async engine whose database file can never be opened."""
    db_path = tmp_path / "missing" / "nowhere.db"
    return create_async_engine(f"sqlite+aiosqlite:///{db_path}", poolclass=NullPool)
