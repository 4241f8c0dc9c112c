"""
Shared fixtures: an in-memory SQLite store, a session wired to a change feed,
and an HTTP client over the same store.
"""
import itertools
from datetime import timedelta

import pytest
from fastapi.testclient import TestClient
from sqlmodel import SQLModel

from app.database import build_engine, create_db_and_tables, open_session
from app.main import create_app
import app.models.order as order_model
from app.models.order import Order, utc_now
from app.notifications import ChangeFeed, Collection
from app.services import ledger_service, order_service


@pytest.fixture
def engine():
    engine = build_engine("sqlite://")
    create_db_and_tables(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def change_feed():
    return ChangeFeed()


@pytest.fixture
def notices(change_feed):
    """Every notice published on the orders collection, in order"""
    received = []
    change_feed.subscribe(Collection.ORDERS, received.append)
    return received


@pytest.fixture
def session(engine, change_feed):
    with open_session(engine, change_feed) as session:
        yield session


@pytest.fixture
def client(engine, change_feed):
    app = create_app(engine=engine, change_feed=change_feed)
    with TestClient(app) as client:
        yield client


@pytest.fixture
def clock(monkeypatch):
    """Every stamp taken through Order.touch() is one second after the last"""
    start = utc_now()
    ticks = itertools.count(1)
    monkeypatch.setattr(order_model, "utc_now", lambda: start + timedelta(seconds=next(ticks)))


@pytest.fixture
def open_table(session):
    """Open a table and put the given (name, price) units on it"""

    def _open(table_number, *units, category="Mains"):
        order = order_service.create_order(session=session, table_number=table_number)
        for name, price in units:
            ledger_service.add_item(
                session=session,
                order_id=order.id,
                item_name=name,
                category_name=category,
                unit_price=price,
            )
        session.refresh(order)
        return order

    return _open


def assert_total_matches_items(session, order_id):
    order = session.get(Order, order_id)
    session.refresh(order)
    items = ledger_service.get_order_items(session, order_id)
    assert order.total_amount == pytest.approx(sum(i.total for i in items))
    for item in items:
        assert item.total == pytest.approx(item.quantity * item.rate)


def assert_history_valid(order):
    history = order.table_history
    assert history, "table history must never be empty"
    assert history[-1] == order.table_number
    for previous, current in zip(history, history[1:]):
        assert previous != current, f"consecutive duplicate in {history}"


def count_items(session, order_id):
    return len(ledger_service.get_order_items(session, order_id))


