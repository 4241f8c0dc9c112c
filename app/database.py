import logging
from contextlib import contextmanager
from typing import Optional

from fastapi import Request
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine

from app.config import settings
from app.notifications.dispatcher import ChangeFeed, attach_change_feed, discard_pending

logger = logging.getLogger(__name__)


def build_engine(database_url: Optional[str] = None, echo: Optional[bool] = None):
    url = database_url or settings.database_url
    echo = settings.sql_echo if echo is None else echo

    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        # in-memory databases live on a single connection
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, echo=echo, **kwargs)

    return create_engine(
        url,
        echo=echo,
        pool_pre_ping=True,      # checks dead connections
        pool_recycle=1800        # refresh every 30 min
    )


def create_db_and_tables(engine):
    from app.models import order, order_item  # noqa: F401
    SQLModel.metadata.create_all(engine)


def open_session(engine, change_feed: Optional[ChangeFeed] = None) -> Session:
    session = Session(engine)
    if change_feed is not None:
        attach_change_feed(session, change_feed)
    return session


@contextmanager
def atomic(session: Session):
    """
    Transaction scope for one multi-entity mutation.

    Commits when the block finishes and rolls back (then re-raises) on any
    exception, so an order and its items are never committed half-updated.
    """
    try:
        yield session
        session.commit()
    except Exception as e:
        logger.warning(f"Transaction rolled back: {e}")
        session.rollback()
        discard_pending(session)
        raise


def get_session(request: Request):
    state = request.app.state
    with open_session(state.engine, state.change_feed) as session:
        yield session
