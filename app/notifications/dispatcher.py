import logging
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, List

from sqlalchemy import event
from sqlmodel import Session

from app.notifications.channels import Collection
from app.notifications.events import ChangeNotice, OrderEvent
from app.notifications.rules import collections_for

logger = logging.getLogger(__name__)

FEED_KEY = "change_feed"
PENDING_KEY = "pending_change_notices"

Subscriber = Callable[[ChangeNotice], None]


class ChangeFeed:
    """
    Publish/subscribe hub for committed changes.

    Subscribers register per collection and receive a ChangeNotice once the
    transaction that touched that collection has committed. Notices carry
    ids only; subscribers re-read whatever they display through their own
    session.
    """

    def __init__(self):
        self._subscribers: Dict[Collection, List[Subscriber]] = {
            collection: [] for collection in Collection
        }

    def subscribe(self, collection: Collection, callback: Subscriber):
        self._subscribers[Collection(collection)].append(callback)

        def unsubscribe():
            if callback in self._subscribers[Collection(collection)]:
                self._subscribers[Collection(collection)].remove(callback)

        return unsubscribe

    def publish(self, notice: ChangeNotice):
        notified = []
        for collection in notice.collections:
            for callback in list(self._subscribers[collection]):
                # one call per subscriber even if it watches both collections
                if callback in notified:
                    continue
                notified.append(callback)
                try:
                    callback(notice)
                except Exception as e:
                    logger.error(f"Change subscriber failed for {notice.event.value}: {e}")


def attach_change_feed(session: Session, feed: ChangeFeed):
    session.info[FEED_KEY] = feed


def queue_order_event(session: Session, event_type: OrderEvent, order_ids: Iterable[str]):
    """
    Record a change on the session; it is published only after commit.
    """
    notice = ChangeNotice(
        event=event_type,
        order_ids=[str(order_id) for order_id in order_ids],
        collections=collections_for(event_type),
    )
    session.info.setdefault(PENDING_KEY, []).append(notice)


@event.listens_for(Session, "after_commit")
def _publish_pending(session):
    notices = session.info.pop(PENDING_KEY, [])
    feed = session.info.get(FEED_KEY)
    if feed is None:
        return
    committed_at = datetime.now(timezone.utc)
    for notice in notices:
        notice.committed_at = committed_at
        feed.publish(notice)


def discard_pending(session: Session):
    session.info.pop(PENDING_KEY, None)


@event.listens_for(Session, "after_soft_rollback")
def _discard_pending(session, previous_transaction):
    discard_pending(session)
