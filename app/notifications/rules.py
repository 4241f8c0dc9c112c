from app.notifications.events import OrderEvent
from app.notifications.channels import Collection


CHANGE_RULES = {

    OrderEvent.ORDER_OPENED: {
        Collection.ORDERS: True,
    },

    OrderEvent.STATUS_CHANGED: {
        Collection.ORDERS: True,
    },

    OrderEvent.ORDER_CANCELLED: {
        Collection.ORDERS: True,
    },

    OrderEvent.ORDER_DELETED: {
        Collection.ORDERS: True,
        Collection.ORDER_ITEMS: True,
    },

    OrderEvent.ITEMS_CHANGED: {
        Collection.ORDERS: True,
        Collection.ORDER_ITEMS: True,
    },

    OrderEvent.TABLE_MOVED: {
        Collection.ORDERS: True,
    },

    OrderEvent.ORDERS_MERGED: {
        Collection.ORDERS: True,
        Collection.ORDER_ITEMS: True,
    },

    OrderEvent.PAYMENT_RECORDED: {
        Collection.ORDERS: True,
    },

    OrderEvent.PAYMENT_EDITED: {
        Collection.ORDERS: True,
    },

    OrderEvent.SNAPSHOT_RESTORED: {
        Collection.ORDERS: True,
        Collection.ORDER_ITEMS: True,
    },

}


def collections_for(event: OrderEvent):
    rules = CHANGE_RULES.get(event, {})
    return [collection for collection, enabled in rules.items() if enabled]
