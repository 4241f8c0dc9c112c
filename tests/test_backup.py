"""
Snapshot export/restore of the order collections.
"""
import pytest
from pydantic import ValidationError as SchemaError

from app.exceptions import ValidationError
from app.models.order import Order, utc_now
from app.schemas.backup_schemas import OrderItemRecord, OrderRecord, Snapshot
from app.services import order_service
from app.services.backup_service import export_snapshot, restore_snapshot
from app.services.table_service import move_or_merge

from conftest import assert_history_valid, assert_total_matches_items


class TestSnapshot:

    def test_export_contains_every_order_and_line(self, session, open_table):
        a = open_table("A1", ("Pasta", 100))
        b = open_table("B2", ("Soup", 50), ("Tea", 20))

        snapshot = export_snapshot(session)

        assert {o.id for o in snapshot.orders} == {a.id, b.id}
        assert len(snapshot.order_items) == 3

    def test_restore_replaces_current_state(self, session, open_table):
        x = open_table("A1", ("Pasta", 100))
        y = open_table("B2", ("Soup", 50))
        move_or_merge(session=session, order_id=x.id, new_table_number="B2")
        saved = Snapshot.model_validate_json(export_snapshot(session).model_dump_json())

        order_service.delete_order(session=session, order_id=y.id)
        stray = open_table("Z9", ("Cake", 90))

        result = restore_snapshot(session=session, snapshot=saved)

        assert (result.orders, result.order_items) == (1, 2)
        assert session.get(Order, stray.id) is None
        restored = session.get(Order, y.id)
        assert restored.table_history == ["B2", "A1", "B2"]
        assert restored.total_amount == 150
        assert_history_valid(restored)
        assert_total_matches_items(session, y.id)

    def test_orphan_lines_are_rejected_and_nothing_changes(self, session, open_table):
        kept = open_table("A1", ("Pasta", 100))
        snapshot = Snapshot(
            orders=[],
            order_items=[OrderItemRecord(order_id="ghost", item_name="Tea", quantity=1, rate=20, total=20)],
        )

        with pytest.raises(ValidationError):
            restore_snapshot(session=session, snapshot=snapshot)

        assert session.get(Order, kept.id) is not None


def order_fields(**overrides):
    fields = dict(
        id="order-1", table_number="A1", table_history=["A1"], status="open",
        created_at=utc_now(), updated_at=utc_now(), total_amount=20,
    )
    fields.update(overrides)
    return fields


def item_fields(**overrides):
    fields = dict(order_id="order-1", item_name="Tea", quantity=1, rate=20, total=20)
    fields.update(overrides)
    return fields


BROKEN_ORDERS = [
    pytest.param(dict(table_history=[]), id="empty-history"),
    pytest.param(dict(table_history=["B2"]), id="history-ends-elsewhere"),
    pytest.param(dict(table_history=["B2", "A1", "A1"]), id="repeated-table"),
]

BROKEN_ITEMS = [
    pytest.param(dict(quantity=0, total=0), id="zero-quantity"),
    pytest.param(dict(quantity=-3, rate=10, total=-30), id="negative-quantity"),
    pytest.param(dict(quantity=2, rate=10, total=5), id="total-off"),
    pytest.param(dict(rate=-20, total=-20), id="negative-rate"),
]


class TestSnapshotRecords:

    def test_valid_records(self):
        OrderRecord(**order_fields(table_history=["B2", "A1"]))
        OrderItemRecord(**item_fields(quantity=3, total=60))

    @pytest.mark.parametrize("overrides", BROKEN_ORDERS)
    def test_broken_history_is_rejected(self, overrides):
        with pytest.raises(SchemaError):
            OrderRecord(**order_fields(**overrides))

    @pytest.mark.parametrize("overrides", BROKEN_ITEMS)
    def test_broken_line_is_rejected(self, overrides):
        with pytest.raises(SchemaError):
            OrderItemRecord(**item_fields(**overrides))


class TestRestoreRejectsBrokenRecords:
    """Records that skipped validation are still checked before anything is cleared"""

    @pytest.mark.parametrize("overrides", BROKEN_ORDERS)
    def test_broken_order(self, session, open_table, overrides):
        kept = open_table("Z9", ("Pasta", 100))
        snapshot = Snapshot.model_construct(
            orders=[OrderRecord.model_construct(**order_fields(**overrides))],
            order_items=[],
        )

        with pytest.raises(ValidationError):
            restore_snapshot(session=session, snapshot=snapshot)

        assert session.get(Order, kept.id) is not None
        assert session.get(Order, "order-1") is None

    @pytest.mark.parametrize("overrides", BROKEN_ITEMS)
    def test_broken_line(self, session, open_table, overrides):
        kept = open_table("Z9", ("Pasta", 100))
        snapshot = Snapshot.model_construct(
            orders=[OrderRecord.model_construct(**order_fields())],
            order_items=[OrderItemRecord.model_construct(**item_fields(**overrides))],
        )

        with pytest.raises(ValidationError):
            restore_snapshot(session=session, snapshot=snapshot)

        assert session.get(Order, kept.id) is not None
        assert session.get(Order, "order-1") is None

    def test_edited_total_is_restored_as_is(self, session):
        # a corrected payment leaves total_amount apart from the line sum
        snapshot = Snapshot(
            orders=[OrderRecord(**order_fields(status="paid", total_amount=15, payment_cash=15))],
            order_items=[OrderItemRecord(**item_fields())],
        )

        restore_snapshot(session=session, snapshot=snapshot)

        assert session.get(Order, "order-1").total_amount == 15
