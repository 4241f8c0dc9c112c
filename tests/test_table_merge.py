"""
Moving bills between tables, and folding two bills together when the
destination table is already occupied.
"""
import pytest

import app.services.table_service as table_module
from app.exceptions import ConflictError, NotFoundError, ValidationError
from app.models.order import Order
from app.services import ledger_service, order_service
from app.services.table_service import merge_histories, move_or_merge

from conftest import assert_history_valid, assert_total_matches_items


def lines(session, order_id):
    return {
        (i.item_name, i.quantity, i.original_table)
        for i in ledger_service.get_order_items(session, order_id)
    }


class TestSimpleMove:

    def test_move_to_free_table(self, session, open_table, clock):
        order = open_table("A1", ("Pasta", 100))
        before = order.updated_at

        result = move_or_merge(session=session, order_id=order.id, new_table_number="D4")

        assert result.merged is False
        assert result.order_id == order.id
        moved = session.get(Order, order.id)
        assert moved.table_number == "D4"
        assert moved.table_history == ["A1", "D4"]
        assert moved.updated_at > before
        assert_history_valid(moved)
        assert lines(session, order.id) == {("Pasta", 1, None)}

    def test_moving_back_and_forth_keeps_breadcrumb(self, session, open_table):
        order = open_table("A1")

        move_or_merge(session=session, order_id=order.id, new_table_number="B2")
        move_or_merge(session=session, order_id=order.id, new_table_number="A1")

        moved = session.get(Order, order.id)
        assert moved.table_history == ["A1", "B2", "A1"]
        assert_history_valid(moved)

    def test_move_to_same_table_is_a_no_op(self, session, open_table, notices):
        order = open_table("A1", ("Pasta", 100))
        history = list(order.table_history)
        updated_at = order.updated_at
        notices.clear()

        result = move_or_merge(session=session, order_id=order.id, new_table_number="A1")

        session.refresh(order)
        assert result.merged is False
        assert order.table_history == history
        assert order.updated_at == updated_at
        assert notices == []

    def test_freed_table_no_longer_active(self, session, open_table):
        order = open_table("A1")
        move_or_merge(session=session, order_id=order.id, new_table_number="B2")

        assert order_service.get_active_tables(session) == {"B2"}

    def test_paid_or_cancelled_table_does_not_count_as_occupied(self, session, open_table):
        old = open_table("B2")
        order_service.cancel_order(session=session, order_id=old.id)
        order = open_table("A1")

        result = move_or_merge(session=session, order_id=order.id, new_table_number="B2")

        assert result.merged is False
        assert session.get(Order, old.id).status == "cancelled"

    def test_unknown_order(self, session):
        with pytest.raises(NotFoundError):
            move_or_merge(session=session, order_id="missing", new_table_number="B2")

    def test_closed_order_cannot_move(self, session, open_table):
        order = open_table("A1")
        order_service.cancel_order(session=session, order_id=order.id)

        with pytest.raises(ConflictError):
            move_or_merge(session=session, order_id=order.id, new_table_number="B2")

    def test_blank_target(self, session, open_table):
        order = open_table("A1")
        with pytest.raises(ValidationError):
            move_or_merge(session=session, order_id=order.id, new_table_number="")


class TestMerge:

    def test_merge_into_occupied_table(self, session, open_table):
        x = open_table("A1", ("Pasta", 100))
        y = open_table("B2", ("Soup", 50))

        result = move_or_merge(session=session, order_id=x.id, new_table_number="B2")

        assert result.merged is True
        assert result.order_id == y.id
        assert session.get(Order, x.id) is None

        merged = session.get(Order, y.id)
        assert merged.total_amount == 150
        assert merged.table_number == "B2"
        assert merged.table_history[:2] == ["B2", "A1"]
        assert merged.table_history[-1] == "B2"
        assert_history_valid(merged)
        assert_total_matches_items(session, y.id)
        assert lines(session, y.id) == {("Pasta", 1, "A1"), ("Soup", 1, None)}

    def test_merge_stamps_receiving_order(self, session, open_table, clock):
        x = open_table("A1", ("Pasta", 100))
        y = open_table("B2", ("Soup", 50))
        before = y.updated_at

        move_or_merge(session=session, order_id=x.id, new_table_number="B2")

        assert session.get(Order, y.id).updated_at > before

    def test_merge_keeps_both_breadcrumbs_in_order(self, session, open_table):
        x = open_table("A1")
        move_or_merge(session=session, order_id=x.id, new_table_number="C3")
        y = open_table("B2")
        move_or_merge(session=session, order_id=y.id, new_table_number="D4")

        move_or_merge(session=session, order_id=x.id, new_table_number="D4")

        merged = session.get(Order, y.id)
        assert merged.table_history == ["B2", "D4", "A1", "C3", "D4"]
        assert_history_valid(merged)

    def test_provenance_survives_chained_merges(self, session, open_table):
        x = open_table("A1", ("Pasta", 100))
        y = open_table("B2", ("Soup", 50))
        z = open_table("C3", ("Tea", 20))

        move_or_merge(session=session, order_id=x.id, new_table_number="B2")
        result = move_or_merge(session=session, order_id=y.id, new_table_number="C3")

        assert result.order_id == z.id
        assert lines(session, z.id) == {
            ("Pasta", 1, "A1"),
            ("Soup", 1, "B2"),
            ("Tea", 1, None),
        }
        assert session.get(Order, z.id).total_amount == 170

    def test_merged_lines_are_not_collapsed_with_new_units(self, session, open_table):
        x = open_table("A1", ("Pasta", 100))
        y = open_table("B2")
        move_or_merge(session=session, order_id=x.id, new_table_number="B2")

        ledger_service.add_item(
            session=session, order_id=y.id, item_name="Pasta", category_name="Mains", unit_price=100
        )

        assert lines(session, y.id) == {("Pasta", 1, "A1"), ("Pasta", 1, None)}
        assert session.get(Order, y.id).total_amount == 200

    def test_merge_into_served_order_keeps_its_status(self, session, open_table):
        x = open_table("A1", ("Pasta", 100))
        y = open_table("B2", ("Soup", 50))
        order_service.update_status(session=session, order_id=y.id, status="served")

        move_or_merge(session=session, order_id=x.id, new_table_number="B2")

        assert session.get(Order, y.id).status == "served"

    def test_failed_merge_rolls_back_completely(self, session, open_table, monkeypatch, notices):
        x = open_table("A1", ("Pasta", 100))
        y = open_table("B2", ("Soup", 50))
        notices.clear()

        def boom(session, order):
            session.flush()
            raise RuntimeError("power cut")

        monkeypatch.setattr(table_module, "recalculate_order_total", boom)

        with pytest.raises(RuntimeError):
            move_or_merge(session=session, order_id=x.id, new_table_number="B2")

        assert session.get(Order, x.id) is not None
        assert lines(session, x.id) == {("Pasta", 1, None)}
        assert lines(session, y.id) == {("Soup", 1, None)}
        assert session.get(Order, y.id).table_history == ["B2"]
        assert session.get(Order, y.id).total_amount == 50
        assert notices == []


class TestMergeHistories:

    def test_simple(self):
        assert merge_histories(["B2"], ["A1"], "B2") == ["B2", "A1", "B2"]

    def test_shared_entries_are_not_repeated(self):
        assert merge_histories(["A1", "B2"], ["A1", "C3"], "B2") == ["A1", "B2", "C3", "B2"]

    def test_already_ending_on_target(self):
        assert merge_histories(["B2"], ["B2"], "B2") == ["B2"]
