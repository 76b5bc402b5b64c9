"""
Unit tests for RecordWriter batching, parent resolution and batch failures.
"""

from datetime import date, datetime, timezone

import pytest

from tover.batch.writers import RecordWriter
from tover.core.errors import PersistenceError
from tover.core.models import (
    ErrorCode,
    ImportKind,
    InventorySnapshotRecord,
    OrderLineRecord,
    OrderRecord,
)

ORDERED_AT = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


def make_orders(count: int, start: int = 0) -> list[OrderRecord]:
    return [
        OrderRecord(
            source="allegro",
            external_order_id=f"A-{i}",
            ordered_at=ORDERED_AT,
            currency="PLN",
            row_number=i + 2,
        )
        for i in range(start, start + count)
    ]


def make_line(external_order_id: str, row_number: int, sku: str = "MUG-01") -> OrderLineRecord:
    return OrderLineRecord(
        external_order_id=external_order_id,
        source="allegro",
        sku=sku,
        quantity=1,
        unit_price_gross=10.0,
        row_number=row_number,
    )


@pytest.mark.unit
class TestUpsertBatches:
    """Upsert kinds are written in fixed-size batches"""

    def test_batches_of_configured_size(self, store, workspace_id):
        writer = RecordWriter(store, write_batch_size=2)

        outcome = writer.write(workspace_id, ImportKind.ORDERS, make_orders(5))

        assert store.upsert_calls == 3
        assert outcome.inserted == 5
        assert outcome.upserts.created == 5
        assert outcome.errors == []

    def test_second_write_updates_in_place(self, store, workspace_id):
        writer = RecordWriter(store)
        writer.write(workspace_id, ImportKind.ORDERS, make_orders(3))

        outcome = writer.write(workspace_id, ImportKind.ORDERS, make_orders(3))

        assert outcome.inserted == 3
        assert outcome.upserts.created == 0
        assert outcome.upserts.updated == 3
        assert len(store.orders) == 3

    def test_failed_batch_becomes_one_db_error(self, store, workspace_id):
        store.fail_upsert_calls = {2}
        writer = RecordWriter(store, write_batch_size=2)

        outcome = writer.write(workspace_id, ImportKind.ORDERS, make_orders(5))

        assert outcome.inserted == 3
        assert len(outcome.errors) == 1
        error = outcome.errors[0]
        assert error.error_code is ErrorCode.DB_ERROR
        assert error.row_number == 0
        assert error.raw_row == {}
        assert "connection reset" in error.error_detail
        assert {key[2] for key in store.orders} == {"A-0", "A-1", "A-4"}

    def test_snapshots_keyed_by_date_and_sku(self, store, workspace_id):
        snapshots = [
            InventorySnapshotRecord(snapshot_date=date(2025, 3, 1), sku="MUG-01", on_hand_qty=5, unit_cost=1),
            InventorySnapshotRecord(snapshot_date=date(2025, 3, 1), sku="MUG-01", on_hand_qty=7, unit_cost=1),
            InventorySnapshotRecord(snapshot_date=date(2025, 3, 2), sku="MUG-01", on_hand_qty=6, unit_cost=1),
        ]

        outcome = RecordWriter(store).write(workspace_id, ImportKind.INVENTORY, snapshots)

        assert outcome.upserts.created == 2
        assert outcome.upserts.updated == 1
        assert store.snapshots[(workspace_id, date(2025, 3, 1), "MUG-01")].on_hand_qty == 7

    def test_nothing_to_write(self, store, workspace_id):
        outcome = RecordWriter(store).write(workspace_id, ImportKind.PAYMENTS, [])

        assert outcome.inserted == 0
        assert store.upsert_calls == 0

    @pytest.mark.parametrize("sizes", [(0, 100), (500, 0), (-1, 1)])
    def test_batch_sizes_must_be_positive(self, store, sizes):
        with pytest.raises(ValueError):
            RecordWriter(store, write_batch_size=sizes[0], lookup_batch_size=sizes[1])


@pytest.mark.unit
class TestOrderLines:
    """Order lines resolve their parent order before insertion"""

    def test_lines_attach_to_existing_orders(self, store, workspace_id):
        order = store.add_order(workspace_id, "A-1", ORDERED_AT)

        outcome = RecordWriter(store).write(
            workspace_id, ImportKind.ORDER_LINES, [make_line("A-1", 2), make_line("A-1", 3, sku="CUP-02")]
        )

        assert outcome.inserted == 2
        assert outcome.errors == []
        assert {line.order_id for line in store.order_lines} == {order.id}

    def test_missing_order_reports_row(self, store, workspace_id):
        store.add_order(workspace_id, "A-1", ORDERED_AT)
        raw = {"external_order_id": "A-404", "source": "allegro", "sku": "MUG-01"}

        outcome = RecordWriter(store).write(
            workspace_id,
            ImportKind.ORDER_LINES,
            [make_line("A-1", 2), make_line("A-404", 3)],
            raw_rows={3: raw},
        )

        assert outcome.inserted == 1
        error = outcome.errors[0]
        assert error.error_code is ErrorCode.MISSING_ORDER
        assert error.row_number == 3
        assert error.error_detail == "Order not found: allegro / A-404"
        assert error.raw_row == raw

    def test_orders_in_other_workspaces_are_not_found(self, store, workspace_id):
        store.add_order("ws-other", "A-1", ORDERED_AT)

        outcome = RecordWriter(store).write(workspace_id, ImportKind.ORDER_LINES, [make_line("A-1", 2)])

        assert outcome.inserted == 0
        assert outcome.errors[0].error_code is ErrorCode.MISSING_ORDER

    def test_lookup_is_deduplicated_and_chunked(self, store, workspace_id):
        lines = [make_line(f"A-{i % 5}", i + 2) for i in range(20)]

        RecordWriter(store, lookup_batch_size=2).write(workspace_id, ImportKind.ORDER_LINES, lines)

        assert [len(chunk) for chunk in store.lookup_calls] == [2, 2, 1]
        looked_up = [key for chunk in store.lookup_calls for key in chunk]
        assert looked_up == [("allegro", f"A-{i}") for i in range(5)]

    def test_lookup_failure_inserts_nothing(self, store, workspace_id):
        store.add_order(workspace_id, "A-1", ORDERED_AT)
        store.fail_lookup = PersistenceError("statement timeout", kind="timeout")

        outcome = RecordWriter(store).write(
            workspace_id, ImportKind.ORDER_LINES, [make_line("A-1", 2), make_line("A-1", 3)]
        )

        assert outcome.inserted == 0
        assert len(outcome.errors) == 1
        assert outcome.errors[0].error_code is ErrorCode.DB_ERROR
        assert store.line_insert_calls == 0

    def test_failed_line_batch_follows_missing_orders(self, store, workspace_id):
        store.add_order(workspace_id, "A-1", ORDERED_AT)
        store.fail_line_inserts = {1}
        lines = [make_line("A-1", 2), make_line("A-9", 3), make_line("A-1", 4), make_line("A-1", 5)]

        outcome = RecordWriter(store, write_batch_size=2).write(workspace_id, ImportKind.ORDER_LINES, lines)

        assert outcome.inserted == 1
        assert [e.error_code for e in outcome.errors] == [ErrorCode.MISSING_ORDER, ErrorCode.DB_ERROR]
        assert store.line_insert_calls == 2
