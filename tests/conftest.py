"""
Pytest configuration and fixtures for tover tests

This module provides shared fixtures for unit, integration, and E2E tests.
Unit tests run against InMemoryStore; integration and E2E tests use a
PostgreSQL container and are skipped when Docker is unavailable.
"""
import itertools
import uuid
from datetime import date, datetime, timedelta, timezone
from typing import Any, Generator, Sequence

import pytest
from testcontainers.postgres import PostgresContainer

from tover.core.errors import PersistenceError
from tover.core.models import (
    ImportErrorEntry,
    ImportKind,
    ImportRecord,
    ImportStatus,
    InventorySnapshotRecord,
    OrderLineRecord,
    OrderRecord,
    Page,
    PaymentRecord,
    RowError,
    StoredOrder,
    StoredOrderLine,
    UpsertResult,
)
from tover.warehouse.connection import DatabaseConnectionPool
from tover.warehouse.schema_mgmt import SchemaManager
from tover.warehouse.store import OrderKey, Store


# =======================
# PYTEST CONFIGURATION
# =======================

def pytest_configure(config):
    """Configure pytest with custom markers"""
    config.addinivalue_line(
        "markers", "unit: Unit tests that don't require external services"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests that require Docker containers"
    )
    config.addinivalue_line(
        "markers", "e2e: End-to-end tests that test the full pipeline"
    )
    config.addinivalue_line(
        "markers", "slow: Tests that take more than 5 seconds to run"
    )


# =======================
# IN-MEMORY STORE
# =======================

BASE_TIME = datetime(2025, 1, 1, tzinfo=timezone.utc)


class InMemoryStore(Store):
    """
    Store fake with the same upsert and lookup semantics as PostgresStore.

    Failure injection:
        fail_upsert_calls: 1-based upsert call numbers that raise
        fail_lookup: error raised by find_order_ids
        fail_line_inserts: 1-based insert_order_lines call numbers that raise
        fail_error_log: error raised by insert_import_errors
    """

    def __init__(self):
        self.imports: dict[str, ImportRecord] = {}
        self.import_errors: dict[str, list[ImportErrorEntry]] = {}
        self.orders: dict[tuple[str, str, str], StoredOrder] = {}
        self.order_lines: list[StoredOrderLine] = []
        self.snapshots: dict[tuple[str, date, str], InventorySnapshotRecord] = {}
        self.payments: dict[tuple[str, str, str], PaymentRecord] = {}

        self.upsert_calls = 0
        self.lookup_calls: list[list[OrderKey]] = []
        self.line_insert_calls = 0
        self.fail_upsert_calls: set[int] = set()
        self.fail_lookup: PersistenceError | None = None
        self.fail_line_inserts: set[int] = set()
        self.fail_error_log: PersistenceError | None = None

        self._clock = itertools.count()
        self._error_ids = itertools.count(1)

    def _now(self) -> datetime:
        return BASE_TIME + timedelta(seconds=next(self._clock))

    # -- import log -------------------------------------------------------

    def create_import(self, workspace_id, import_type, file_path):
        record = ImportRecord(
            id=str(uuid.uuid4()),
            workspace_id=workspace_id,
            file_path=file_path,
            import_type=ImportKind.parse(import_type),
            created_at=self._now(),
        )
        self.imports[record.id] = record
        return record

    def finish_import(self, import_id, status, summary):
        record = self.imports[import_id]
        if record.status is not ImportStatus.PROCESSING:
            return
        self.imports[import_id] = record.model_copy(
            update={"status": status, "summary": dict(summary), "completed_at": self._now()}
        )

    def insert_import_errors(self, import_id, errors: Sequence[RowError]):
        if self.fail_error_log is not None:
            raise self.fail_error_log
        entries = self.import_errors.setdefault(import_id, [])
        for e in errors:
            entries.append(
                ImportErrorEntry(
                    id=next(self._error_ids),
                    import_id=import_id,
                    row_number=e.row_number,
                    error_code=e.error_code,
                    error_detail=e.error_detail,
                    raw_row=dict(e.raw_row),
                    created_at=self._now(),
                )
            )
        return len(errors)

    def get_import(self, import_id):
        return self.imports.get(import_id)

    def list_imports(self, workspace_id, limit=20, offset=0):
        records = sorted(
            (r for r in self.imports.values() if r.workspace_id == workspace_id),
            key=lambda r: r.created_at,
            reverse=True,
        )
        return Page[ImportRecord](
            items=records[offset:offset + limit], limit=limit, offset=offset, total=len(records)
        )

    def list_import_errors(self, import_id, limit=50, offset=0):
        entries = sorted(self.import_errors.get(import_id, []), key=lambda e: (e.row_number, e.id))
        return Page[ImportErrorEntry](
            items=entries[offset:offset + limit], limit=limit, offset=offset, total=len(entries)
        )

    # -- writes -----------------------------------------------------------

    def upsert_records(self, workspace_id, kind, records):
        self.upsert_calls += 1
        if self.upsert_calls in self.fail_upsert_calls:
            raise PersistenceError("connection reset by peer", kind="unavailable")

        created = updated = 0
        for record in records:
            if isinstance(record, OrderRecord):
                key = (workspace_id, record.source, record.external_order_id)
                existing = self.orders.get(key)
                self.orders[key] = StoredOrder(
                    id=existing.id if existing else str(uuid.uuid4()),
                    workspace_id=workspace_id,
                    **record.model_dump(),
                )
            elif isinstance(record, InventorySnapshotRecord):
                key = (workspace_id, record.snapshot_date, record.sku)
                existing = self.snapshots.get(key)
                self.snapshots[key] = record
            elif isinstance(record, PaymentRecord):
                key = (workspace_id, record.source, record.external_payment_id)
                existing = self.payments.get(key)
                self.payments[key] = record
            else:
                raise ValueError(f"Cannot upsert {type(record).__name__}")

            if existing is None:
                created += 1
            else:
                updated += 1
        return UpsertResult(created=created, updated=updated)

    def find_order_ids(self, workspace_id, keys):
        self.lookup_calls.append(list(keys))
        if self.fail_lookup is not None:
            raise self.fail_lookup
        found = {}
        for source, external_id in keys:
            order = self.orders.get((workspace_id, source, external_id))
            if order is not None:
                found[(source, external_id)] = order.id
        return found

    def insert_order_lines(self, lines: Sequence[tuple[str, OrderLineRecord]]):
        self.line_insert_calls += 1
        if self.line_insert_calls in self.fail_line_inserts:
            raise PersistenceError("deadlock detected", kind="unknown")
        for order_id, line in lines:
            self.order_lines.append(
                StoredOrderLine(
                    id=str(uuid.uuid4()),
                    order_id=order_id,
                    sku=line.sku,
                    quantity=line.quantity,
                    unit_price_gross=line.unit_price_gross,
                    discount_amount=line.discount_amount,
                    tax_amount=line.tax_amount,
                )
            )
        return len(lines)

    # -- reads ------------------------------------------------------------

    def fetch_snapshots(self, workspace_id):
        rows = [s for (ws, _, _), s in self.snapshots.items() if ws == workspace_id]
        return sorted(rows, key=lambda s: s.snapshot_date, reverse=True)

    def fetch_orders_in_range(self, workspace_id, start, end, exclude_status="cancelled"):
        return sorted(
            (
                o for o in self.orders.values()
                if o.workspace_id == workspace_id
                and start <= o.ordered_at <= end
                and (exclude_status is None or o.status != exclude_status)
            ),
            key=lambda o: o.ordered_at,
            reverse=True,
        )

    def fetch_order_lines(self, order_ids):
        wanted = set(order_ids)
        return [line for line in self.order_lines if line.order_id in wanted]

    def list_orders(self, workspace_id, start, end, limit=50, offset=0):
        orders = self.fetch_orders_in_range(workspace_id, start, end, exclude_status=None)
        return Page[StoredOrder](
            items=orders[offset:offset + limit], limit=limit, offset=offset, total=len(orders)
        )

    def get_order(self, order_id):
        return next((o for o in self.orders.values() if o.id == order_id), None)

    # -- seeding helpers --------------------------------------------------

    def add_order(
        self,
        workspace_id: str,
        external_order_id: str,
        ordered_at: datetime,
        source: str = "allegro",
        status: str = "created",
        currency: str = "PLN",
    ) -> StoredOrder:
        record = OrderRecord(
            source=source,
            external_order_id=external_order_id,
            ordered_at=ordered_at,
            currency=currency,
            status=status,
        )
        self.upsert_records(workspace_id, ImportKind.ORDERS, [record])
        return self.orders[(workspace_id, source, external_order_id)]

    def add_line(self, order: StoredOrder, sku: str, quantity: int, unit_price_gross: float = 10.0) -> None:
        line = OrderLineRecord(
            external_order_id=order.external_order_id,
            source=order.source,
            sku=sku,
            quantity=quantity,
            unit_price_gross=unit_price_gross,
        )
        self.insert_order_lines([(order.id, line)])

    def add_snapshot(
        self,
        workspace_id: str,
        snapshot_date: date,
        sku: str,
        on_hand_qty: float,
        unit_cost: float = 1.0,
    ) -> None:
        record = InventorySnapshotRecord(
            snapshot_date=snapshot_date, sku=sku, on_hand_qty=on_hand_qty, unit_cost=unit_cost
        )
        self.upsert_records(workspace_id, ImportKind.INVENTORY, [record])


@pytest.fixture
def store() -> InMemoryStore:
    """Fresh in-memory store for one test"""
    return InMemoryStore()


@pytest.fixture
def workspace_id() -> str:
    return "ws-test"


# =======================
# DATABASE FIXTURES (Testcontainers)
# =======================

@pytest.fixture(scope="session")
def postgres_container() -> Generator[PostgresContainer, None, None]:
    """
    Start PostgreSQL container for integration tests

    Skips dependent tests when Docker is not available.

    Yields:
        PostgresContainer instance
    """
    container = PostgresContainer(
        image="postgres:16.2-alpine",
        username="tover_test",
        password="test_password",
        dbname="tover_test",
    )
    try:
        container.start()
    except Exception as e:
        pytest.skip(f"Docker is not available: {e}")

    yield container

    container.stop()


@pytest.fixture(scope="session")
def db_pool(postgres_container) -> Generator[DatabaseConnectionPool, None, None]:
    """
    Open a connection pool against the container and create the tables

    Yields:
        Open DatabaseConnectionPool
    """
    pool = DatabaseConnectionPool(
        host=postgres_container.get_container_host_ip(),
        port=int(postgres_container.get_exposed_port(5432)),
        database="tover_test",
        user="tover_test",
        password="test_password",
        max_size=4,
        timeout=10.0,
    )
    pool.open(max_retries=5, retry_delay=1.0)
    SchemaManager(pool).create_tables()

    yield pool

    pool.close()


@pytest.fixture
def clean_pool(db_pool) -> DatabaseConnectionPool:
    """
    Provide a pool over empty tables

    Returns:
        DatabaseConnectionPool with every table truncated
    """
    SchemaManager(db_pool).truncate_all()
    return db_pool


def make_csv(headers: list[str], rows: list[list[Any]]) -> bytes:
    """Build CSV upload bytes from a header and rows."""
    lines = [",".join(headers)]
    lines.extend(",".join(str(cell) for cell in row) for row in rows)
    return ("\n".join(lines) + "\n").encode("utf-8")


@pytest.fixture
def csv_bytes():
    """Factory fixture building CSV upload bytes"""
    return make_csv
