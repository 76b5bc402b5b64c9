"""
Unit tests for the PostgreSQL store that need no database.
"""

from datetime import datetime, timezone

import psycopg
import pytest
from psycopg import errors as pg_errors
from psycopg_pool import PoolTimeout

from tover.core.errors import PersistenceError
from tover.core.models import ImportKind, ImportStatus, OrderRecord, PaymentRecord
from tover.warehouse.connection import DatabaseConnectionPool
from tover.warehouse.postgres_store import PostgresStore, classify_error
from tover.warehouse.upsert import record_columns, record_params


@pytest.mark.unit
class TestClassifyError:
    """Driver exceptions map to coarse persistence error kinds"""

    @pytest.mark.parametrize(
        "error,kind",
        [
            (pg_errors.QueryCanceled("canceling statement due to statement timeout"), "timeout"),
            (PoolTimeout("couldn't get a connection after 30.00 sec"), "timeout"),
            (psycopg.OperationalError("server closed the connection unexpectedly"), "unavailable"),
            (pg_errors.UniqueViolation("duplicate key value"), "constraint_violation"),
            (pg_errors.ForeignKeyViolation("violates foreign key constraint"), "constraint_violation"),
            (psycopg.ProgrammingError("syntax error"), "unknown"),
            (KeyError("x"), "unknown"),
        ],
    )
    def test_kinds(self, error, kind):
        assert classify_error(error) == kind


@pytest.mark.unit
class TestClosedPool:
    """A store over a pool that was never opened reports unavailability"""

    @pytest.fixture
    def closed_store(self):
        return PostgresStore(DatabaseConnectionPool(host="localhost", password="unused"))

    def test_write_raises_persistence_error(self, closed_store):
        with pytest.raises(PersistenceError) as exc_info:
            closed_store.create_import("ws", ImportKind.ORDERS, "orders.csv")
        assert exc_info.value.kind == "unavailable"

    def test_lookup_raises_persistence_error(self, closed_store):
        with pytest.raises(PersistenceError):
            closed_store.find_order_ids("ws", [("allegro", "A-1")])

    def test_other_runtime_errors_propagate(self, closed_store, monkeypatch):
        """Only the pool-not-open error is reported as unavailability"""

        def broken_query(query, params=None):
            raise RuntimeError("row mapping bug")

        monkeypatch.setattr(closed_store.pool, "execute_query", broken_query)

        with pytest.raises(RuntimeError, match="row mapping bug") as exc_info:
            closed_store.create_import("ws", ImportKind.ORDERS, "orders.csv")
        assert not isinstance(exc_info.value, PersistenceError)

    def test_invalid_ids_short_circuit(self, closed_store):
        """Malformed UUIDs never reach the database"""
        assert closed_store.get_import("not-a-uuid") is None
        assert closed_store.get_order("not-a-uuid") is None

    def test_finish_import_needs_terminal_status(self, closed_store):
        with pytest.raises(ValueError, match="terminal"):
            closed_store.finish_import("x", ImportStatus.PROCESSING, {})


@pytest.mark.unit
class TestRecordParams:
    """Record to column mapping for upserts"""

    def test_row_number_is_not_a_column(self):
        assert record_columns(OrderRecord) == [
            "source",
            "external_order_id",
            "ordered_at",
            "currency",
            "status",
        ]

    def test_params_follow_columns(self):
        payment = PaymentRecord(
            source="allegro",
            external_payment_id="P-1",
            amount=-5.0,
            currency="PLN",
            paid_at=datetime(2025, 3, 1, tzinfo=timezone.utc),
            row_number=9,
        )
        columns = ["workspace_id", *record_columns(PaymentRecord)]

        params = record_params("ws", payment, columns)

        assert params[0] == "ws"
        assert dict(zip(columns, params))["amount"] == -5.0
        assert 9 not in params
