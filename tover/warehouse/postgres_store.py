"""
PostgreSQL implementation of the Store contract.

Every operation runs on a pooled connection; each write batch is one
transaction. psycopg errors are translated into PersistenceError with a
coarse kind so callers never see driver exceptions.
"""

import uuid
from contextlib import contextmanager
from datetime import datetime
from decimal import Decimal
from typing import Any, Iterator, Sequence

import psycopg
from psycopg import errors as pg_errors
from psycopg.types.json import Jsonb
from psycopg_pool import PoolTimeout
from pydantic import BaseModel

from tover.core.errors import PersistenceError
from tover.core.models import (
    ImportErrorEntry,
    ImportKind,
    ImportRecord,
    ImportStatus,
    InventorySnapshotRecord,
    OrderLineRecord,
    Page,
    RowError,
    StoredOrder,
    StoredOrderLine,
    UpsertResult,
)
from tover.core.rules import get_kind_spec
from tover.observability.logger import get_logger

from .connection import DatabaseConnectionPool, PoolNotOpenError
from .store import OrderKey, Store
from .upsert import upsert_batch

logger = get_logger(__name__)


def classify_error(error: Exception) -> str:
    """Map a driver exception to a PersistenceError kind."""
    # QueryCanceled and PoolTimeout are OperationalError subclasses
    if isinstance(error, (pg_errors.QueryCanceled, PoolTimeout)):
        return "timeout"
    if isinstance(error, psycopg.OperationalError):
        return "unavailable"
    if isinstance(error, psycopg.IntegrityError):
        return "constraint_violation"
    return "unknown"


def _as_uuid(value: str) -> uuid.UUID | None:
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


def _num(value: Any) -> Any:
    return float(value) if isinstance(value, Decimal) else value


def _import_from_row(row: dict[str, Any]) -> ImportRecord:
    return ImportRecord(
        id=str(row["id"]),
        workspace_id=row["workspace_id"],
        file_path=row["file_path"],
        import_type=ImportKind(row["import_type"]),
        status=ImportStatus(row["status"]),
        summary=row["summary"] or {},
        created_at=row["created_at"],
        completed_at=row["completed_at"],
    )


def _order_from_row(row: dict[str, Any]) -> StoredOrder:
    return StoredOrder(
        id=str(row["id"]),
        workspace_id=row["workspace_id"],
        source=row["source"],
        external_order_id=row["external_order_id"],
        ordered_at=row["ordered_at"],
        currency=row["currency"],
        status=row["status"],
    )


ORDER_COLUMNS = "id, workspace_id, source, external_order_id, ordered_at, currency, status"


class PostgresStore(Store):
    """
    Store backed by PostgreSQL through a psycopg connection pool.
    """

    def __init__(self, pool: DatabaseConnectionPool):
        """
        Initialize the store.

        Args:
            pool: Open database connection pool
        """
        self.pool = pool

    @contextmanager
    def _guard(self, operation: str) -> Iterator[None]:
        try:
            yield
        except psycopg.Error as e:
            kind = classify_error(e)
            logger.error(
                "Database operation failed",
                extra={"operation": operation, "kind": kind, "error_type": type(e).__name__},
            )
            raise PersistenceError(str(e).strip() or type(e).__name__, kind=kind) from e
        except PoolNotOpenError as e:
            raise PersistenceError(str(e), kind="unavailable") from e

    # -- import log -------------------------------------------------------

    def create_import(
        self, workspace_id: str, import_type: ImportKind, file_path: str | None
    ) -> ImportRecord:
        with self._guard("create_import"):
            rows = self.pool.execute_query(
                """
                INSERT INTO imports (workspace_id, file_path, import_type, status, summary)
                VALUES (%s, %s, %s, %s, %s)
                RETURNING *
                """,
                (
                    workspace_id,
                    file_path,
                    ImportKind.parse(import_type).value,
                    ImportStatus.PROCESSING.value,
                    Jsonb({}),
                ),
            )
        return _import_from_row(rows[0])

    def finish_import(self, import_id: str, status: ImportStatus, summary: dict[str, Any]) -> None:
        if not status.is_terminal:
            raise ValueError(f"finish_import needs a terminal status, got {status.value}")
        with self._guard("finish_import"):
            self.pool.execute_command(
                """
                UPDATE imports
                SET status = %s, summary = %s, completed_at = now()
                WHERE id = %s AND status = 'processing'
                """,
                (status.value, Jsonb(summary), import_id),
            )

    def insert_import_errors(self, import_id: str, errors: Sequence[RowError]) -> int:
        if not errors:
            return 0
        with self._guard("insert_import_errors"):
            with self.pool.transaction() as cur:
                cur.executemany(
                    """
                    INSERT INTO import_errors
                        (import_id, row_number, error_code, error_detail, raw_row)
                    VALUES (%s, %s, %s, %s, %s)
                    """,
                    [
                        (
                            import_id,
                            e.row_number,
                            e.error_code.value,
                            e.error_detail,
                            Jsonb(e.raw_row),
                        )
                        for e in errors
                    ],
                )
        return len(errors)

    def get_import(self, import_id: str) -> ImportRecord | None:
        key = _as_uuid(import_id)
        if key is None:
            return None
        with self._guard("get_import"):
            rows = self.pool.execute_query("SELECT * FROM imports WHERE id = %s", (key,))
        return _import_from_row(rows[0]) if rows else None

    def list_imports(self, workspace_id: str, limit: int = 20, offset: int = 0) -> Page[ImportRecord]:
        with self._guard("list_imports"):
            total = self.pool.execute_query(
                "SELECT count(*) AS n FROM imports WHERE workspace_id = %s", (workspace_id,)
            )[0]["n"]
            rows = self.pool.execute_query(
                """
                SELECT * FROM imports
                WHERE workspace_id = %s
                ORDER BY created_at DESC, id
                LIMIT %s OFFSET %s
                """,
                (workspace_id, limit, offset),
            )
        return Page[ImportRecord](
            items=[_import_from_row(r) for r in rows], limit=limit, offset=offset, total=total
        )

    def list_import_errors(
        self, import_id: str, limit: int = 50, offset: int = 0
    ) -> Page[ImportErrorEntry]:
        key = _as_uuid(import_id)
        if key is None:
            return Page[ImportErrorEntry](items=[], limit=limit, offset=offset, total=0)
        with self._guard("list_import_errors"):
            total = self.pool.execute_query(
                "SELECT count(*) AS n FROM import_errors WHERE import_id = %s", (key,)
            )[0]["n"]
            rows = self.pool.execute_query(
                """
                SELECT id, import_id, row_number, error_code, error_detail, raw_row, created_at
                FROM import_errors
                WHERE import_id = %s
                ORDER BY row_number ASC, id ASC
                LIMIT %s OFFSET %s
                """,
                (key, limit, offset),
            )
        items = [
            ImportErrorEntry(
                id=r["id"],
                import_id=str(r["import_id"]),
                row_number=r["row_number"],
                error_code=r["error_code"],
                error_detail=r["error_detail"],
                raw_row=r["raw_row"] or {},
                created_at=r["created_at"],
            )
            for r in rows
        ]
        return Page[ImportErrorEntry](items=items, limit=limit, offset=offset, total=total)

    # -- writes -----------------------------------------------------------

    def upsert_records(
        self, workspace_id: str, kind: ImportKind, records: Sequence[BaseModel]
    ) -> UpsertResult:
        spec = get_kind_spec(kind)
        if not spec.conflict_columns:
            raise ValueError(f"{spec.kind.value} has no natural key to upsert on")
        if not records:
            return UpsertResult()

        with self._guard(f"upsert_{spec.table}"):
            with self.pool.transaction() as cur:
                result = upsert_batch(cur, spec.table, spec.conflict_columns, workspace_id, records)

        logger.debug(
            "Upserted batch",
            extra={"table": spec.table, "created_rows": result.created, "updated_rows": result.updated},
        )
        return result

    def find_order_ids(self, workspace_id: str, keys: Sequence[OrderKey]) -> dict[OrderKey, str]:
        if not keys:
            return {}
        sources = [k[0] for k in keys]
        external_ids = [k[1] for k in keys]
        with self._guard("find_order_ids"):
            rows = self.pool.execute_query(
                """
                SELECT o.id, o.source, o.external_order_id
                FROM orders o
                JOIN unnest(%s::text[], %s::text[]) AS k(source, external_order_id)
                  ON o.source = k.source AND o.external_order_id = k.external_order_id
                WHERE o.workspace_id = %s
                """,
                (sources, external_ids, workspace_id),
            )
        return {(r["source"], r["external_order_id"]): str(r["id"]) for r in rows}

    def insert_order_lines(self, lines: Sequence[tuple[str, OrderLineRecord]]) -> int:
        if not lines:
            return 0
        with self._guard("insert_order_lines"):
            with self.pool.transaction() as cur:
                cur.executemany(
                    """
                    INSERT INTO order_lines
                        (order_id, sku, quantity, unit_price_gross, discount_amount, tax_amount)
                    VALUES (%s, %s, %s, %s, %s, %s)
                    """,
                    [
                        (
                            order_id,
                            line.sku,
                            line.quantity,
                            line.unit_price_gross,
                            line.discount_amount,
                            line.tax_amount,
                        )
                        for order_id, line in lines
                    ],
                )
        return len(lines)

    # -- reads ------------------------------------------------------------

    def fetch_snapshots(self, workspace_id: str) -> list[InventorySnapshotRecord]:
        with self._guard("fetch_snapshots"):
            rows = self.pool.execute_query(
                """
                SELECT snapshot_date, sku, on_hand_qty, unit_cost
                FROM inventory_snapshots
                WHERE workspace_id = %s
                ORDER BY snapshot_date DESC
                """,
                (workspace_id,),
            )
        return [
            InventorySnapshotRecord(
                snapshot_date=r["snapshot_date"],
                sku=r["sku"],
                on_hand_qty=_num(r["on_hand_qty"]),
                unit_cost=_num(r["unit_cost"]),
            )
            for r in rows
        ]

    def fetch_orders_in_range(
        self,
        workspace_id: str,
        start: datetime,
        end: datetime,
        exclude_status: str | None = "cancelled",
    ) -> list[StoredOrder]:
        with self._guard("fetch_orders_in_range"):
            rows = self.pool.execute_query(
                f"""
                SELECT {ORDER_COLUMNS}
                FROM orders
                WHERE workspace_id = %s
                  AND ordered_at >= %s AND ordered_at <= %s
                  AND (%s::text IS NULL OR status <> %s::text)
                ORDER BY ordered_at DESC
                """,
                (workspace_id, start, end, exclude_status, exclude_status),
            )
        return [_order_from_row(r) for r in rows]

    def fetch_order_lines(self, order_ids: Sequence[str]) -> list[StoredOrderLine]:
        keys = [k for k in (_as_uuid(i) for i in order_ids) if k is not None]
        if not keys:
            return []
        with self._guard("fetch_order_lines"):
            rows = self.pool.execute_query(
                """
                SELECT id, order_id, sku, quantity, unit_price_gross, discount_amount, tax_amount
                FROM order_lines
                WHERE order_id = ANY(%s)
                """,
                (keys,),
            )
        return [
            StoredOrderLine(
                id=str(r["id"]),
                order_id=str(r["order_id"]),
                sku=r["sku"],
                quantity=r["quantity"],
                unit_price_gross=_num(r["unit_price_gross"]),
                discount_amount=_num(r["discount_amount"]),
                tax_amount=_num(r["tax_amount"]),
            )
            for r in rows
        ]

    def list_orders(
        self,
        workspace_id: str,
        start: datetime,
        end: datetime,
        limit: int = 50,
        offset: int = 0,
    ) -> Page[StoredOrder]:
        with self._guard("list_orders"):
            total = self.pool.execute_query(
                """
                SELECT count(*) AS n FROM orders
                WHERE workspace_id = %s AND ordered_at >= %s AND ordered_at <= %s
                """,
                (workspace_id, start, end),
            )[0]["n"]
            rows = self.pool.execute_query(
                f"""
                SELECT {ORDER_COLUMNS}
                FROM orders
                WHERE workspace_id = %s AND ordered_at >= %s AND ordered_at <= %s
                ORDER BY ordered_at DESC, id
                LIMIT %s OFFSET %s
                """,
                (workspace_id, start, end, limit, offset),
            )
        return Page[StoredOrder](
            items=[_order_from_row(r) for r in rows], limit=limit, offset=offset, total=total
        )

    def get_order(self, order_id: str) -> StoredOrder | None:
        key = _as_uuid(order_id)
        if key is None:
            return None
        with self._guard("get_order"):
            rows = self.pool.execute_query(
                f"SELECT {ORDER_COLUMNS} FROM orders WHERE id = %s", (key,)
            )
        return _order_from_row(rows[0]) if rows else None
