"""
Batch writer for validated records.

Orders, inventory snapshots and payments are upserted on their natural
key in fixed-size batches. Order lines go through a parent lookup first;
lines whose order does not exist become MISSING_ORDER errors.

A batch that fails to persist is reported once as a DB_ERROR with row 0,
and the remaining batches still run.
"""

from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence

from tover.core.errors import PersistenceError
from tover.core.models import (
    ErrorCode,
    ImportKind,
    OrderLineRecord,
    RowError,
    UpsertResult,
)
from tover.observability.logger import get_logger
from tover.observability.metrics import record_persistence_error
from tover.utils.batching import chunked, unique_in_order
from tover.warehouse.store import OrderKey, Store

logger = get_logger(__name__)


@dataclass
class WriteOutcome:
    """
    Result of persisting one upload's valid records.

    Attributes:
        inserted: Rows persisted (created + updated for upserts)
        errors: MISSING_ORDER entries followed by DB_ERROR entries
        upserts: Created vs. updated breakdown (upsert kinds only)
    """

    inserted: int = 0
    errors: list[RowError] = field(default_factory=list)
    upserts: UpsertResult = field(default_factory=UpsertResult)


def missing_order_error(line: OrderLineRecord, raw_row: dict[str, Any]) -> RowError:
    return RowError(
        row_number=line.row_number or 0,
        error_code=ErrorCode.MISSING_ORDER,
        error_detail=f"Order not found: {line.source} / {line.external_order_id}",
        raw_row=raw_row,
    )


class RecordWriter:
    """
    Persists validated records through a Store.
    """

    def __init__(self, store: Store, write_batch_size: int = 500, lookup_batch_size: int = 100):
        """
        Initialize record writer.

        Args:
            store: Persistence collaborator
            write_batch_size: Records per upsert/insert batch
            lookup_batch_size: Order keys per parent lookup
        """
        if write_batch_size <= 0 or lookup_batch_size <= 0:
            raise ValueError("Batch sizes must be positive")
        self.store = store
        self.write_batch_size = write_batch_size
        self.lookup_batch_size = lookup_batch_size

    def write(
        self,
        workspace_id: str,
        kind: ImportKind,
        records: Sequence[Any],
        raw_rows: Mapping[int, dict[str, Any]] | None = None,
    ) -> WriteOutcome:
        """
        Persist records of one kind.

        Args:
            workspace_id: Owning workspace
            kind: Import kind of the records
            records: Validated records, in file order
            raw_rows: Original row mappings by row number (for MISSING_ORDER)

        Returns:
            WriteOutcome
        """
        kind = ImportKind.parse(kind)
        if not records:
            return WriteOutcome()
        if kind is ImportKind.ORDER_LINES:
            return self._write_order_lines(workspace_id, records, raw_rows or {})
        return self._upsert(workspace_id, kind, records)

    def _batch_failed(self, operation: str, error: PersistenceError) -> RowError:
        record_persistence_error(operation, error.kind)
        logger.warning(
            "Batch write failed",
            extra={"operation": operation, "kind": error.kind},
        )
        return RowError.batch_failure(str(error))

    def _upsert(self, workspace_id: str, kind: ImportKind, records: Sequence[Any]) -> WriteOutcome:
        outcome = WriteOutcome()

        for batch in chunked(records, self.write_batch_size):
            try:
                result = self.store.upsert_records(workspace_id, kind, batch)
            except PersistenceError as e:
                outcome.errors.append(self._batch_failed(f"upsert_{kind.value}", e))
                continue
            outcome.upserts = outcome.upserts + result
            outcome.inserted += result.affected

        logger.info(
            "Upsert finished",
            extra={
                "import_type": kind.value,
                "created_rows": outcome.upserts.created,
                "updated_rows": outcome.upserts.updated,
                "failed_batches": len(outcome.errors),
            },
        )
        return outcome

    def resolve_orders(self, workspace_id: str, keys: Sequence[OrderKey]) -> dict[OrderKey, str]:
        """
        Resolve every distinct order key, chunked.

        Raises:
            PersistenceError: If any lookup chunk fails
        """
        resolved: dict[OrderKey, str] = {}
        for chunk in chunked(unique_in_order(keys), self.lookup_batch_size):
            resolved.update(self.store.find_order_ids(workspace_id, chunk))
        return resolved

    def _write_order_lines(
        self,
        workspace_id: str,
        lines: Sequence[OrderLineRecord],
        raw_rows: Mapping[int, dict[str, Any]],
    ) -> WriteOutcome:
        outcome = WriteOutcome()

        # Every lookup finishes before any line is inserted
        try:
            order_ids = self.resolve_orders(workspace_id, [line.order_key for line in lines])
        except PersistenceError as e:
            outcome.errors.append(self._batch_failed("find_order_ids", e))
            return outcome

        resolved: list[tuple[str, OrderLineRecord]] = []
        missing: list[RowError] = []
        for line in lines:
            order_id = order_ids.get(line.order_key)
            if order_id is None:
                missing.append(missing_order_error(line, dict(raw_rows.get(line.row_number, {}))))
            else:
                resolved.append((order_id, line))

        db_errors: list[RowError] = []
        for batch in chunked(resolved, self.write_batch_size):
            try:
                outcome.inserted += self.store.insert_order_lines(batch)
            except PersistenceError as e:
                db_errors.append(self._batch_failed("insert_order_lines", e))

        outcome.errors = missing + db_errors
        logger.info(
            "Order lines written",
            extra={
                "inserted": outcome.inserted,
                "missing_orders": len(missing),
                "failed_batches": len(db_errors),
            },
        )
        return outcome
