"""
Persistence contract used by the import pipeline and the reports.

A Store owns the import log and the turnover tables. Implementations
raise PersistenceError for any write or lookup failure; the pipeline
converts those into batch-level DB_ERROR entries.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Sequence

from pydantic import BaseModel

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

OrderKey = tuple[str, str]


class Store(ABC):
    """Abstract persistence collaborator."""

    # -- import log -------------------------------------------------------

    @abstractmethod
    def create_import(
        self, workspace_id: str, import_type: ImportKind, file_path: str | None
    ) -> ImportRecord:
        """Create an import in the processing state."""

    @abstractmethod
    def finish_import(self, import_id: str, status: ImportStatus, summary: dict[str, Any]) -> None:
        """Move an import to a terminal status and record its summary."""

    @abstractmethod
    def insert_import_errors(self, import_id: str, errors: Sequence[RowError]) -> int:
        """Append entries to an import's error log, preserving order."""

    @abstractmethod
    def get_import(self, import_id: str) -> ImportRecord | None:
        pass

    @abstractmethod
    def list_imports(self, workspace_id: str, limit: int = 20, offset: int = 0) -> Page[ImportRecord]:
        """Imports of a workspace, newest first."""

    @abstractmethod
    def list_import_errors(
        self, import_id: str, limit: int = 50, offset: int = 0
    ) -> Page[ImportErrorEntry]:
        """Error log of an import, ordered by row number ascending."""

    # -- writes -----------------------------------------------------------

    @abstractmethod
    def upsert_records(
        self, workspace_id: str, kind: ImportKind, records: Sequence[BaseModel]
    ) -> UpsertResult:
        """
        Upsert one batch on the kind's natural key, atomically.

        Raises:
            PersistenceError: If the batch could not be written
        """

    @abstractmethod
    def find_order_ids(self, workspace_id: str, keys: Sequence[OrderKey]) -> dict[OrderKey, str]:
        """
        Resolve (source, external_order_id) pairs to order ids.

        Pairs with no persisted order are absent from the result.

        Raises:
            PersistenceError: If the lookup fails
        """

    @abstractmethod
    def insert_order_lines(self, lines: Sequence[tuple[str, OrderLineRecord]]) -> int:
        """
        Insert (order_id, line) pairs as one batch.

        Raises:
            PersistenceError: If the batch could not be written
        """

    # -- reads ------------------------------------------------------------

    @abstractmethod
    def fetch_snapshots(self, workspace_id: str) -> list[InventorySnapshotRecord]:
        """All inventory snapshots of a workspace, newest snapshot_date first."""

    @abstractmethod
    def fetch_orders_in_range(
        self,
        workspace_id: str,
        start: datetime,
        end: datetime,
        exclude_status: str | None = "cancelled",
    ) -> list[StoredOrder]:
        """Orders with start <= ordered_at <= end, minus the excluded status."""

    @abstractmethod
    def fetch_order_lines(self, order_ids: Sequence[str]) -> list[StoredOrderLine]:
        pass

    @abstractmethod
    def list_orders(
        self,
        workspace_id: str,
        start: datetime,
        end: datetime,
        limit: int = 50,
        offset: int = 0,
    ) -> Page[StoredOrder]:
        """Orders in the window, newest first."""

    @abstractmethod
    def get_order(self, order_id: str) -> StoredOrder | None:
        pass
