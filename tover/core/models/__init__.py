"""
Core data models for the turnover import pipeline and forecasting.

All models use Pydantic for runtime validation and type safety.
"""

from .analytics import CriticalStockItem, MetricsSummary, OrderLineDetail, OrderWithMetrics
from .import_kind import ImportKind
from .import_record import (
    ImportErrorEntry,
    ImportOutcome,
    ImportRecord,
    ImportStatus,
    ImportSummary,
    Page,
)
from .raw_row import RawRow
from .records import InventorySnapshotRecord, OrderLineRecord, OrderRecord, PaymentRecord
from .row_error import BATCH_ROW_NUMBER, ErrorCode, RowError
from .stored import StoredOrder, StoredOrderLine, UpsertResult
from .validation_result import ValidationResult

__all__ = [
    "RawRow",
    "ImportKind",
    "OrderRecord",
    "OrderLineRecord",
    "InventorySnapshotRecord",
    "PaymentRecord",
    "ErrorCode",
    "RowError",
    "BATCH_ROW_NUMBER",
    "ValidationResult",
    "ImportStatus",
    "ImportSummary",
    "ImportRecord",
    "ImportErrorEntry",
    "ImportOutcome",
    "Page",
    "UpsertResult",
    "StoredOrder",
    "StoredOrderLine",
    "CriticalStockItem",
    "MetricsSummary",
    "OrderWithMetrics",
    "OrderLineDetail",
]
