"""
Header contracts and field rule sets for the four import kinds.

Usage:
    header_error = validate_headers(ImportKind.ORDERS, headers)
    result = validate_rows(ImportKind.ORDERS, rows)
"""

from dataclasses import dataclass, field
from typing import Any, Iterable

from pydantic import BaseModel

from tover.core.models import (
    ErrorCode,
    ImportKind,
    InventorySnapshotRecord,
    OrderLineRecord,
    OrderRecord,
    PaymentRecord,
    RawRow,
    RowError,
    ValidationResult,
)
from tover.core.models.records import CURRENCY_PATTERN

from .rule_config import RuleConfigBuilder
from .rule_engine import RuleEngine

CURRENCY_MESSAGE = "currency must be a 3-letter code"


@dataclass(frozen=True)
class RecordKindSpec:
    """
    Everything the pipeline needs to know about one import kind.

    Attributes:
        kind: Import type tag
        table: Target table
        required_columns: Header contract, in reporting order
        rules: Field rule configuration for the RuleEngine
        model: Typed record class built from validated values
        conflict_columns: Natural key columns for upsert (empty = no natural key)
    """

    kind: ImportKind
    table: str
    required_columns: tuple[str, ...]
    rules: list[dict[str, Any]]
    model: type[BaseModel]
    conflict_columns: tuple[str, ...] = field(default_factory=tuple)


ORDER_RULES = (
    RuleConfigBuilder()
    .add_required_field("source")
    .add_required_field("external_order_id")
    .add_required_field("ordered_at")
    .add_date("ordered_at", output="timestamp")
    .add_required_field("currency")
    .add_regex("currency", CURRENCY_PATTERN, uppercase=True, message=CURRENCY_MESSAGE)
    .add_default("status", "created")
    .build()
)

ORDER_LINE_RULES = (
    RuleConfigBuilder()
    .add_required_field("external_order_id")
    .add_required_field("source")
    .add_required_field("sku")
    .add_type_check("quantity", "int", message="quantity must be a positive integer")
    .add_range("quantity", min_exclusive=0, message="quantity must be a positive integer")
    .add_type_check("unit_price_gross", "decimal", message="unit_price_gross must be >= 0")
    .add_range("unit_price_gross", min_value=0, message="unit_price_gross must be >= 0")
    .add_default("discount_amount", "0")
    .add_type_check("discount_amount", "decimal", message="discount_amount must be >= 0")
    .add_range("discount_amount", min_value=0, message="discount_amount must be >= 0")
    .add_default("tax_amount", "0")
    .add_type_check("tax_amount", "decimal", message="tax_amount must be >= 0")
    .add_range("tax_amount", min_value=0, message="tax_amount must be >= 0")
    .build()
)

INVENTORY_RULES = (
    RuleConfigBuilder()
    .add_required_field("snapshot_date")
    .add_date("snapshot_date", output="date")
    .add_required_field("sku")
    .add_type_check("on_hand_qty", "decimal", message="on_hand_qty must be >= 0")
    .add_range("on_hand_qty", min_value=0, message="on_hand_qty must be >= 0")
    .add_type_check("unit_cost", "decimal", message="unit_cost must be >= 0")
    .add_range("unit_cost", min_value=0, message="unit_cost must be >= 0")
    .build()
)

PAYMENT_RULES = (
    RuleConfigBuilder()
    .add_required_field("source")
    .add_required_field("external_payment_id")
    .add_type_check("amount", "decimal", message="amount must be a number")
    .add_default("fee_amount", "0")
    .add_type_check("fee_amount", "decimal", message="fee_amount must be a number")
    .add_required_field("currency")
    .add_regex("currency", CURRENCY_PATTERN, uppercase=True, message=CURRENCY_MESSAGE)
    .add_date("paid_at", output="timestamp", allow_blank=True)
    .add_default("status", "pending")
    .build()
)

RECORD_KINDS: dict[ImportKind, RecordKindSpec] = {
    ImportKind.ORDERS: RecordKindSpec(
        kind=ImportKind.ORDERS,
        table="orders",
        required_columns=("source", "external_order_id", "ordered_at", "currency"),
        rules=ORDER_RULES,
        model=OrderRecord,
        conflict_columns=("workspace_id", "source", "external_order_id"),
    ),
    ImportKind.ORDER_LINES: RecordKindSpec(
        kind=ImportKind.ORDER_LINES,
        table="order_lines",
        required_columns=("external_order_id", "source", "sku", "quantity", "unit_price_gross"),
        rules=ORDER_LINE_RULES,
        model=OrderLineRecord,
    ),
    ImportKind.INVENTORY: RecordKindSpec(
        kind=ImportKind.INVENTORY,
        table="inventory_snapshots",
        required_columns=("snapshot_date", "sku", "on_hand_qty", "unit_cost"),
        rules=INVENTORY_RULES,
        model=InventorySnapshotRecord,
        conflict_columns=("workspace_id", "snapshot_date", "sku"),
    ),
    ImportKind.PAYMENTS: RecordKindSpec(
        kind=ImportKind.PAYMENTS,
        table="payments",
        required_columns=("source", "external_payment_id", "amount", "currency"),
        rules=PAYMENT_RULES,
        model=PaymentRecord,
        conflict_columns=("workspace_id", "source", "external_payment_id"),
    ),
}

_ENGINES: dict[ImportKind, RuleEngine] = {
    kind: RuleEngine(spec.rules) for kind, spec in RECORD_KINDS.items()
}


def get_kind_spec(kind: ImportKind | str) -> RecordKindSpec:
    """Look up the definition of an import kind (accepts the tag string)."""
    return RECORD_KINDS[ImportKind.parse(kind)]


def validate_headers(kind: ImportKind | str, headers: Iterable[str]) -> str | None:
    """
    Check a header row against the kind's required columns.

    Args:
        kind: Import kind
        headers: Header names, already trimmed and lower-cased

    Returns:
        None if every required column is present, otherwise one message
        naming all missing columns
    """
    present = set(headers)
    missing = [c for c in get_kind_spec(kind).required_columns if c not in present]
    if missing:
        return f"Missing required columns: {', '.join(missing)}"
    return None


def validate_rows(kind: ImportKind | str, rows: Iterable[RawRow]) -> ValidationResult:
    """
    Validate every row of an upload for one import kind.

    A row with any failing field goes to errors with all its issues joined
    by "; "; a row is never partially accepted.

    Args:
        kind: Import kind
        rows: Parsed rows

    Returns:
        ValidationResult partitioning the rows into typed records and errors
    """
    spec = get_kind_spec(kind)
    engine = _ENGINES[spec.kind]

    valid: list[Any] = []
    errors: list[RowError] = []

    for row in rows:
        check = engine.check_row(row)
        if check.passed:
            valid.append(spec.model(row_number=row.row_number, **check.values))
        else:
            errors.append(
                RowError(
                    row_number=row.row_number,
                    error_code=ErrorCode.VALIDATION_ERROR,
                    error_detail="; ".join(check.issues),
                    raw_row=dict(row.data),
                )
            )

    return ValidationResult(valid=valid, errors=errors)
