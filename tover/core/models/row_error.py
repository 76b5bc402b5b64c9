"""
RowError model: one rejected row (or batch) in an import's error log.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class ErrorCode(str, Enum):
    """Row error taxonomy."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    MISSING_ORDER = "MISSING_ORDER"
    DB_ERROR = "DB_ERROR"


# row_number used for batch-level errors that belong to no single row
BATCH_ROW_NUMBER = 0


class RowError(BaseModel):
    """
    A rejected row with its error detail.

    Attributes:
        row_number: File row number, or 0 for batch-level (DB) errors
        error_code: VALIDATION_ERROR, MISSING_ORDER or DB_ERROR
        error_detail: Human-readable issues joined with "; "
        raw_row: The original field mapping ({} for batch-level errors)
    """

    row_number: int = Field(..., ge=0)
    error_code: ErrorCode
    error_detail: str = Field(..., min_length=1)
    raw_row: dict[str, Any] = Field(default_factory=dict)

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "row_number": 7,
                "error_code": "VALIDATION_ERROR",
                "error_detail": "ordered_at is not a valid date; currency must be a 3-letter code",
                "raw_row": {
                    "source": "allegro",
                    "external_order_id": "A-1007",
                    "ordered_at": "yesterday-ish",
                    "currency": "EURO",
                },
            }
        }

    @classmethod
    def batch_failure(cls, message: str) -> "RowError":
        """Build the synthetic DB_ERROR entry for a failed batch write."""
        return cls(
            row_number=BATCH_ROW_NUMBER,
            error_code=ErrorCode.DB_ERROR,
            error_detail=message or "Database error",
            raw_row={},
        )
