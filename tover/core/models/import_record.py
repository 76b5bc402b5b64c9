"""
Import lifecycle models: the persisted Import record, its summary, its
error-log entries and the outcome returned to callers.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field

from .import_kind import ImportKind
from .row_error import ErrorCode

T = TypeVar("T")


class ImportStatus(str, Enum):
    """processing -> completed | failed; terminal states are never reopened."""

    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self is not ImportStatus.PROCESSING


class ImportSummary(BaseModel):
    """
    Row accounting for a finished import.

    Serialized with camelCase keys: {"totalRows", "inserted", "errors"}.
    """

    total_rows: int = Field(0, ge=0, alias="totalRows")
    inserted: int = Field(0, ge=0)
    errors: int = Field(0, ge=0)

    class Config:
        populate_by_name = True
        frozen = True

    def to_dict(self) -> dict[str, int]:
        return self.model_dump(by_alias=True)


class ImportRecord(BaseModel):
    """
    One upload attempt.

    Attributes:
        id: Import identifier
        workspace_id: Owning workspace
        file_path: Uploaded file name
        import_type: Declared record kind
        status: processing, completed or failed
        summary: ImportSummary dict, or {"error": ...} for header/parse failures
        created_at: When the upload began
        completed_at: When a terminal status was reached
    """

    id: str
    workspace_id: str
    file_path: str | None = None
    import_type: ImportKind
    status: ImportStatus = ImportStatus.PROCESSING
    summary: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime
    completed_at: datetime | None = None


class ImportErrorEntry(BaseModel):
    """A persisted RowError, as listed from an import's error log."""

    id: int
    import_id: str
    row_number: int
    error_code: ErrorCode
    error_detail: str
    raw_row: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime | None = None


class ImportOutcome(BaseModel):
    """
    What the import trigger returns.

    summary is None when the import failed before row processing
    (header or parse failure); error then carries the message.
    """

    import_id: str
    status: ImportStatus
    summary: ImportSummary | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"importId": self.import_id, "status": self.status.value}
        if self.summary is not None:
            payload["summary"] = self.summary.to_dict()
        if self.error is not None:
            payload["error"] = self.error
        return payload


class Page(BaseModel, Generic[T]):
    """A page of a listing with limit/offset pagination."""

    items: list[T] = Field(default_factory=list)
    limit: int
    offset: int
    total: int = 0
