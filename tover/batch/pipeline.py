"""
Import pipeline orchestration.

Coordinates the flow: create import → parse → header gate → validate →
persist → error log → final status

Row-level problems never abort an import; they are collected and written
to the import's error log. Only parse failures and unexpected exceptions
escape, and those still leave the import in the failed state.
"""

import time
from dataclasses import dataclass
from typing import Any

from tover.core.errors import PersistenceError
from tover.core.models import (
    ImportKind,
    ImportOutcome,
    ImportStatus,
    ImportSummary,
    RowError,
    ValidationResult,
)
from tover.core.rules import validate_headers, validate_rows
from tover.batch.readers import CSVReader
from tover.batch.writers import RecordWriter
from tover.observability.logger import get_logger, log_operation
from tover.observability.metrics import record_import, record_row_error
from tover.warehouse.store import Store

logger = get_logger(__name__)


def final_status(errors: list[RowError], inserted: int) -> ImportStatus:
    """An import fails only when it has errors and nothing was persisted."""
    if errors and inserted == 0:
        return ImportStatus.FAILED
    return ImportStatus.COMPLETED


@dataclass
class DryRunResult:
    """Parse and validation result of an upload that was not persisted."""

    total_rows: int
    header_error: str | None
    validation: ValidationResult | None

    def to_dict(self, max_errors: int = 20) -> dict[str, Any]:
        payload: dict[str, Any] = {"totalRows": self.total_rows}
        if self.header_error:
            payload["error"] = self.header_error
        if self.validation is not None:
            payload["valid"] = len(self.validation.valid)
            payload["invalid"] = len(self.validation.errors)
            payload["errors"] = [
                e.model_dump(mode="json") for e in self.validation.errors[:max_errors]
            ]
        return payload


class ImportPipeline:
    """
    Orchestrates one CSV import.

    Flow:
    1. Resolve the import type (unknown tags raise before anything is stored)
    2. Create the import in processing state
    3. Parse the upload; an empty file completes with a zero summary
    4. Check headers; a missing column fails the import without row errors
    5. Validate rows and persist the valid ones
    6. Write the error log and set the final status
    """

    def __init__(
        self,
        store: Store,
        reader: CSVReader | None = None,
        write_batch_size: int = 500,
        lookup_batch_size: int = 100,
    ):
        """
        Initialize import pipeline.

        Args:
            store: Persistence collaborator
            reader: CSV reader (default: comma-delimited UTF-8)
            write_batch_size: Records per persistence batch
            lookup_batch_size: Order keys per parent lookup
        """
        self.store = store
        self.reader = reader or CSVReader()
        self.writer = RecordWriter(
            store,
            write_batch_size=write_batch_size,
            lookup_batch_size=lookup_batch_size,
        )

    @classmethod
    def from_config(cls, store: Store, config) -> "ImportPipeline":
        """Build a pipeline from an ImportConfig."""
        return cls(
            store,
            write_batch_size=config.write_batch_size,
            lookup_batch_size=config.lookup_batch_size,
        )

    def run(
        self,
        workspace_id: str,
        content: bytes | str,
        import_type: ImportKind | str,
        file_name: str | None = None,
    ) -> ImportOutcome:
        """
        Import one uploaded file.

        Args:
            workspace_id: Owning workspace
            content: Raw upload bytes (or text)
            import_type: Import kind tag
            file_name: Original file name, stored on the import

        Returns:
            ImportOutcome with the import id, final status and summary

        Raises:
            UnknownImportTypeError: If import_type is not supported
            CSVParseError: If the upload cannot be parsed (import marked failed)
        """
        kind = ImportKind.parse(import_type)
        started = time.perf_counter()

        record = self.store.create_import(workspace_id, kind, file_name)
        import_id = record.id

        try:
            with log_operation(
                "Processing import",
                logger=logger,
                import_id=import_id,
                import_type=kind.value,
                workspace_id=workspace_id,
            ) as op:
                outcome = self._process(import_id, workspace_id, kind, content)
                op.add(import_status=outcome.status.value)
        except Exception as e:
            self._mark_failed(import_id, kind, str(e) or type(e).__name__, started)
            raise

        summary = outcome.summary or ImportSummary()
        record_import(
            kind.value,
            outcome.status.value,
            inserted=summary.inserted,
            rejected=summary.errors,
            duration=time.perf_counter() - started,
        )
        return outcome

    def _process(
        self,
        import_id: str,
        workspace_id: str,
        kind: ImportKind,
        content: bytes | str,
    ) -> ImportOutcome:
        rows, headers = self.reader.read(content)

        if not rows:
            summary = ImportSummary()
            self.store.finish_import(import_id, ImportStatus.COMPLETED, summary.to_dict())
            logger.info("Empty upload", extra={"import_id": import_id})
            return ImportOutcome(import_id=import_id, status=ImportStatus.COMPLETED, summary=summary)

        header_error = validate_headers(kind, headers)
        if header_error:
            self.store.finish_import(import_id, ImportStatus.FAILED, {"error": header_error})
            logger.warning("Header check failed", extra={"import_id": import_id, "error": header_error})
            return ImportOutcome(import_id=import_id, status=ImportStatus.FAILED, error=header_error)

        result = validate_rows(kind, rows)
        raw_rows = {row.row_number: dict(row.data) for row in rows}
        written = self.writer.write(workspace_id, kind, result.valid, raw_rows)

        errors = result.errors + written.errors
        if errors:
            self.store.insert_import_errors(import_id, errors)
            for error in errors:
                record_row_error(kind.value, error.error_code.value)

        status = final_status(errors, written.inserted)
        summary = ImportSummary(total_rows=len(rows), inserted=written.inserted, errors=len(errors))
        self.store.finish_import(import_id, status, summary.to_dict())

        logger.info(
            "Import finished",
            extra={
                "import_id": import_id,
                "status": status.value,
                "total_rows": summary.total_rows,
                "inserted": summary.inserted,
                "errors": summary.errors,
            },
        )
        return ImportOutcome(import_id=import_id, status=status, summary=summary)

    def _mark_failed(self, import_id: str, kind: ImportKind, message: str, started: float) -> None:
        try:
            self.store.finish_import(import_id, ImportStatus.FAILED, {"error": message})
        except PersistenceError as e:
            # The original exception is re-raised by the caller
            logger.error(
                "Could not mark import as failed",
                extra={"import_id": import_id, "kind": e.kind},
            )
        record_import(kind.value, ImportStatus.FAILED.value, 0, 0, time.perf_counter() - started)


def dry_run(
    content: bytes | str,
    import_type: ImportKind | str,
    reader: CSVReader | None = None,
) -> DryRunResult:
    """
    Parse and validate an upload without touching any store.

    Raises:
        UnknownImportTypeError: If import_type is not supported
        CSVParseError: If the upload cannot be parsed
    """
    kind = ImportKind.parse(import_type)
    rows, headers = (reader or CSVReader()).read(content)
    if not rows:
        return DryRunResult(total_rows=0, header_error=None, validation=None)
    header_error = validate_headers(kind, headers)
    if header_error:
        return DryRunResult(total_rows=len(rows), header_error=header_error, validation=None)
    return DryRunResult(total_rows=len(rows), header_error=None, validation=validate_rows(kind, rows))
