"""
Exception hierarchy for the Tover core.

Row-level problems are never raised to callers; they are collected as
RowError entries. The exceptions here are the top-level failures.
"""


class ToverError(Exception):
    """Base class for all Tover errors."""


class CSVParseError(ToverError):
    """Raised when an uploaded file cannot be decoded or tokenized."""

    def __init__(self, message: str, line_number: int | None = None):
        self.line_number = line_number
        if line_number is not None:
            message = f"{message} (line {line_number})"
        super().__init__(message)


class UnknownImportTypeError(ToverError, ValueError):
    """Raised when an import type tag is not one of the supported kinds."""

    def __init__(self, import_type: str, supported: list[str]):
        self.import_type = import_type
        self.supported = supported
        super().__init__(
            f"Invalid import_type '{import_type}'. Must be one of: {', '.join(supported)}"
        )


class PersistenceError(ToverError):
    """
    Raised by a Store when a write or lookup fails.

    Attributes:
        kind: One of constraint_violation, unavailable, timeout, unknown
        message: Driver message (opaque at row level)
    """

    KINDS = ("constraint_violation", "unavailable", "timeout", "unknown")

    def __init__(self, message: str, kind: str = "unknown"):
        if kind not in self.KINDS:
            raise ValueError(f"Unknown persistence error kind: {kind}")
        self.kind = kind
        self.message = message
        super().__init__(message)


class NotFoundError(ToverError):
    """Raised when a requested import or order does not exist."""

    def __init__(self, entity: str, entity_id: str):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found: {entity_id}")
