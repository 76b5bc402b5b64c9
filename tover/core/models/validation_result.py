"""
ValidationResult model: partition of parsed rows into typed records and errors (ephemeral).
"""

from typing import Generic, TypeVar

from pydantic import BaseModel, Field

from .row_error import RowError

T = TypeVar("T")


class ValidationResult(BaseModel, Generic[T]):
    """
    Outcome of validating every row of one upload.

    Every input row appears in exactly one of valid/errors.

    Attributes:
        valid: Typed records, in file order
        errors: VALIDATION_ERROR entries, in file order
    """

    valid: list[T] = Field(default_factory=list)
    errors: list[RowError] = Field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.valid) + len(self.errors)
