"""
Base validator interface for all field rules.

All validators must inherit from BaseValidator and implement the validate() method.
A validator either returns the normalized value for its field or raises
ValidationError; the rule engine chains validators for one field and stops
at that field's first failure.
"""

from abc import ABC, abstractmethod
from typing import Any, NoReturn


class ValidationError(Exception):
    """Raised when a field rule fails."""

    def __init__(self, rule_name: str, field_name: str, message: str):
        self.rule_name = rule_name
        self.field_name = field_name
        self.message = message
        super().__init__(message)


class BaseValidator(ABC):
    """
    Abstract base class for all validators.

    Each validator implements a specific rule type
    (required_field, default, type_check, range, regex, date).

    Every validator accepts an optional "message" parameter that replaces
    its default failure text; CSV row errors are reported with these
    per-field messages.
    """

    def __init__(self, field_name: str, parameters: dict[str, Any] | None = None):
        """
        Initialize validator.

        Args:
            field_name: Name of the field to validate
            parameters: Rule-specific parameters (e.g., min/max for range)
        """
        self.field_name = field_name
        self.parameters = parameters or {}
        self.message: str | None = self.parameters.get("message")

    @abstractmethod
    def validate(self, value: Any, record: dict[str, Any]) -> Any:
        """
        Validate a value against this rule.

        Args:
            value: The field value (raw text or the previous validator's output)
            record: The entire raw row (for context-dependent validation)

        Returns:
            The normalized value handed to the next validator

        Raises:
            ValidationError: If validation fails
        """
        pass

    @property
    @abstractmethod
    def rule_type(self) -> str:
        """Return the rule type identifier."""
        pass

    def fail(self, default_message: str) -> NoReturn:
        """Raise ValidationError with the configured or default message."""
        raise ValidationError(
            rule_name=self.rule_type,
            field_name=self.field_name,
            message=self.message or default_message,
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(field={self.field_name}, params={self.parameters})"


def is_blank(value: Any) -> bool:
    """True for None and whitespace-only strings."""
    return value is None or (isinstance(value, str) and value.strip() == "")
