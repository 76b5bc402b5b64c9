"""
RequiredFieldValidator - ensures a field is present and not null/empty.
"""

from typing import Any, Dict

from .base_validator import BaseValidator, is_blank


class RequiredFieldValidator(BaseValidator):
    """
    Validates that a required field is present and not blank.

    Fails if:
    - Field is missing from the row
    - Field value is None
    - Field value is empty or whitespace-only

    Returns the value with surrounding whitespace stripped.
    """

    def validate(self, value: Any, record: Dict[str, Any]) -> Any:
        if is_blank(value):
            self.fail(f"{self.field_name} is empty")

        return value.strip() if isinstance(value, str) else value

    @property
    def rule_type(self) -> str:
        return "required_field"
