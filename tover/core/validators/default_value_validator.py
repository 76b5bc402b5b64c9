"""
DefaultValueValidator - substitutes a default for blank optional fields.
"""

from typing import Any

from .base_validator import BaseValidator, is_blank


class DefaultValueValidator(BaseValidator):
    """
    Replaces a missing or blank value with a default.

    Parameters:
    - default: Value used when the field is blank (required)

    Never fails. Non-blank text is returned stripped.
    """

    def __init__(self, field_name: str, parameters: dict[str, Any] | None = None):
        super().__init__(field_name, parameters)

        if "default" not in self.parameters:
            raise ValueError("DefaultValueValidator requires 'default' parameter")
        self.default = self.parameters["default"]

    def validate(self, value: Any, record: dict[str, Any]) -> Any:
        if is_blank(value):
            return self.default
        return value.strip() if isinstance(value, str) else value

    @property
    def rule_type(self) -> str:
        return "default"
