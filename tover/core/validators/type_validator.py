"""
TypeValidator - validates and coerces numeric field text.
"""

import math
import re
from typing import Any

from .base_validator import BaseValidator

INTEGER_TEXT = re.compile(r"^[+-]?\d+$")
DECIMAL_TEXT = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")


class TypeValidator(BaseValidator):
    """
    Validates that a field holds a number of the expected type.

    Text is coerced strictly: integers must be whole-number text ("3.5" and
    "1_000" are rejected) and decimals must be plain finite numbers ("nan"
    and "inf" are rejected).

    Supported types:
    - int, float
    - Custom type names: "integer", "decimal", "number"
    """

    TYPE_MAPPING = {
        "integer": int,
        "int": int,
        "decimal": float,
        "number": float,
        "float": float,
        "double": float,
    }

    def __init__(self, field_name: str, parameters: dict[str, Any] | None = None):
        super().__init__(field_name, parameters)

        expected_type = self.parameters.get("expected_type")
        if not expected_type:
            raise ValueError("TypeValidator requires 'expected_type' parameter")

        if isinstance(expected_type, str):
            self.expected_type = self.TYPE_MAPPING.get(expected_type.lower())
            if not self.expected_type:
                raise ValueError(f"Unsupported type: {expected_type}")
        elif expected_type in (int, float):
            self.expected_type = expected_type
        else:
            raise ValueError(f"Unsupported type: {expected_type}")

    def validate(self, value: Any, record: dict[str, Any]) -> Any:
        """
        Coerce the value to the expected numeric type.

        Returns:
            int or float

        Raises:
            ValidationError: If the value is not a number of the expected type
        """
        type_name = "an integer" if self.expected_type is int else "a number"

        # bool is an int subclass; never a valid quantity or amount
        if isinstance(value, bool) or value is None:
            self.fail(f"{self.field_name} must be {type_name}")

        if isinstance(value, int | float):
            return self._coerce_number(value, type_name)

        text = str(value).strip()
        pattern = INTEGER_TEXT if self.expected_type is int else DECIMAL_TEXT
        if not pattern.match(text):
            self.fail(f"{self.field_name} must be {type_name}")

        # "1e400" matches the pattern but overflows to inf
        return self._coerce_number(self.expected_type(text), type_name)

    def _coerce_number(self, value: int | float, type_name: str) -> int | float:
        if isinstance(value, float) and not math.isfinite(value):
            self.fail(f"{self.field_name} must be {type_name}")
        if self.expected_type is int:
            if isinstance(value, float) and not value.is_integer():
                self.fail(f"{self.field_name} must be {type_name}")
            return int(value)
        return float(value)

    @property
    def rule_type(self) -> str:
        return "type_check"
