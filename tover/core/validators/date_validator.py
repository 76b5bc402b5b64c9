"""
DateValidator - parses date/timestamp text into date or UTC datetime values.
"""

from datetime import datetime, timezone
from typing import Any

from dateutil import parser as date_parser

from .base_validator import BaseValidator, is_blank

# Fills components missing from partial input such as "2025-03"
_PARSE_DEFAULT = datetime(1970, 1, 1)


class DateValidator(BaseValidator):
    """
    Validates that a field holds a parseable date.

    Parameters:
    - output: "timestamp" (timezone-aware UTC datetime, default) or "date"
    - allow_blank: Return None for blank values instead of failing (default False)

    Naive timestamps are read as UTC.
    """

    OUTPUTS = ("timestamp", "date")

    def __init__(self, field_name: str, parameters: dict[str, Any] | None = None):
        super().__init__(field_name, parameters)

        self.output = self.parameters.get("output", "timestamp")
        if self.output not in self.OUTPUTS:
            raise ValueError(f"Unsupported date output: {self.output}")
        self.allow_blank = bool(self.parameters.get("allow_blank", False))

    def validate(self, value: Any, record: dict[str, Any]) -> Any:
        if is_blank(value):
            if self.allow_blank:
                return None
            self.fail(f"{self.field_name} is not a valid date")

        # Offsets like +24:00 parse but cannot be converted, and shifting
        # 0001-01-01 or 9999-12-31 to UTC leaves the datetime range
        try:
            return self._normalize(value)
        except (ValueError, OverflowError):
            self.fail(f"{self.field_name} is not a valid date")

    def _normalize(self, value: Any):
        if isinstance(value, datetime):
            parsed = value
        else:
            parsed = date_parser.parse(str(value).strip(), default=_PARSE_DEFAULT)

        if self.output == "date":
            return parsed.date()

        if parsed.tzinfo is None:
            return parsed.replace(tzinfo=timezone.utc)
        return parsed.astimezone(timezone.utc)

    @property
    def rule_type(self) -> str:
        return "date"
