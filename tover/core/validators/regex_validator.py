"""
RegexValidator - whole-value pattern match for code-like fields.
"""

import re
from typing import Any

from .base_validator import BaseValidator


class RegexValidator(BaseValidator):
    """
    Requires the trimmed value to match ``pattern`` in full.

    Parameters:
    - pattern: pattern text or a compiled pattern
    - flags: re flags, only used when pattern is text
    - uppercase: upper-case the value before matching (currency codes)

    The normalized text is what gets returned, so "eur" becomes "EUR".
    """

    def __init__(self, field_name: str, parameters: dict[str, Any] | None = None):
        super().__init__(field_name, parameters)

        pattern = self.parameters.get("pattern")
        if isinstance(pattern, re.Pattern):
            self.pattern = pattern
        elif isinstance(pattern, str) and pattern:
            try:
                self.pattern = re.compile(pattern, self.parameters.get("flags", 0))
            except re.error as e:
                raise ValueError(f"Invalid regex pattern for {field_name}: {e}") from e
        else:
            raise ValueError("RegexValidator requires a 'pattern' parameter")

        self.uppercase = bool(self.parameters.get("uppercase"))

    def validate(self, value: Any, record: dict[str, Any]) -> Any:
        text = str(value).strip() if value is not None else ""
        if self.uppercase:
            text = text.upper()

        if self.pattern.fullmatch(text) is None:
            self.fail(f"{self.field_name} does not match pattern '{self.pattern.pattern}'")
        return text

    @property
    def rule_type(self) -> str:
        return "regex"
