"""
RangeValidator - bounds check on an already-coerced number.
"""

import operator
from typing import Any

from .base_validator import BaseValidator

# parameter name -> (comparison the value must satisfy, symbol used in the message)
BOUNDS = {
    "min": (operator.ge, ">="),
    "min_exclusive": (operator.gt, ">"),
    "max": (operator.le, "<="),
    "max_exclusive": (operator.lt, "<"),
}


class RangeValidator(BaseValidator):
    """
    Checks a number against any combination of min, max, min_exclusive and
    max_exclusive. Runs after a TypeValidator in the chain and returns the
    value unchanged.
    """

    def __init__(self, field_name: str, parameters: dict[str, Any] | None = None):
        super().__init__(field_name, parameters)

        self.bounds = [
            (limit, *BOUNDS[name])
            for name in BOUNDS
            if (limit := self.parameters.get(name)) is not None
        ]
        if not self.bounds:
            raise ValueError(f"RangeValidator needs one of: {', '.join(BOUNDS)}")

    def validate(self, value: Any, record: dict[str, Any]) -> Any:
        if isinstance(value, bool) or not isinstance(value, int | float):
            self.fail(f"{self.field_name} must be numeric")

        for limit, holds, symbol in self.bounds:
            if not holds(value, limit):
                self.fail(f"{self.field_name} must be {symbol} {limit}")
        return value

    @property
    def rule_type(self) -> str:
        return "range"
