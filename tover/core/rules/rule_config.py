"""
Rule configuration building.

Field rules are plain dictionaries so rule sets can be declared in code,
inspected in tests, and handed to the RuleEngine unchanged.
"""

from typing import Any


class RuleConfigBuilder:
    """
    Programmatically build an ordered rule configuration.

    Rules for the same field run in the order they were added; fields are
    reported in the order they first appear.

    Example:
        rules = (
            RuleConfigBuilder()
            .add_required_field("sku")
            .add_type_check("quantity", "int", message="quantity must be a positive integer")
            .add_range("quantity", min_exclusive=0, message="quantity must be a positive integer")
            .build()
        )
    """

    def __init__(self):
        """Initialize empty rule configuration."""
        self.rules: list[dict[str, Any]] = []

    def _add(self, field_name: str, rule_type: str, parameters: dict[str, Any]) -> "RuleConfigBuilder":
        index = sum(1 for r in self.rules if r["field_name"] == field_name)
        self.rules.append({
            "rule_name": f"{field_name}_{rule_type}_{index}",
            "rule_type": rule_type,
            "field_name": field_name,
            "parameters": parameters,
            "enabled": True,
        })
        return self

    @staticmethod
    def _with_message(parameters: dict[str, Any], message: str | None) -> dict[str, Any]:
        if message is not None:
            parameters["message"] = message
        return parameters

    def add_required_field(self, field_name: str, message: str | None = None) -> "RuleConfigBuilder":
        """Add a required (non-blank) field rule."""
        return self._add(field_name, "required_field", self._with_message({}, message))

    def add_default(self, field_name: str, default: Any) -> "RuleConfigBuilder":
        """Substitute a default for a blank field."""
        return self._add(field_name, "default", {"default": default})

    def add_type_check(
        self,
        field_name: str,
        expected_type: str,
        message: str | None = None
    ) -> "RuleConfigBuilder":
        """Add a numeric type check rule (coerces text)."""
        return self._add(
            field_name,
            "type_check",
            self._with_message({"expected_type": expected_type}, message),
        )

    def add_range(
        self,
        field_name: str,
        min_value: float | None = None,
        max_value: float | None = None,
        min_exclusive: float | None = None,
        message: str | None = None
    ) -> "RuleConfigBuilder":
        """Add a range validation rule."""
        params: dict[str, Any] = {}
        if min_value is not None:
            params["min"] = min_value
        if max_value is not None:
            params["max"] = max_value
        if min_exclusive is not None:
            params["min_exclusive"] = min_exclusive

        return self._add(field_name, "range", self._with_message(params, message))

    def add_regex(
        self,
        field_name: str,
        pattern: str,
        uppercase: bool = False,
        message: str | None = None
    ) -> "RuleConfigBuilder":
        """Add a regex validation rule."""
        return self._add(
            field_name,
            "regex",
            self._with_message({"pattern": pattern, "uppercase": uppercase}, message),
        )

    def add_date(
        self,
        field_name: str,
        output: str = "timestamp",
        allow_blank: bool = False,
        message: str | None = None
    ) -> "RuleConfigBuilder":
        """Add a date parsing rule."""
        return self._add(
            field_name,
            "date",
            self._with_message({"output": output, "allow_blank": allow_blank}, message),
        )

    def build(self) -> list[dict[str, Any]]:
        """Build and return the rule configuration."""
        return list(self.rules)
