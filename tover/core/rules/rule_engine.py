"""
Rule engine for applying field rules to parsed CSV rows.

The rule engine builds validators from rule configurations, runs them
field by field, and collects one message per failing field.
"""

from typing import Any

from tover.core.models import RawRow
from tover.core.validators import (
    BaseValidator,
    DateValidator,
    DefaultValueValidator,
    RangeValidator,
    RegexValidator,
    RequiredFieldValidator,
    TypeValidator,
    ValidationError,
)


class RowCheck:
    """Result of checking one row: normalized values plus failing-field messages."""

    __slots__ = ("values", "issues")

    def __init__(self, values: dict[str, Any], issues: list[str]):
        self.values = values
        self.issues = issues

    @property
    def passed(self) -> bool:
        return not self.issues


class RuleEngine:
    """
    Orchestrates field rules on parsed rows.

    Validators for the same field form a chain: each receives the previous
    one's output, and the chain stops at the field's first failure. Every
    failing field contributes exactly one message, in field order.
    """

    VALIDATOR_REGISTRY = {
        "required_field": RequiredFieldValidator,
        "default": DefaultValueValidator,
        "type_check": TypeValidator,
        "range": RangeValidator,
        "regex": RegexValidator,
        "date": DateValidator,
    }

    def __init__(self, rules: list[dict[str, Any]]):
        """
        Initialize the rule engine with field rules.

        Args:
            rules: List of rule configurations, each containing:
                   - rule_name: str
                   - rule_type: str (required_field, default, type_check, range, regex, date)
                   - field_name: str
                   - parameters: Dict[str, Any] (optional)
                   - enabled: bool (default True)
        """
        self.rules = rules
        self.chains: dict[str, list[tuple[str, BaseValidator]]] = {}
        self._build_validators()

    def _build_validators(self) -> None:
        """Build validator chains from rule configurations."""
        for rule in self.rules:
            if not rule.get("enabled", True):
                continue

            rule_name = rule["rule_name"]
            rule_type = rule["rule_type"]
            field_name = rule["field_name"]
            parameters = rule.get("parameters", {})

            validator_class = self.VALIDATOR_REGISTRY.get(rule_type)
            if not validator_class:
                raise ValueError(f"Unknown rule type: {rule_type}")

            try:
                validator = validator_class(field_name, parameters)
            except ValueError as e:
                raise ValueError(f"Failed to create validator for rule '{rule_name}': {e}") from e

            self.chains.setdefault(field_name, []).append((rule_name, validator))

    @property
    def fields(self) -> list[str]:
        """Fields covered by the rules, in reporting order."""
        return list(self.chains)

    def check_row(self, row: RawRow) -> RowCheck:
        """
        Run every field chain against a row.

        Args:
            row: The parsed row

        Returns:
            RowCheck with normalized values for passing fields and one
            message per failing field
        """
        values: dict[str, Any] = {}
        issues: list[str] = []

        for field_name, chain in self.chains.items():
            value: Any = row.data.get(field_name)
            try:
                for _, validator in chain:
                    value = validator.validate(value, row.data)
            except ValidationError as e:
                issues.append(e.message)
                continue
            values[field_name] = value

        return RowCheck(values, issues)

    def get_rule_summary(self) -> dict[str, Any]:
        """
        Get summary of loaded rules.

        Returns:
            Dictionary with rule counts per type and the covered fields
        """
        counts: dict[str, int] = {}
        for chain in self.chains.values():
            for _, validator in chain:
                counts[validator.rule_type] = counts.get(validator.rule_type, 0) + 1

        return {
            "total_rules": sum(counts.values()),
            "rules_by_type": counts,
            "fields": self.fields,
        }
