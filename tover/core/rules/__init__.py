"""
Validation rule engine and per-kind rule sets.
"""

from .record_rules import (
    RECORD_KINDS,
    RecordKindSpec,
    get_kind_spec,
    validate_headers,
    validate_rows,
)
from .rule_config import RuleConfigBuilder
from .rule_engine import RowCheck, RuleEngine

__all__ = [
    "RuleEngine",
    "RowCheck",
    "RuleConfigBuilder",
    "RecordKindSpec",
    "RECORD_KINDS",
    "get_kind_spec",
    "validate_headers",
    "validate_rows",
]
