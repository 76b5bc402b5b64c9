"""
Field validator implementations.

Provides validators for required fields, defaults, numeric types, ranges,
regex patterns and dates.
"""

from .base_validator import BaseValidator, ValidationError
from .date_validator import DateValidator
from .default_value_validator import DefaultValueValidator
from .range_validator import RangeValidator
from .regex_validator import RegexValidator
from .required_field_validator import RequiredFieldValidator
from .type_validator import TypeValidator

__all__ = [
    "BaseValidator",
    "ValidationError",
    "RequiredFieldValidator",
    "DefaultValueValidator",
    "TypeValidator",
    "RangeValidator",
    "RegexValidator",
    "DateValidator",
]
