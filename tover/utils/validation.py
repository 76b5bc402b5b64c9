"""
Input validation utilities for callers of the import and report APIs.

Provides reusable validation functions for workspace ids, pagination
parameters and day counts so bad input is rejected before it reaches
the store.
"""

from typing import Optional


class ValidationError(ValueError):
    """Raised when input validation fails."""
    pass


def validate_workspace_id(workspace_id: str, field_name: str = "workspace_id") -> str:
    """
    Validate a workspace ID.

    Workspace IDs are opaque text: any non-empty string of at most 255
    characters without control characters (PostgreSQL TEXT rejects NUL).

    Args:
        workspace_id: The workspace ID to validate
        field_name: Name of the field (for error messages)

    Returns:
        The validated workspace ID (stripped of whitespace)

    Raises:
        ValidationError: If validation fails

    Examples:
        >>> validate_workspace_id(" shop one ")
        'shop one'
        >>> validate_workspace_id("   ")  # doctest: +SKIP
        ValidationError: workspace_id cannot be empty or whitespace-only
    """
    if not workspace_id or not isinstance(workspace_id, str):
        raise ValidationError(f"{field_name} must be a non-empty string")

    workspace_id = workspace_id.strip()

    if not workspace_id:
        raise ValidationError(f"{field_name} cannot be empty or whitespace-only")

    if any(not ch.isprintable() for ch in workspace_id):
        raise ValidationError(f"{field_name} contains control characters")

    if len(workspace_id) > 255:
        raise ValidationError(f"{field_name} exceeds maximum length of 255 characters")

    return workspace_id


def validate_limit(
    limit: int,
    field_name: str = "limit",
    min_value: int = 1,
    max_value: Optional[int] = 1000,
) -> int:
    """
    Validate a pagination limit parameter.

    Args:
        limit: The limit value to validate
        field_name: Name of the field (for error messages)
        min_value: Minimum allowed value
        max_value: Maximum allowed value (None = no limit)

    Returns:
        The validated limit

    Raises:
        ValidationError: If validation fails

    Examples:
        >>> validate_limit(50)
        50
        >>> validate_limit(0)  # doctest: +SKIP
        ValidationError: limit must be at least 1
    """
    if isinstance(limit, bool) or not isinstance(limit, int):
        raise ValidationError(f"{field_name} must be an integer, got {type(limit).__name__}")

    if limit < min_value:
        raise ValidationError(f"{field_name} must be at least {min_value}, got {limit}")

    if max_value is not None and limit > max_value:
        raise ValidationError(f"{field_name} must not exceed {max_value}, got {limit}")

    return limit


def validate_offset(offset: int, field_name: str = "offset") -> int:
    """
    Validate a pagination offset parameter.

    Args:
        offset: The offset value to validate
        field_name: Name of the field (for error messages)

    Returns:
        The validated offset

    Raises:
        ValidationError: offset must be a non-negative integer
    """
    if isinstance(offset, bool) or not isinstance(offset, int):
        raise ValidationError(f"{field_name} must be an integer, got {type(offset).__name__}")

    if offset < 0:
        raise ValidationError(f"{field_name} must be a non-negative integer, got {offset}")

    return offset


def validate_days(days: int, field_name: str = "days", max_value: int = 365) -> int:
    """
    Validate a day count such as a forecast horizon or lookback window.

    Raises:
        ValidationError: If days is not an integer in [1, max_value]
    """
    return validate_limit(days, field_name=field_name, min_value=1, max_value=max_value)
