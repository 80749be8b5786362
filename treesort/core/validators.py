"""
treesort Foundation: Input Validators.

This module provides validation functions for the sorting section of the
configuration and for the other user inputs the CLI accepts.
"""
from typing import Any, Dict, Mapping

from treesort.core.constants import SORT_FLAG_KEYS, ConfigKey, ErrorCode, SortStrategy


class ValidationError(Exception):
    """Base exception for validation errors."""

    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.INVALID_INPUT):
        """Initialize ValidationError.

        Args:
            message: Error message
            error_code: Associated error code
        """
        super().__init__(message)
        self.error_code = error_code


def validate_strategy(value: Any) -> SortStrategy:
    """Validate a sort strategy value.

    Args:
        value: Strategy name (case-insensitive) or SortStrategy member

    Returns:
        The matching SortStrategy

    Raises:
        ValidationError: If the strategy is not recognized
    """
    if isinstance(value, SortStrategy):
        return value

    if not isinstance(value, str):
        raise ValidationError(f"Sort strategy must be a string, got {type(value).__name__}")

    normalized = value.strip().lower()
    for strategy in SortStrategy:
        if strategy.value == normalized:
            return strategy

    valid = ", ".join(repr(s.value) for s in SortStrategy)
    raise ValidationError(f"Unknown sort strategy {value!r} (expected one of: {valid})")


def validate_flag(name: str, value: Any) -> bool:
    """Validate a boolean configuration flag.

    Integers and strings are rejected on purpose so that a YAML typo such as
    ``reversed: "no"`` doesn't silently turn into True.

    Args:
        name: Flag name, used in the error message
        value: Flag value

    Returns:
        The flag value

    Raises:
        ValidationError: If value is not a bool
    """
    if not isinstance(value, bool):
        raise ValidationError(f"'{name}' must be a boolean, got {type(value).__name__}")
    return value


def validate_sort_settings(settings: Mapping[str, Any]) -> Dict[str, Any]:
    """Validate the sorting section of a configuration.

    Missing keys are allowed (defaults apply); unknown keys are not.

    Args:
        settings: Sorting settings mapping

    Returns:
        Normalized settings with the strategy as a SortStrategy member

    Raises:
        ValidationError: If settings are invalid
    """
    if not isinstance(settings, Mapping):
        raise ValidationError("Sorting settings must be a dictionary")

    allowed = {ConfigKey.STRATEGY, *SORT_FLAG_KEYS}
    unknown = sorted(str(key) for key in settings if key not in allowed)
    if unknown:
        raise ValidationError(f"Unknown sorting settings: {', '.join(unknown)}")

    normalized: Dict[str, Any] = {}
    if ConfigKey.STRATEGY in settings:
        normalized[ConfigKey.STRATEGY] = validate_strategy(settings[ConfigKey.STRATEGY])

    for key in SORT_FLAG_KEYS:
        if key in settings:
            normalized[key] = validate_flag(key, settings[key])

    return normalized


def validate_log_level(level: Any) -> str:
    """Validate a log level name.

    Args:
        level: Level name (case-insensitive)

    Returns:
        Upper-cased level name

    Raises:
        ValidationError: If the level is unknown
    """
    valid_levels = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
    if not isinstance(level, str) or level.upper() not in valid_levels:
        raise ValidationError(
            f"Invalid log level: {level!r}. Must be one of: {', '.join(valid_levels)}"
        )
    return level.upper()
