"""
treesort Foundation: Constants and Type Definitions

This module provides system-wide constants, error codes, and type definitions
shared by the sorting core, the configuration layer and the CLI.
"""
import stat
from enum import Enum, IntEnum
from typing import NewType

# Version information
TREESORT_VERSION = "1.0.0"


# Error codes
class ErrorCode(IntEnum):
    """Standardized error codes for treesort operations."""

    SUCCESS = 0  # Operation completed successfully
    INVALID_INPUT = 1  # Bad configuration value or argument
    NOT_FOUND = 2  # Entry, directory or file doesn't exist
    CONFLICT = 4  # Identity already present in the tree
    INTERNAL_ERROR = 6  # Bug in treesort


# NewTypes for type safety
EntryId = NewType("EntryId", int)


class EntryKind(IntEnum):
    """Kind of a tree entry.

    The integer value is the type class used for directories-first grouping.
    """

    DIRECTORY = 0
    FILE = 1

    @classmethod
    def from_mode(cls, mode: int) -> "EntryKind":
        """Determine entry kind from a stat mode. Anything but a directory is a file."""
        if stat.S_ISDIR(mode):
            return cls.DIRECTORY
        return cls.FILE


class SortStrategy(Enum):
    """Primary name ordering strategies."""

    ALPHABETICAL = "alphabetical"  # Case-insensitive code-point order
    NATURAL = "natural"  # Like alphabetical, digit runs compare numerically


# Configuration keys
class ConfigKey:
    """Configuration key constants."""

    # Top-level keys
    ROOT = "treesort"
    SORTING = "sorting"
    INTEGRITY = "integrity"
    LOGGING = "logging"

    # Sorting configuration
    STRATEGY = "strategy"
    REVERSED = "reversed"
    UPPERCASE_FIRST = "uppercase_first"
    GROUP_BY_TYPE = "group_by_type"
    GROUP_BY_EXTENSION = "group_by_extension"

    # Integrity configuration
    STRICT = "strict"


SORT_FLAG_KEYS = (
    ConfigKey.REVERSED,
    ConfigKey.UPPERCASE_FIRST,
    ConfigKey.GROUP_BY_TYPE,
    ConfigKey.GROUP_BY_EXTENSION,
)


# Default configuration values
DEFAULT_SORTING = {
    ConfigKey.STRATEGY: SortStrategy.ALPHABETICAL.value,
    ConfigKey.REVERSED: False,
    ConfigKey.UPPERCASE_FIRST: False,
    ConfigKey.GROUP_BY_TYPE: True,
    ConfigKey.GROUP_BY_EXTENSION: False,
}

DEFAULT_CONFIG = {
    ConfigKey.ROOT: {
        ConfigKey.SORTING: dict(DEFAULT_SORTING),
        ConfigKey.INTEGRITY: {
            ConfigKey.STRICT: True,
        },
        ConfigKey.LOGGING: {
            "level": "INFO",
            "file": None,
        },
    }
}
