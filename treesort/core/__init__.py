"""treesort Core - Shared constants and validators.

Import specific names from submodules:
    from treesort.core.constants import EntryKind, ErrorCode, SortStrategy
    from treesort.core.validators import ValidationError, validate_sort_settings
"""

from treesort.core import constants, validators

__all__ = [
    "constants",
    "validators",
]
