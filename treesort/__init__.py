"""treesort - Configurable directory entry ordering for file-tree views."""

from treesort.core.constants import TREESORT_VERSION as __version__
from treesort.core.constants import EntryKind, SortStrategy
from treesort.sorting import (
    Entry,
    IntegrityViolation,
    Ordering,
    SortConfig,
    TreeSortCoordinator,
    compare,
    sort_entries,
)

__all__ = [
    "__version__",
    "EntryKind",
    "SortStrategy",
    "Entry",
    "SortConfig",
    "Ordering",
    "compare",
    "sort_entries",
    "TreeSortCoordinator",
    "IntegrityViolation",
]
