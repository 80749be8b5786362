"""
treesort Sorting - Directory entry ordering.

Public API:
-----------

Data model:
    Entry: Immutable file or directory entry
    DirectoryNode: Directory entry plus its children
    EntryAdded, EntryRemoved, EntryRenamed: Filesystem events

Ordering:
    SortConfig: Immutable sort configuration
    SortKey, extract: Per-entry sort attributes
    Ordering, compare, sort_entries: Entry comparator
    compare_paths, sort_paths: Component-wise path ordering

Coordination:
    TreeSortCoordinator: Keeps every directory of a live tree sorted
    IntegrityViolation: Raised on inconsistent changes in strict mode

Usage Example:
--------------

    from treesort.sorting import Entry, SortConfig, TreeSortCoordinator

    root = Entry.directory("project")
    tree = TreeSortCoordinator(root, SortConfig(group_by_type=True))
    tree.on_entries_changed(root.id, added=[Entry.file("README.md"), Entry.directory("src")])

    tree.children_of(root.id)       # (src, README.md)
    tree.install_config(SortConfig(group_by_type=True, reversed=True))
    tree.children_of(root.id)       # (README.md, src)
"""

from treesort.sorting.comparator import Ordering, compare, compare_paths, sort_entries, sort_key, sort_paths
from treesort.sorting.config import DEFAULT_SORT_CONFIG, SortConfig
from treesort.sorting.coordinator import IntegrityViolation, TreeSortCoordinator
from treesort.sorting.entry import DirectoryNode, Entry
from treesort.sorting.events import EntryAdded, EntryRemoved, EntryRenamed, TreeEvent
from treesort.sorting.keys import NO_EXTENSION, SortKey, extract

__all__ = [
    # Data model
    "Entry",
    "DirectoryNode",
    "EntryAdded",
    "EntryRemoved",
    "EntryRenamed",
    "TreeEvent",
    # Ordering
    "SortConfig",
    "DEFAULT_SORT_CONFIG",
    "SortKey",
    "NO_EXTENSION",
    "extract",
    "Ordering",
    "compare",
    "sort_key",
    "sort_entries",
    "compare_paths",
    "sort_paths",
    # Coordination
    "TreeSortCoordinator",
    "IntegrityViolation",
]
