"""
treesort Sorting: Filesystem Events.

Discrete notifications from the filesystem layer. The coordinator translates
each one into a membership change or a rename of a single directory.
"""

from dataclasses import dataclass
from typing import Union

from treesort.core.constants import EntryId
from treesort.sorting.entry import Entry


@dataclass(frozen=True)
class EntryAdded:
    """``entry`` appeared inside directory ``parent``."""

    parent: EntryId
    entry: Entry


@dataclass(frozen=True)
class EntryRemoved:
    """Entry ``entry_id`` disappeared from directory ``parent``."""

    parent: EntryId
    entry_id: EntryId


@dataclass(frozen=True)
class EntryRenamed:
    """Entry ``entry_id`` is now called ``new_name``; its directory is unchanged."""

    entry_id: EntryId
    new_name: str


TreeEvent = Union[EntryAdded, EntryRemoved, EntryRenamed]
