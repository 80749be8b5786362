"""
treesort Sorting: Tree Entries.

This module provides the data model the sorting core works on:
- Entry: Immutable description of one file or directory in the tree
- DirectoryNode: A directory entry together with its children

Entries carry an integer identity that survives renames. The tree owns
entries top-down; the ``parent`` field is a back-reference used for
traversal only.
"""

import itertools
import os
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional

from treesort.core.constants import EntryId, EntryKind

_id_counter = itertools.count(1)


def next_entry_id() -> EntryId:
    """Allocate a process-unique entry identity."""
    return EntryId(next(_id_counter))


def split_extension(name: str) -> str:
    """Return the normalized extension of a file name.

    The extension is the text after the last dot, lower-cased. A leading dot
    (hidden file) doesn't start an extension, and neither does a trailing one.

    Examples:
        >>> split_extension("Report.PDF")
        'pdf'
        >>> split_extension("archive.tar.gz")
        'gz'
        >>> split_extension(".gitignore")
        ''
    """
    _, ext = os.path.splitext(name)
    return ext[1:].lower()


@dataclass(frozen=True)
class Entry:
    """
    Immutable tree entry.

    Attributes:
        id: Identity, stable across renames
        name: Display name (e.g., "main.py")
        kind: EntryKind.DIRECTORY or EntryKind.FILE
        parent: Identity of the owning directory, None for the root
    """

    id: EntryId
    name: str
    kind: EntryKind
    parent: Optional[EntryId] = None

    @classmethod
    def directory(cls, name: str, parent: Optional[EntryId] = None) -> "Entry":
        """Create a directory entry with a fresh identity."""
        return cls(id=next_entry_id(), name=name, kind=EntryKind.DIRECTORY, parent=parent)

    @classmethod
    def file(cls, name: str, parent: Optional[EntryId] = None) -> "Entry":
        """Create a file entry with a fresh identity."""
        return cls(id=next_entry_id(), name=name, kind=EntryKind.FILE, parent=parent)

    @classmethod
    def from_path(cls, real_path: str, parent: Optional[EntryId] = None) -> "Entry":
        """
        Create an Entry from a filesystem path.

        Symlinks are followed, so a link to a directory is a directory.

        Args:
            real_path: Path to the file or directory
            parent: Identity of the owning directory

        Returns:
            Entry named after the last path component

        Raises:
            FileNotFoundError: If the path doesn't exist
            OSError: If stat() fails for other reasons
        """
        mode = os.stat(real_path).st_mode
        name = os.path.basename(os.path.normpath(real_path))
        return cls(id=next_entry_id(), name=name, kind=EntryKind.from_mode(mode), parent=parent)

    @property
    def is_dir(self) -> bool:
        return self.kind is EntryKind.DIRECTORY

    @property
    def is_file(self) -> bool:
        return self.kind is EntryKind.FILE

    @property
    def extension(self) -> Optional[str]:
        """Normalized extension for files, None for directories and extensionless files."""
        if self.is_dir:
            return None
        return split_extension(self.name) or None

    def renamed(self, new_name: str) -> "Entry":
        """Return a copy of this entry with a new name and the same identity."""
        return replace(self, name=new_name)

    def reparented(self, parent: EntryId) -> "Entry":
        return replace(self, parent=parent)


@dataclass
class DirectoryNode:
    """
    A directory entry plus its children.

    ``children`` is the membership; ``order`` is the sorted sequence derived
    from it and is only meaningful while ``sorted_generation`` matches the
    coordinator's config generation (-1 means never sorted).
    """

    entry: Entry
    children: Dict[EntryId, Entry] = field(default_factory=dict)
    order: List[EntryId] = field(default_factory=list)
    sorted_generation: int = -1

    @property
    def id(self) -> EntryId:
        return self.entry.id

    def is_sorted_for(self, generation: int) -> bool:
        return self.sorted_generation == generation
