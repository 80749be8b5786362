"""
treesort Sorting: Sort Key Extraction.

Projects an Entry onto the attributes the comparator orders by. Extraction
is pure and total: every entry, including ones with empty or odd names,
has a key.
"""

from dataclasses import dataclass

from treesort.core.constants import EntryKind
from treesort.sorting.entry import Entry, split_extension

# Sorts before every real extension
NO_EXTENSION = ""


@dataclass(frozen=True)
class SortKey:
    """
    Comparable attributes of one entry.

    Attributes:
        kind_class: 0 for directories, 1 for files
        comparable_name: Case-folded name used by the primary strategy
        raw_name: Original name, used for the case and exact tie-breaks
        extension: Normalized extension, or NO_EXTENSION
        type_class: Extension grouping class (see file_type_class())
    """

    kind_class: int
    comparable_name: str
    raw_name: str
    extension: str
    type_class: str


def file_type_class(name: str) -> str:
    """Return the grouping class of a file name.

    Normally the normalized extension. Dotfiles without a further extension
    are classed by their name minus the dot, so ``.gitignore`` groups as
    ``gitignore`` rather than with every other extensionless file. Other
    extensionless files (``Makefile``) share the empty class, and a dotfile
    with an extension (``.eslintrc.json``) is classed by that extension.

    Examples:
        >>> file_type_class("main.PY")
        'py'
        >>> file_type_class(".gitignore")
        'gitignore'
        >>> file_type_class("Makefile")
        ''
    """
    ext = split_extension(name)
    if ext:
        return ext
    if name.startswith(".") and len(name) > 1:
        return name[1:].lower()
    return NO_EXTENSION


def key_for(name: str, kind: EntryKind) -> SortKey:
    """Derive the sort key of a bare name of the given kind."""
    if kind is EntryKind.DIRECTORY:
        extension = NO_EXTENSION
        type_class = NO_EXTENSION
    else:
        extension = split_extension(name)
        type_class = file_type_class(name)

    return SortKey(
        kind_class=int(kind),
        comparable_name=name.casefold(),
        raw_name=name,
        extension=extension,
        type_class=type_class,
    )


def extract(entry: Entry) -> SortKey:
    """Derive the sort key of an entry."""
    return key_for(entry.name, entry.kind)
