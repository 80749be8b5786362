"""
treesort Sorting: Entry Comparator.

Orders entries by a fixed sequence of criteria; the first one that
differs decides:

1. Type grouping (group_by_type): directories before files, then, with
   group_by_extension, files by extension class.
2. Primary strategy on the case-folded name (alphabetical or natural).
3. Case tie-break: at the first character where two case-insensitively
   equal names differ, uppercase first when uppercase_first is set,
   lowercase first otherwise.
4. Exact code-point order of the raw name.

``reversed`` inverts the combined result, grouping included.

Every criterion is expressed as part of one tuple key (sort_key()), so the
order is a lexicographic order over totally ordered components and is
therefore total, antisymmetric and transitive by construction.
"""

from enum import IntEnum
from functools import cmp_to_key
from pathlib import PurePath
from typing import Iterable, List, Sequence, Tuple, Union

from treesort.core.constants import EntryKind, SortStrategy
from treesort.sorting.config import SortConfig
from treesort.sorting.entry import Entry
from treesort.sorting.keys import NO_EXTENSION, SortKey, extract, key_for

_DIGITS = "0123456789"
_DIGIT_RANK = ord("0")

PathLike = Union[str, PurePath]


class Ordering(IntEnum):
    """Result of a comparison."""

    LESS = -1
    EQUAL = 0
    GREATER = 1

    @classmethod
    def of(cls, a, b) -> "Ordering":
        """Order two mutually comparable values."""
        return cls((a > b) - (a < b))

    def reverse(self) -> "Ordering":
        return Ordering(-self.value)


def natural_chunks(name: str) -> Tuple[Tuple[int, int, str, int], ...]:
    """Split a name into comparable chunks for natural ordering.

    Each non-digit character becomes ``(code_point, 0, "", 0)``; each maximal
    run of ASCII digits becomes ``(ord("0"), significant_digits, digits,
    digit_count)`` where ``digits`` is the run without leading zeros. A digit
    run therefore sorts against other characters exactly like a single digit
    would, and against another run by numeric value (fewer significant digits
    first, then digit by digit), then by length, so
    ``"1"`` < ``"01"`` < ``"2"`` < ``"10"``.

    Example:
        >>> natural_chunks("a10")
        ((97, 0, '', 0), (48, 2, '10', 2))
    """
    chunks = []
    i = 0
    length = len(name)
    while i < length:
        char = name[i]
        if char in _DIGITS:
            start = i
            while i < length and name[i] in _DIGITS:
                i += 1
            run = name[start:i]
            digits = run.lstrip("0")
            chunks.append((_DIGIT_RANK, len(digits), digits, len(run)))
        else:
            chunks.append((ord(char), 0, "", 0))
            i += 1
    return tuple(chunks)


def _case_key(raw_name: str, uppercase_first: bool) -> Tuple[Tuple[int, int], ...]:
    if uppercase_first:
        return tuple((0 if c.isupper() else 1, ord(c)) for c in raw_name)
    return tuple((0 if c.islower() else 1, ord(c)) for c in raw_name)


def key_from_sort_key(key: SortKey, config: SortConfig) -> tuple:
    """Build the comparison tuple of an extracted SortKey under config.

    The tuple doesn't account for ``config.reversed``; callers invert.
    """
    if config.group_by_type:
        group_class = NO_EXTENSION
        if config.group_by_extension and key.kind_class == EntryKind.FILE:
            group_class = key.type_class
        group = (key.kind_class, group_class)
    else:
        group = ()

    if config.strategy is SortStrategy.NATURAL:
        primary = natural_chunks(key.comparable_name)
    else:
        primary = key.comparable_name

    return (group, primary, _case_key(key.raw_name, config.uppercase_first), key.raw_name)


def sort_key(entry: Entry, config: SortConfig) -> tuple:
    """Comparison tuple of an entry under config (reversal not applied)."""
    return key_from_sort_key(extract(entry), config)


def compare(a: Entry, b: Entry, config: SortConfig) -> Ordering:
    """
    Compare two entries under a sort configuration.

    Args:
        a: First entry
        b: Second entry
        config: Active configuration

    Returns:
        Ordering.LESS if a sorts before b, GREATER if after, EQUAL if the
        entries are indistinguishable by every criterion
    """
    result = Ordering.of(sort_key(a, config), sort_key(b, config))
    return result.reverse() if config.reversed else result


def sort_entries(entries: Iterable[Entry], config: SortConfig) -> List[Entry]:
    """Return entries sorted by compare() under config.

    Uses a key function, so cost is O(n log n) with one key extraction per
    entry. Entries equal under every criterion (same kind and raw name) are
    ordered by identity, so the result never depends on input order.
    """
    return sorted(
        entries,
        key=lambda entry: (sort_key(entry, config), entry.id),
        reverse=config.reversed,
    )


def _component_keys(path: PathLike, is_file: bool, config: SortConfig) -> List[tuple]:
    parts = PurePath(path).parts
    keys = []
    for index, part in enumerate(parts):
        last = index == len(parts) - 1
        kind = EntryKind.FILE if (last and is_file) else EntryKind.DIRECTORY
        keys.append(key_from_sort_key(key_for(part, kind), config))
    return keys


def compare_paths(
    a: Tuple[PathLike, bool],
    b: Tuple[PathLike, bool],
    config: SortConfig,
) -> Ordering:
    """
    Compare two relative paths component by component.

    Every component but the last is a directory; the last one is a file when
    its flag says so. Components are ordered like entries of one directory
    (reversal applies per component) and a path sorts right before its own
    descendants, which makes a sorted path listing identical to a
    depth-first walk of the sorted tree.

    Args:
        a: (path, is_file) pair
        b: (path, is_file) pair
        config: Active configuration

    Returns:
        Ordering of a relative to b

    Example:
        >>> cfg = SortConfig(group_by_type=True)
        >>> compare_paths(("src", False), ("src/main.py", True), cfg)
        <Ordering.LESS: -1>
    """
    keys_a = _component_keys(a[0], a[1], config)
    keys_b = _component_keys(b[0], b[1], config)

    for key_a, key_b in zip(keys_a, keys_b):
        result = Ordering.of(key_a, key_b)
        if result is not Ordering.EQUAL:
            return result.reverse() if config.reversed else result

    return Ordering.of(len(keys_a), len(keys_b))


def sort_paths(paths: Sequence[Tuple[PathLike, bool]], config: SortConfig) -> List[Tuple[PathLike, bool]]:
    """Return (path, is_file) pairs sorted by compare_paths()."""
    return sorted(paths, key=cmp_to_key(lambda a, b: compare_paths(a, b, config)))
