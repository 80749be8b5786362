"""
treesort Scanner: Populate a tree from a real directory.

Stands in for the filesystem layer when the tree should mirror an actual
path on disk. Each directory's children are delivered to the coordinator as
one membership change, the same way a filesystem layer would report a
freshly listed directory.
"""

import os
from pathlib import Path
from typing import List, Optional, Union

from treesort.infrastructure.logger import Logger, get_logger
from treesort.sorting.config import SortConfig
from treesort.sorting.coordinator import TreeSortCoordinator
from treesort.sorting.entry import Entry


def scan_tree(
    root_path: Union[str, Path],
    config: Optional[SortConfig] = None,
    include_hidden: bool = True,
    max_depth: Optional[int] = None,
    strict: bool = __debug__,
    logger: Optional[Logger] = None,
) -> TreeSortCoordinator:
    """
    Build a coordinator mirroring a directory on disk.

    Args:
        root_path: Directory to scan
        config: Sort configuration for the coordinator
        include_hidden: Include names starting with a dot
        max_depth: Deepest directory level to list (None: unlimited,
                   0: only the root's children)
        strict: Passed to the coordinator
        logger: Logger for skipped entries

    Returns:
        TreeSortCoordinator whose root is root_path

    Raises:
        ValueError: If root_path doesn't exist or isn't a directory
    """
    logger = logger or get_logger()
    path = Path(root_path)
    if not path.exists():
        raise ValueError(f"Path does not exist: {root_path}")
    if not path.is_dir():
        raise ValueError(f"Path is not a directory: {root_path}")

    root = Entry.from_path(str(path.resolve()))
    tree = TreeSortCoordinator(root, config, strict=strict, logger=logger)

    pending = [(path, root, 0)]
    while pending:
        dir_path, dir_entry, depth = pending.pop()
        children: List[Entry] = []
        subdirs = []

        try:
            with os.scandir(dir_path) as listing:
                for item in listing:
                    if not include_hidden and item.name.startswith("."):
                        continue
                    try:
                        child = Entry.from_path(item.path, parent=dir_entry.id)
                    except OSError as e:
                        # Dangling symlinks and entries removed mid-scan
                        logger.debug("Skipping unreadable entry", path=item.path, error=str(e))
                        continue
                    children.append(child)
                    if child.is_dir and not item.is_symlink():
                        subdirs.append((Path(item.path), child))
        except OSError as e:
            logger.warning("Cannot list directory", path=str(dir_path), error=str(e))
            continue

        tree.on_entries_changed(dir_entry.id, added=children)

        if max_depth is None or depth < max_depth:
            pending.extend((sub_path, sub_entry, depth + 1) for sub_path, sub_entry in subdirs)

    logger.debug("Scanned tree", root=str(path), **tree.get_stats())
    return tree
