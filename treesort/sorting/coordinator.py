"""
treesort Sorting: Tree Sort Coordinator.

The coordinator owns a live tree of entries and keeps, for every directory,
a child ordering consistent with the active SortConfig:

- Membership changes re-sort exactly the affected directory, eagerly.
- Installing a new SortConfig bumps a generation counter; each directory is
  re-sorted lazily, on the next read of its children.

Every read and write runs under one re-entrant lock, so a reader never sees
a directory ordered partly by an old config and partly by a new one.
Listeners are told which directory's order changed (the root after a
config install, meaning the whole tree) once the lock has been released.
"""

import threading
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Tuple, Union

from treesort.core.constants import EntryId, ErrorCode
from treesort.infrastructure.config_manager import ConfigError, ConfigManager
from treesort.infrastructure.logger import Logger, get_logger
from treesort.sorting.comparator import sort_entries
from treesort.sorting.config import SortConfig
from treesort.sorting.entry import DirectoryNode, Entry
from treesort.sorting.events import EntryAdded, EntryRemoved, EntryRenamed, TreeEvent

EntryRef = Union[EntryId, Entry]
OrderListener = Callable[[EntryId], None]


class IntegrityViolation(Exception):
    """A change referenced a directory or entry the tree doesn't hold as expected."""

    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.NOT_FOUND):
        super().__init__(message)
        self.message = message
        self.error_code = error_code


def _entry_id(ref: EntryRef) -> EntryId:
    return ref.id if isinstance(ref, Entry) else ref


class TreeSortCoordinator:
    """
    Maintains sorted child orderings for a mutable entry tree.

    Attributes:
        strict: Raise IntegrityViolation on inconsistent changes instead of
                logging and skipping them

    Example:
        >>> root = Entry.directory("project")
        >>> tree = TreeSortCoordinator(root, SortConfig(group_by_type=True))
        >>> tree.on_entries_changed(root.id, added=[Entry.file("b.txt"), Entry.directory("a")])
        >>> [e.name for e in tree.children_of(root.id)]
        ['a', 'b.txt']
    """

    def __init__(
        self,
        root: Entry,
        config: Optional[SortConfig] = None,
        strict: bool = __debug__,
        logger: Optional[Logger] = None,
    ):
        """
        Initialize the coordinator with an empty root directory.

        Args:
            root: Root directory entry
            config: Initial sort configuration (defaults to SortConfig())
            strict: Raise on integrity violations (default: True unless
                    Python runs with -O)
            logger: Logger instance (default: global logger)

        Raises:
            ValueError: If root is not a directory
        """
        if not root.is_dir:
            raise ValueError(f"Tree root must be a directory: {root.name!r}")

        self.strict = strict
        self._logger = logger or get_logger()
        self._lock = threading.RLock()
        self._config = config if config is not None else SortConfig()
        self._generation = 0
        self._root = root
        self._entries: Dict[EntryId, Entry] = {root.id: root}
        self._directories: Dict[EntryId, DirectoryNode] = {root.id: DirectoryNode(root)}
        self._listeners: List[OrderListener] = []

    @property
    def root(self) -> Entry:
        with self._lock:
            return self._root

    @property
    def config(self) -> SortConfig:
        with self._lock:
            return self._config

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def install_config(self, new_config: SortConfig) -> bool:
        """
        Replace the active sort configuration.

        Every directory becomes stale and is re-sorted on its next read.
        Installing a config equal to the active one changes nothing.

        Args:
            new_config: Configuration to install

        Returns:
            True if the configuration changed

        Raises:
            TypeError: If new_config is not a SortConfig
        """
        if not isinstance(new_config, SortConfig):
            raise TypeError(f"Expected SortConfig, got {type(new_config).__name__}")

        with self._lock:
            if new_config == self._config:
                self._logger.debug("Sort configuration unchanged")
                return False

            self._config = new_config
            self._generation += 1
            root_id = self._root.id
            self._logger.debug(
                "Installed sort configuration",
                generation=self._generation,
                **new_config.to_dict(),
            )

        self._notify(root_id)
        return True

    def bind_config_manager(self, manager: ConfigManager) -> Callable[[dict], None]:
        """
        Follow the sorting section of a ConfigManager.

        Installs the manager's current sort configuration and re-installs it
        whenever the manager reports a change. An invalid change keeps the
        active configuration and logs a warning.

        Args:
            manager: Configuration manager to follow

        Returns:
            The registered watcher, for ConfigManager.remove_watcher()

        Raises:
            ConfigError: If the manager's current sorting section is invalid
        """
        self.install_config(manager.sort_config())

        def _on_config_change(_merged: dict) -> None:
            try:
                new_config = manager.sort_config()
            except ConfigError as e:
                self._logger.warning("Keeping active sort configuration", error=e.message)
                return
            self.install_config(new_config)

        manager.add_watcher(_on_config_change)
        return _on_config_change

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def on_entries_changed(
        self,
        directory: EntryRef,
        added: Iterable[Entry] = (),
        removed: Iterable[EntryRef] = (),
    ) -> None:
        """
        Apply membership changes to one directory and re-sort it.

        Removals are applied before additions. Removing a directory removes
        its whole subtree. Added entries whose ``parent`` is None are adopted
        by ``directory``. Sibling and ancestor orderings are not touched.

        Args:
            directory: Directory whose children changed
            added: New child entries
            removed: Children (entries or identities) that disappeared

        Raises:
            IntegrityViolation: In strict mode, if the directory is unknown,
                                a removed entry isn't its child, an added
                                identity already exists, or an added entry
                                names another parent
        """
        with self._lock:
            node = self._directory_node(directory)
            if node is None:
                return

            try:
                self._apply_membership(node, added, removed)
            finally:
                # Order must match membership even when a strict check raised halfway
                self._sort_directory(node)
            directory_id = node.id

        self._notify(directory_id)

    def _apply_membership(
        self,
        node: DirectoryNode,
        added: Iterable[Entry],
        removed: Iterable[EntryRef],
    ) -> None:
        for ref in removed:
            entry_id = _entry_id(ref)
            if entry_id not in node.children:
                self._violation(
                    "Removed entry is not a child of the directory",
                    ErrorCode.NOT_FOUND,
                    directory=node.id,
                    entry=entry_id,
                )
                continue
            del node.children[entry_id]
            self._forget_subtree(entry_id)

        for entry in added:
            if entry.id in self._entries:
                self._violation(
                    "Added entry is already in the tree",
                    ErrorCode.CONFLICT,
                    directory=node.id,
                    entry=entry.id,
                )
                continue
            if entry.parent is None:
                entry = entry.reparented(node.id)
            elif entry.parent != node.id:
                self._violation(
                    "Added entry belongs to another directory",
                    ErrorCode.INVALID_INPUT,
                    directory=node.id,
                    entry=entry.id,
                    parent=entry.parent,
                )
                continue

            self._entries[entry.id] = entry
            node.children[entry.id] = entry
            if entry.is_dir:
                self._directories[entry.id] = DirectoryNode(entry)

    def rename_entry(self, entry: EntryRef, new_name: str) -> None:
        """
        Rename an entry in place and re-sort its directory only.

        Args:
            entry: Entry (or identity) to rename
            new_name: New display name

        Raises:
            IntegrityViolation: In strict mode, if the entry is unknown
        """
        entry_id = _entry_id(entry)
        with self._lock:
            current = self._entries.get(entry_id)
            if current is None:
                self._violation("Renamed entry is not in the tree", ErrorCode.NOT_FOUND, entry=entry_id)
                return

            renamed = current.renamed(new_name)
            self._entries[entry_id] = renamed
            if entry_id in self._directories:
                self._directories[entry_id].entry = renamed

            if current.parent is None:
                self._root = renamed
                changed = entry_id
            else:
                parent = self._directories[current.parent]
                parent.children[entry_id] = renamed
                self._sort_directory(parent)
                changed = parent.id

        self._notify(changed)

    def apply_event(self, event: TreeEvent) -> None:
        """
        Apply one filesystem event.

        Args:
            event: EntryAdded, EntryRemoved or EntryRenamed

        Raises:
            TypeError: For any other object
        """
        if isinstance(event, EntryAdded):
            self.on_entries_changed(event.parent, added=[event.entry])
        elif isinstance(event, EntryRemoved):
            self.on_entries_changed(event.parent, removed=[event.entry_id])
        elif isinstance(event, EntryRenamed):
            self.rename_entry(event.entry_id, event.new_name)
        else:
            raise TypeError(f"Unsupported tree event: {type(event).__name__}")

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def children_of(self, directory: EntryRef) -> Tuple[Entry, ...]:
        """
        Return a directory's children in sorted order.

        Args:
            directory: Directory entry or identity

        Returns:
            Sorted children; empty if the directory is unknown and strict
            mode is off

        Raises:
            IntegrityViolation: In strict mode, if the directory is unknown
        """
        with self._lock:
            node = self._directory_node(directory)
            if node is None:
                return ()
            return self._ordered_children(node)

    def walk(self, directory: Optional[EntryRef] = None) -> Iterator[Tuple[int, Entry]]:
        """
        Iterate a subtree depth-first in sorted order.

        The whole traversal is computed under the lock, so it reflects a
        single configuration.

        Args:
            directory: Start directory (default: root); not itself yielded

        Yields:
            (depth, entry) pairs, depth 0 for the start directory's children
        """
        with self._lock:
            start = self._directory_node(directory if directory is not None else self._root.id)
            if start is None:
                return
            visited: List[Tuple[int, Entry]] = []
            stack = [(0, child) for child in reversed(self._ordered_children(start))]
            while stack:
                depth, entry = stack.pop()
                visited.append((depth, entry))
                if entry.is_dir:
                    children = self._ordered_children(self._directories[entry.id])
                    stack.extend((depth + 1, child) for child in reversed(children))

        yield from visited

    def get_entry(self, entry_id: EntryId) -> Optional[Entry]:
        with self._lock:
            return self._entries.get(entry_id)

    def __contains__(self, ref: object) -> bool:
        if not isinstance(ref, (int, Entry)):
            return False
        with self._lock:
            return _entry_id(ref) in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get_stats(self) -> Dict[str, int]:
        """
        Get statistics about the tree.

        Returns:
            Dictionary with:
            - directory_count: Directories including the root
            - file_count: Files
            - stale_directory_count: Directories awaiting a lazy re-sort
            - generation: Number of effective config installs
        """
        with self._lock:
            stale = sum(
                1 for node in self._directories.values() if not node.is_sorted_for(self._generation)
            )
            return {
                "directory_count": len(self._directories),
                "file_count": len(self._entries) - len(self._directories),
                "stale_directory_count": stale,
                "generation": self._generation,
            }

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def add_listener(self, listener: OrderListener) -> None:
        """Register a callback receiving the identity of each re-ordered directory."""
        with self._lock:
            self._listeners.append(listener)

    def remove_listener(self, listener: OrderListener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def _notify(self, directory_id: EntryId) -> None:
        with self._lock:
            listeners = list(self._listeners)

        for listener in listeners:
            try:
                listener(directory_id)
            except Exception as e:
                self._logger.exception("Order listener failed", e, directory=directory_id)

    # ------------------------------------------------------------------
    # Internals (callers hold the lock)
    # ------------------------------------------------------------------

    def _directory_node(self, directory: EntryRef) -> Optional[DirectoryNode]:
        directory_id = _entry_id(directory)
        node = self._directories.get(directory_id)
        if node is not None:
            return node

        if directory_id in self._entries:
            self._violation("Entry is not a directory", ErrorCode.INVALID_INPUT, directory=directory_id)
        else:
            self._violation("Directory is not in the tree", ErrorCode.NOT_FOUND, directory=directory_id)
        return None

    def _ordered_children(self, node: DirectoryNode) -> Tuple[Entry, ...]:
        if not node.is_sorted_for(self._generation):
            self._sort_directory(node)
        return tuple(node.children[entry_id] for entry_id in node.order)

    def _sort_directory(self, node: DirectoryNode) -> None:
        ordered = sort_entries(node.children.values(), self._config)
        node.order = [entry.id for entry in ordered]
        node.sorted_generation = self._generation
        self._logger.debug("Sorted directory", directory=node.id, children=len(node.order))

    def _forget_subtree(self, entry_id: EntryId) -> None:
        pending = [entry_id]
        while pending:
            current = pending.pop()
            self._entries.pop(current, None)
            node = self._directories.pop(current, None)
            if node is not None:
                pending.extend(node.children)

    def _violation(self, message: str, error_code: ErrorCode, **context) -> None:
        if self.strict:
            details = " ".join(f"{k}={v}" for k, v in context.items())
            raise IntegrityViolation(f"{message} ({details})", error_code)
        self._logger.warning(f"Integrity violation: {message}", code=error_code.name, **context)
