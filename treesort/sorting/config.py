"""
treesort Sorting: Sort Configuration.

SortConfig is an immutable value. Changing sort behaviour means building a
new SortConfig and installing it on the coordinator.
"""

from dataclasses import asdict, dataclass, replace
from typing import Any, Dict, Mapping

from treesort.core.constants import SORT_FLAG_KEYS, ConfigKey, SortStrategy
from treesort.core.validators import ValidationError, validate_sort_settings
from treesort.infrastructure.config_manager import ConfigError


@dataclass(frozen=True)
class SortConfig:
    """
    Sorting configuration.

    Attributes:
        strategy: Primary name ordering
        reversed: Invert the whole combined order
        uppercase_first: Uppercase before lowercase among names equal ignoring case
        group_by_type: Directories before files
        group_by_extension: With group_by_type, files grouped by extension too
    """

    strategy: SortStrategy = SortStrategy.ALPHABETICAL
    reversed: bool = False
    uppercase_first: bool = False
    group_by_type: bool = False
    group_by_extension: bool = False

    def __post_init__(self):
        if not isinstance(self.strategy, SortStrategy):
            raise ConfigError(f"strategy must be a SortStrategy, got {self.strategy!r}")
        for key in SORT_FLAG_KEYS:
            if not isinstance(getattr(self, key), bool):
                raise ConfigError(f"{key} must be a boolean, got {getattr(self, key)!r}")

    @classmethod
    def from_dict(cls, settings: Mapping[str, Any]) -> "SortConfig":
        """
        Build a SortConfig from a configuration mapping.

        Args:
            settings: Mapping with optional keys strategy, reversed,
                      uppercase_first, group_by_type, group_by_extension

        Returns:
            SortConfig; absent keys take the dataclass defaults

        Raises:
            ConfigError: On an unknown strategy, a non-boolean flag or an
                         unknown key

        Example:
            >>> SortConfig.from_dict({"strategy": "natural", "reversed": True}).strategy
            <SortStrategy.NATURAL: 'natural'>
        """
        try:
            normalized = validate_sort_settings(settings)
        except ValidationError as e:
            raise ConfigError(f"Invalid sorting configuration: {e}", e.error_code)
        return cls(**normalized)

    def to_dict(self) -> Dict[str, Any]:
        """Inverse of from_dict()."""
        data = asdict(self)
        data[ConfigKey.STRATEGY] = self.strategy.value
        return data

    def with_changes(self, **changes: Any) -> "SortConfig":
        """Return a copy with some fields replaced."""
        return replace(self, **changes)


DEFAULT_SORT_CONFIG = SortConfig()
