"""treesort Infrastructure Layer.

Services used by the sorting core and the CLI:
- ConfigManager: Hierarchical YAML configuration with hot-reload
- Logger: Structured logging
"""

from .config_manager import ConfigError, ConfigManager, ConfigSource, ConfigValue
from .logger import Logger, LogLevel, get_logger, set_global_logger

__all__ = [
    # Logger exports
    "Logger",
    "LogLevel",
    "get_logger",
    "set_global_logger",
    # ConfigManager exports
    "ConfigSource",
    "ConfigValue",
    "ConfigError",
    "ConfigManager",
]
