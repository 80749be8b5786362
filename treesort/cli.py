#!/usr/bin/env python3
"""Command-line interface for treesort.

Prints a directory tree in the order a project panel would show it:
- Argument parsing and validation
- Configuration file loading (YAML) with command-line overrides
- Logging setup
- Tree or flat path output

Example:
    $ treesort ~/src/project --group-by-type --strategy natural
    $ treesort ~/src/project -c treesort.yaml --reversed --paths
"""

import argparse
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from treesort.core.constants import TREESORT_VERSION, ConfigKey
from treesort.core.validators import ValidationError, validate_log_level
from treesort.infrastructure.config_manager import ConfigError, ConfigManager, ConfigSource
from treesort.infrastructure.logger import Logger, set_global_logger
from treesort.scanner import scan_tree
from treesort.sorting.coordinator import IntegrityViolation, TreeSortCoordinator

DESCRIPTION = "treesort - print a directory tree in project-panel order"


class CLIError(Exception):
    """Exception raised for CLI-related errors."""

    pass


def parse_arguments(args: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Args:
        args: Argument list to parse (defaults to sys.argv[1:])

    Returns:
        Parsed arguments namespace

    Raises:
        SystemExit: On invalid arguments or --help/--version
        CLIError: If the path or config file is unusable
    """
    parser = argparse.ArgumentParser(
        prog="treesort",
        description=DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Directories first, case-insensitive alphabetical
  treesort ~/src/project --group-by-type

  # Numbers in names compared by value, files grouped by extension
  treesort ~/src/project --strategy natural --group-by-type --group-by-extension

  # Settings from a configuration file, flat listing
  treesort ~/src/project --config treesort.yaml --paths
        """,
    )

    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"%(prog)s {TREESORT_VERSION}",
    )

    parser.add_argument("path", metavar="PATH", type=str, help="Directory to list")

    parser.add_argument(
        "-c",
        "--config",
        metavar="FILE",
        type=str,
        help="Configuration file path (YAML format)",
    )

    sort_group = parser.add_argument_group("sorting options (override the configuration file)")

    sort_group.add_argument(
        "--strategy",
        metavar="NAME",
        type=str,
        help="Name ordering: alphabetical or natural",
    )
    sort_group.add_argument(
        "--reversed",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Invert the whole order",
    )
    sort_group.add_argument(
        "--uppercase-first",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Uppercase before lowercase when names differ only by case",
    )
    sort_group.add_argument(
        "--group-by-type",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Directories before files",
    )
    sort_group.add_argument(
        "--group-by-extension",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="With --group-by-type, group files by extension",
    )

    output_group = parser.add_argument_group("output options")

    output_group.add_argument(
        "--paths",
        action="store_true",
        help="Print relative paths instead of an indented tree",
    )
    output_group.add_argument(
        "--no-hidden",
        action="store_true",
        help="Skip names starting with a dot",
    )
    output_group.add_argument(
        "--max-depth",
        metavar="N",
        type=int,
        help="Deepest directory level to list (0: top level only)",
    )

    log_group = parser.add_argument_group("logging options")

    log_group.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    parsed = parser.parse_args(args)
    _validate_arguments(parsed)
    return parsed


def _validate_arguments(args: argparse.Namespace) -> None:
    """
    Validate parsed arguments.

    Raises:
        CLIError: If validation fails
    """
    path = Path(args.path)
    if not path.exists():
        raise CLIError(f"Path does not exist: {args.path}")
    if not path.is_dir():
        raise CLIError(f"Path is not a directory: {args.path}")

    if args.config:
        config_path = Path(args.config)
        if not config_path.exists():
            raise CLIError(f"Configuration file does not exist: {args.config}")
        if not config_path.is_file():
            raise CLIError(f"Configuration path is not a file: {args.config}")

    if args.max_depth is not None and args.max_depth < 0:
        raise CLIError(f"--max-depth must not be negative: {args.max_depth}")


def build_config_from_args(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Build the sorting overrides given on the command line.

    Only options that were actually passed appear in the result.

    Args:
        args: Parsed arguments namespace

    Returns:
        Configuration dictionary for ConfigManager
    """
    sorting: Dict[str, Any] = {}
    if args.strategy is not None:
        sorting[ConfigKey.STRATEGY] = args.strategy

    for key in (
        ConfigKey.REVERSED,
        ConfigKey.UPPERCASE_FIRST,
        ConfigKey.GROUP_BY_TYPE,
        ConfigKey.GROUP_BY_EXTENSION,
    ):
        value = getattr(args, key)
        if value is not None:
            sorting[key] = value

    config: Dict[str, Any] = {}
    if sorting:
        config[ConfigKey.SORTING] = sorting
    if args.debug:
        config[ConfigKey.LOGGING] = {"level": "DEBUG"}
    return {ConfigKey.ROOT: config} if config else {}


def load_configuration(args: argparse.Namespace, logger: Optional[Logger] = None) -> ConfigManager:
    """
    Assemble configuration from defaults, file, environment and arguments.

    Raises:
        CLIError: If the configuration file cannot be loaded
    """
    manager = ConfigManager(logger=logger)

    if args.config:
        try:
            manager.load_file(args.config)
        except ConfigError as e:
            raise CLIError(e.message)

    overrides = build_config_from_args(args)
    if overrides:
        manager.load_dict(overrides, ConfigSource.CLI_ARGS)

    return manager


def setup_logging(args: argparse.Namespace, manager: ConfigManager) -> Logger:
    """
    Setup logging based on arguments and configuration.

    Args:
        args: Parsed arguments namespace
        manager: Loaded configuration

    Returns:
        Configured logger, also installed as the global logger

    Raises:
        CLIError: If the configured log level is unknown
    """
    log_level = "DEBUG" if args.debug else manager.get("treesort.logging.level", "INFO")
    try:
        log_level = validate_log_level(log_level)
    except ValidationError as e:
        raise CLIError(str(e))
    log_file = manager.get("treesort.logging.file")

    logger = Logger("treesort", level=log_level)
    if log_file:
        logger.add_handler(logger.create_file_handler(log_file))

    set_global_logger(logger)
    return logger


def render_tree(tree: TreeSortCoordinator, show_paths: bool = False) -> List[str]:
    """
    Render a sorted tree as text lines.

    Args:
        tree: Coordinator to render
        show_paths: Relative paths (one per line) instead of an indented tree

    Returns:
        Output lines; directories carry a trailing "/"
    """
    lines: List[str] = []
    if not show_paths:
        lines.append(f"{tree.root.name}/")

    parents: List[str] = []
    for depth, entry in tree.walk():
        del parents[depth:]
        suffix = "/" if entry.is_dir else ""
        if show_paths:
            lines.append("/".join(parents + [entry.name]) + suffix)
        else:
            lines.append(f"{'  ' * (depth + 1)}{entry.name}{suffix}")
        if entry.is_dir:
            parents.append(entry.name)

    return lines


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Returns:
        Process exit code
    """
    try:
        args = parse_arguments(argv)

        manager = load_configuration(args)
        logger = setup_logging(args, manager)

        try:
            sort_config = manager.sort_config()
            strict = manager.strict_integrity()
        except ConfigError as e:
            raise CLIError(e.message)

        tree = scan_tree(
            args.path,
            sort_config,
            include_hidden=not args.no_hidden,
            max_depth=args.max_depth,
            strict=strict,
            logger=logger,
        )

        for line in render_tree(tree, show_paths=args.paths):
            print(line)
        return 0

    except CLIError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    except IntegrityViolation as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1

    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
