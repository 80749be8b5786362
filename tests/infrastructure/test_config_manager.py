#!/usr/bin/env python3
"""Tests for the ConfigManager module."""

import os
from unittest.mock import MagicMock

import pytest
import yaml

from treesort.core.constants import ErrorCode, SortStrategy
from treesort.infrastructure.config_manager import (
    ConfigError,
    ConfigManager,
    ConfigSource,
    ConfigValue,
)
from treesort.sorting.config import SortConfig


def _bump_mtime(path, seconds=10):
    stat = os.stat(path)
    os.utime(path, (stat.st_atime + seconds, stat.st_mtime + seconds))


class TestConfigSource:
    """Tests for ConfigSource enum."""

    def test_precedence_order(self):
        sources = [
            ConfigSource.COMPILED_DEFAULTS,
            ConfigSource.SYSTEM_CONFIG,
            ConfigSource.USER_CONFIG,
            ConfigSource.ENVIRONMENT,
            ConfigSource.CLI_ARGS,
            ConfigSource.RUNTIME,
        ]
        for lower, higher in zip(sources, sources[1:]):
            assert lower.value < higher.value


class TestConfigValue:
    """Tests for ConfigValue dataclass."""

    def test_timestamp_default(self):
        value = ConfigValue(value=42, source=ConfigSource.RUNTIME)
        assert value.value == 42
        assert value.timestamp > 0


class TestConfigError:
    """Tests for ConfigError exception."""

    def test_defaults(self):
        error = ConfigError("Test error")
        assert error.message == "Test error"
        assert error.error_code == ErrorCode.INVALID_INPUT
        assert str(error) == "Test error"


class TestDefaults:
    """Tests for compiled defaults."""

    def test_default_sorting(self, mock_logger):
        config = ConfigManager(logger=mock_logger)
        assert config.get("treesort.sorting.strategy") == "alphabetical"
        assert config.get("treesort.sorting.group_by_type") is True

    def test_default_sort_config(self, mock_logger):
        config = ConfigManager(logger=mock_logger)
        assert config.sort_config() == SortConfig(group_by_type=True)

    def test_missing_key_returns_default(self, mock_logger):
        config = ConfigManager(logger=mock_logger)
        assert config.get("treesort.nothing.here", "fallback") == "fallback"

    def test_defaults_not_shared_between_instances(self, mock_logger):
        first = ConfigManager(logger=mock_logger)
        first.get_all()["treesort"]["sorting"]["strategy"] = "mutated"
        second = ConfigManager(logger=mock_logger)
        assert second.get("treesort.sorting.strategy") == "alphabetical"


class TestStrictIntegrity:
    """Tests for the integrity.strict flag."""

    def test_default_is_strict(self, mock_logger):
        assert ConfigManager(logger=mock_logger).strict_integrity() is True

    def test_boolean_value(self, mock_logger):
        config = ConfigManager(logger=mock_logger)
        config.load_dict({"treesort": {"integrity": {"strict": False}}})
        assert config.strict_integrity() is False

    @pytest.mark.parametrize("value", ["false", 0, None])
    def test_non_boolean_rejected(self, mock_logger, value):
        """A quoted "false" must not read as strict mode."""
        config = ConfigManager(logger=mock_logger)
        config.load_dict({"treesort": {"integrity": {"strict": value}}})

        with pytest.raises(ConfigError, match="must be a boolean") as exc_info:
            config.strict_integrity()
        assert exc_info.value.error_code == ErrorCode.INVALID_INPUT


class TestLoadFile:
    """Tests for YAML file loading."""

    def test_load_file(self, config_file, mock_logger):
        config = ConfigManager(str(config_file), logger=mock_logger)

        assert config.get("treesort.sorting.strategy") == "natural"
        assert config.get("treesort.sorting.uppercase_first") is True
        assert config.strict_integrity() is False

    def test_sort_config_from_file(self, config_file, mock_logger):
        config = ConfigManager(str(config_file), logger=mock_logger)

        assert config.sort_config() == SortConfig(
            strategy=SortStrategy.NATURAL,
            uppercase_first=True,
            group_by_type=True,
        )

    def test_missing_file(self, temp_dir, mock_logger):
        config = ConfigManager(logger=mock_logger)
        with pytest.raises(ConfigError) as exc_info:
            config.load_file(str(temp_dir / "missing.yaml"))
        assert exc_info.value.error_code == ErrorCode.NOT_FOUND

    def test_invalid_yaml(self, temp_dir, mock_logger):
        path = temp_dir / "bad.yaml"
        path.write_text("treesort: [unclosed")

        config = ConfigManager(logger=mock_logger)
        with pytest.raises(ConfigError, match="YAML parse error") as exc_info:
            config.load_file(str(path))
        assert exc_info.value.error_code == ErrorCode.INVALID_INPUT

    def test_non_mapping_yaml(self, temp_dir, mock_logger):
        path = temp_dir / "list.yaml"
        path.write_text("- a\n- b\n")

        config = ConfigManager(logger=mock_logger)
        with pytest.raises(ConfigError, match="Invalid config format"):
            config.load_file(str(path))

    def test_partial_file_keeps_defaults(self, temp_dir, mock_logger):
        """Keys absent from the file fall back to compiled defaults."""
        path = temp_dir / "partial.yaml"
        path.write_text("treesort:\n  sorting:\n    reversed: true\n")

        config = ConfigManager(str(path), logger=mock_logger)

        assert config.sort_config() == SortConfig(reversed=True, group_by_type=True)

    def test_unknown_strategy_in_file(self, temp_dir, mock_logger):
        """An unknown strategy fails loudly instead of falling back."""
        path = temp_dir / "unknown.yaml"
        path.write_text("treesort:\n  sorting:\n    strategy: by-size\n")

        config = ConfigManager(str(path), logger=mock_logger)

        with pytest.raises(ConfigError, match="Unknown sort strategy 'by-size'"):
            config.sort_config()


class TestPrecedence:
    """Tests for source precedence and merging."""

    def test_runtime_overrides_file(self, config_file, mock_logger):
        config = ConfigManager(str(config_file), logger=mock_logger)
        config.set("treesort.sorting.strategy", "alphabetical")

        assert config.get("treesort.sorting.strategy") == "alphabetical"
        assert config.sort_config().uppercase_first is True

    def test_cli_args_between_environment_and_runtime(self, mock_logger):
        config = ConfigManager(logger=mock_logger)
        config.load_dict({"treesort": {"sorting": {"reversed": True}}}, ConfigSource.CLI_ARGS)
        assert config.get("treesort.sorting.reversed") is True

        config.set("treesort.sorting.reversed", False)
        assert config.get("treesort.sorting.reversed") is False

    def test_get_all_deep_merges(self, mock_logger):
        config = ConfigManager(logger=mock_logger)
        config.load_dict({"treesort": {"sorting": {"reversed": True}}})

        merged = config.get_all()
        assert merged["treesort"]["sorting"]["reversed"] is True
        assert merged["treesort"]["sorting"]["strategy"] == "alphabetical"
        assert merged["treesort"]["logging"]["level"] == "INFO"

    def test_clear_source(self, mock_logger):
        config = ConfigManager(logger=mock_logger)
        config.set("treesort.sorting.reversed", True)
        config.clear(ConfigSource.RUNTIME)
        assert config.get("treesort.sorting.reversed") is False

    def test_clear_keeps_defaults(self, config_file, mock_logger):
        config = ConfigManager(str(config_file), logger=mock_logger)
        config.clear()
        assert config.get("treesort.sorting.strategy") == "alphabetical"


class TestEnvironment:
    """Tests for TREESORT_* environment variables."""

    def test_sorting_flags(self, monkeypatch, mock_logger):
        monkeypatch.setenv("TREESORT_SORTING_REVERSED", "true")
        monkeypatch.setenv("TREESORT_SORTING_UPPERCASE_FIRST", "yes")
        monkeypatch.setenv("TREESORT_SORTING_GROUP_BY_TYPE", "0")

        config = ConfigManager(logger=mock_logger)

        assert config.sort_config() == SortConfig(reversed=True, uppercase_first=True)

    def test_strategy_kept_as_string(self, monkeypatch, mock_logger):
        monkeypatch.setenv("TREESORT_SORTING_STRATEGY", "Natural")
        config = ConfigManager(logger=mock_logger)
        assert config.sort_config().strategy is SortStrategy.NATURAL

    def test_other_sections(self, monkeypatch, mock_logger):
        monkeypatch.setenv("TREESORT_INTEGRITY_STRICT", "false")
        monkeypatch.setenv("TREESORT_LOGGING_LEVEL", "DEBUG")

        config = ConfigManager(logger=mock_logger)

        assert config.strict_integrity() is False
        assert config.get("treesort.logging.level") == "DEBUG"

    def test_environment_beats_file(self, monkeypatch, config_file, mock_logger):
        monkeypatch.setenv("TREESORT_SORTING_STRATEGY", "alphabetical")
        config = ConfigManager(str(config_file), logger=mock_logger)
        assert config.get("treesort.sorting.strategy") == "alphabetical"


class TestWatchers:
    """Tests for change watchers and reloading."""

    def test_watcher_called_on_set(self, mock_logger):
        config = ConfigManager(logger=mock_logger)
        watcher = MagicMock()
        config.add_watcher(watcher)

        config.set("treesort.sorting.reversed", True)

        watcher.assert_called_once()
        merged = watcher.call_args[0][0]
        assert merged["treesort"]["sorting"]["reversed"] is True

    def test_removed_watcher_not_called(self, mock_logger):
        config = ConfigManager(logger=mock_logger)
        watcher = MagicMock()
        config.add_watcher(watcher)
        config.remove_watcher(watcher)

        config.set("treesort.sorting.reversed", True)

        watcher.assert_not_called()

    def test_failing_watcher_is_logged(self, mock_logger):
        """A failing watcher doesn't stop the others."""
        config = ConfigManager(logger=mock_logger)
        failing = MagicMock(side_effect=RuntimeError("boom"))
        healthy = MagicMock()
        config.add_watcher(failing)
        config.add_watcher(healthy)

        config.set("treesort.sorting.reversed", True)

        healthy.assert_called_once()
        mock_logger.exception.assert_called_once()

    def test_check_for_changes_reloads(self, config_file, mock_logger):
        config = ConfigManager(str(config_file), logger=mock_logger)
        config.watch_file(str(config_file), interval=60)
        config.stop_watching()
        watcher = MagicMock()
        config.add_watcher(watcher)

        config_file.write_text(yaml.dump({"treesort": {"sorting": {"strategy": "alphabetical"}}}))
        _bump_mtime(config_file)

        assert config.check_for_changes() is True
        assert config.get("treesort.sorting.strategy") == "alphabetical"
        watcher.assert_called_once()

    def test_check_for_changes_without_change(self, config_file, mock_logger):
        config = ConfigManager(str(config_file), logger=mock_logger)
        config.watch_file(str(config_file), interval=60)
        config.stop_watching()

        assert config.check_for_changes() is False

    def test_invalid_change_keeps_previous_values(self, config_file, mock_logger):
        config = ConfigManager(str(config_file), logger=mock_logger)
        config.watch_file(str(config_file), interval=60)
        config.stop_watching()

        config_file.write_text("treesort: [broken")
        _bump_mtime(config_file)

        assert config.check_for_changes() is False
        assert config.get("treesort.sorting.strategy") == "natural"
        mock_logger.warning.assert_called_once()

        # The same broken revision is not retried
        assert config.check_for_changes() is False
        mock_logger.warning.assert_called_once()

    def test_reload(self, config_file, mock_logger):
        config = ConfigManager(str(config_file), logger=mock_logger)
        config_file.write_text(yaml.dump({"treesort": {"sorting": {"reversed": True}}}))

        config.reload()

        assert config.get("treesort.sorting.reversed") is True
        assert config.get("treesort.sorting.strategy") == "alphabetical"
