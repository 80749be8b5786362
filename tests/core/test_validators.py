"""Tests for treesort input validators."""

import pytest

from treesort.core.constants import ErrorCode, SortStrategy
from treesort.core.validators import (
    ValidationError,
    validate_flag,
    validate_log_level,
    validate_sort_settings,
    validate_strategy,
)


class TestValidationError:
    """Test ValidationError exception."""

    def test_default_error_code(self):
        error = ValidationError("bad value")
        assert str(error) == "bad value"
        assert error.error_code == ErrorCode.INVALID_INPUT

    def test_custom_error_code(self):
        error = ValidationError("missing", ErrorCode.NOT_FOUND)
        assert error.error_code == ErrorCode.NOT_FOUND


class TestValidateStrategy:
    """Test validate_strategy()."""

    def test_accepts_known_names(self):
        assert validate_strategy("alphabetical") is SortStrategy.ALPHABETICAL
        assert validate_strategy("natural") is SortStrategy.NATURAL

    def test_is_case_insensitive_and_trims(self):
        assert validate_strategy("  Natural ") is SortStrategy.NATURAL
        assert validate_strategy("ALPHABETICAL") is SortStrategy.ALPHABETICAL

    def test_accepts_enum_member(self):
        assert validate_strategy(SortStrategy.NATURAL) is SortStrategy.NATURAL

    def test_unknown_strategy_is_descriptive(self):
        """Unknown strategies name the bad value and the valid ones."""
        with pytest.raises(ValidationError) as exc_info:
            validate_strategy("by-size")

        message = str(exc_info.value)
        assert "'by-size'" in message
        assert "'alphabetical'" in message
        assert "'natural'" in message

    def test_non_string_rejected(self):
        with pytest.raises(ValidationError, match="must be a string"):
            validate_strategy(3)

    def test_empty_string_rejected(self):
        with pytest.raises(ValidationError):
            validate_strategy("")


class TestValidateFlag:
    """Test validate_flag()."""

    def test_accepts_booleans(self):
        assert validate_flag("reversed", True) is True
        assert validate_flag("reversed", False) is False

    @pytest.mark.parametrize("value", [1, 0, "yes", "false", None])
    def test_rejects_non_booleans(self, value):
        with pytest.raises(ValidationError, match="'reversed' must be a boolean"):
            validate_flag("reversed", value)


class TestValidateSortSettings:
    """Test validate_sort_settings()."""

    def test_empty_settings(self):
        assert validate_sort_settings({}) == {}

    def test_full_settings_are_normalized(self):
        result = validate_sort_settings(
            {
                "strategy": "Natural",
                "reversed": True,
                "uppercase_first": False,
                "group_by_type": True,
                "group_by_extension": True,
            }
        )

        assert result["strategy"] is SortStrategy.NATURAL
        assert result["reversed"] is True
        assert result["group_by_extension"] is True

    def test_unknown_keys_rejected(self):
        with pytest.raises(ValidationError, match="Unknown sorting settings: colour, size"):
            validate_sort_settings({"size": True, "colour": "red"})

    def test_not_a_mapping(self):
        with pytest.raises(ValidationError, match="must be a dictionary"):
            validate_sort_settings(["strategy"])

    def test_bad_flag_reported(self):
        with pytest.raises(ValidationError, match="group_by_type"):
            validate_sort_settings({"group_by_type": "true"})


class TestValidateLogLevel:
    """Test validate_log_level()."""

    def test_valid_levels(self):
        assert validate_log_level("debug") == "DEBUG"
        assert validate_log_level("WARNING") == "WARNING"

    def test_invalid_level(self):
        with pytest.raises(ValidationError, match="Invalid log level"):
            validate_log_level("verbose")

    def test_non_string_level(self):
        with pytest.raises(ValidationError):
            validate_log_level(10)
