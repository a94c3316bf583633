"""Tests for package constants."""
import logging

from apivisibility.core.constants import (
    DEFAULT_CONFIG,
    ENV_HIDDEN_ITEMS,
    ENV_VISIBLE_ITEMS,
    WILDCARD_CHARS,
    ConfigKey,
    ErrorCode,
    VisibilityMode,
)


class TestErrorCode:
    """Test error code values."""

    def test_members(self):
        assert [code.name for code in ErrorCode] == [
            "SUCCESS",
            "INVALID_INPUT",
            "NOT_FOUND",
            "INTERNAL_ERROR",
        ]

    def test_invalid_input(self):
        assert ErrorCode.INVALID_INPUT == 1
        assert ErrorCode.NOT_FOUND == 2


class TestConfigKeys:
    """Test configuration key names."""

    def test_section_keys(self):
        assert ConfigKey.SECTION == "ApiConfiguration"
        assert ConfigKey.VISIBLE_ITEMS == "VisibleItems"
        assert ConfigKey.HIDDEN_ITEMS == "HiddenItems"

    def test_environment_names(self):
        assert ENV_VISIBLE_ITEMS == "APIVISIBILITY_VISIBLE_ITEMS"
        assert ENV_HIDDEN_ITEMS == "APIVISIBILITY_HIDDEN_ITEMS"


class TestDefaults:
    """Test default configuration."""

    def test_default_lists_are_empty(self):
        section = DEFAULT_CONFIG[ConfigKey.SECTION]
        assert section[ConfigKey.VISIBLE_ITEMS] == []
        assert section[ConfigKey.HIDDEN_ITEMS] == []

    def test_default_log_level_is_valid(self):
        level = DEFAULT_CONFIG[ConfigKey.LOGGING][ConfigKey.LOG_LEVEL]
        assert isinstance(logging.getLevelName(level), int)

    def test_wildcards(self):
        assert set(WILDCARD_CHARS) == {"*", "?"}

    def test_modes(self):
        assert {m.value for m in VisibilityMode} == {"none", "include", "exclude", "mixed"}
