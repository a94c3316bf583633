"""
API Visibility Core: Constants

This module provides package-wide constants and error codes shared by the
rule engine, the configuration layer and the host adapters.
"""
from enum import Enum, IntEnum

# Version information
APIVISIBILITY_VERSION = "1.0.0"


# Error codes
class ErrorCode(IntEnum):
    """Standardized error codes for visibility operations."""

    SUCCESS = 0  # Operation completed successfully
    INVALID_INPUT = 1  # Bad mask, invalid configuration
    NOT_FOUND = 2  # Config file or module doesn't exist
    INTERNAL_ERROR = 3  # Bug in apivisibility


# Mask syntax
MASK_SEPARATOR = "."
WILDCARD_ANY = "*"  # Zero or more characters
WILDCARD_ONE = "?"  # Exactly one character
WILDCARD_CHARS = (WILDCARD_ANY, WILDCARD_ONE)

# Compiled pattern cache size
PATTERN_CACHE_SIZE = 512


class VisibilityMode(Enum):
    """Observable evaluation modes of a rule set."""

    NONE = "none"  # Nothing configured, everything visible
    INCLUDE = "include"  # Allow-list only
    EXCLUDE = "exclude"  # Deny-list only
    MIXED = "mixed"  # Allow-list narrowed by deny-list


# Configuration keys
class ConfigKey:
    """Configuration key constants."""

    # Section holding the two mask lists
    SECTION = "ApiConfiguration"
    VISIBLE_ITEMS = "VisibleItems"
    HIDDEN_ITEMS = "HiddenItems"

    # Accepted snake_case aliases
    VISIBLE_ITEMS_ALIAS = "visible_items"
    HIDDEN_ITEMS_ALIAS = "hidden_items"

    LOGGING = "logging"
    LOG_LEVEL = "level"
    LOG_FILE = "file"


# Environment variables
ENV_PREFIX = "APIVISIBILITY_"
ENV_VISIBLE_ITEMS = ENV_PREFIX + "VISIBLE_ITEMS"
ENV_HIDDEN_ITEMS = ENV_PREFIX + "HIDDEN_ITEMS"
ENV_LIST_SEPARATOR = ","


# Default configuration values
DEFAULT_CONFIG = {
    ConfigKey.SECTION: {
        ConfigKey.VISIBLE_ITEMS: [],
        ConfigKey.HIDDEN_ITEMS: [],
    },
    ConfigKey.LOGGING: {
        ConfigKey.LOG_LEVEL: "INFO",
        ConfigKey.LOG_FILE: None,
    },
}
