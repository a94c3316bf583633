#!/usr/bin/env python3
"""Layered configuration manager for apivisibility.

This module resolves the visibility configuration from:
- Compiled defaults
- System and user YAML files (JSON documents load too)
- ``APIVISIBILITY_*`` environment variables
- Command-line arguments
- Runtime overrides

Higher sources win. Mappings are deep-merged; lists replace lists, so a
``HiddenItems`` list given on the command line fully overrides the one in
the file.

Example:
    >>> config = ConfigManager()
    >>> config.load_file("appsettings.yaml")
    >>> config.get("ApiConfiguration.VisibleItems", default=[])
    >>> api_config = config.get_api_configuration()
"""

import copy
import os
import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import yaml

from apivisibility.core.constants import (
    DEFAULT_CONFIG,
    ENV_HIDDEN_ITEMS,
    ENV_LIST_SEPARATOR,
    ENV_PREFIX,
    ENV_VISIBLE_ITEMS,
    ConfigKey,
    ErrorCode,
)
from apivisibility.core.validators import ValidationError, normalize_mask_list


class ConfigSource(Enum):
    """Configuration source precedence levels."""

    COMPILED_DEFAULTS = 1  # Lowest precedence
    SYSTEM_CONFIG = 2
    USER_CONFIG = 3
    ENVIRONMENT = 4
    CLI_ARGS = 5
    RUNTIME = 6  # Highest precedence


@dataclass
class ConfigValue:
    """Configuration value with metadata."""

    value: Any
    source: ConfigSource
    timestamp: float = field(default_factory=time.time)


class ConfigError(Exception):
    """Configuration error."""

    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.INVALID_INPUT):
        self.message = message
        self.error_code = error_code
        super().__init__(message)


@dataclass(frozen=True)
class ApiConfiguration:
    """The two resolved mask lists consumed by the rule engine."""

    visible_items: List[str] = field(default_factory=list)
    hidden_items: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, section: Optional[Dict[str, Any]]) -> "ApiConfiguration":
        """Build from an ``ApiConfiguration`` section.

        Accepts ``VisibleItems``/``HiddenItems`` or their snake_case
        aliases. A missing section yields empty lists.

        Raises:
            ConfigError: If the section or its lists are malformed
        """
        if section is None:
            return cls()
        if not isinstance(section, dict):
            raise ConfigError(
                f"Expected dict for {ConfigKey.SECTION}, got {type(section).__name__}"
            )

        try:
            visible = normalize_mask_list(
                _lookup(section, ConfigKey.VISIBLE_ITEMS, ConfigKey.VISIBLE_ITEMS_ALIAS)
            )
            hidden = normalize_mask_list(
                _lookup(section, ConfigKey.HIDDEN_ITEMS, ConfigKey.HIDDEN_ITEMS_ALIAS)
            )
        except ValidationError as e:
            raise ConfigError(f"Invalid {ConfigKey.SECTION}: {e}") from e

        return cls(visible_items=visible, hidden_items=hidden)

    def to_dict(self) -> Dict[str, List[str]]:
        """Serialize back to a configuration section."""
        return {
            ConfigKey.VISIBLE_ITEMS: list(self.visible_items),
            ConfigKey.HIDDEN_ITEMS: list(self.hidden_items),
        }


def _lookup(section: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in section:
            return section[key]
    return None


def _canonical_keys(config_data: Dict[str, Any]) -> Dict[str, Any]:
    """Rename snake_case mask keys so layers merge on the same names."""
    section = config_data.get(ConfigKey.SECTION)
    if not isinstance(section, dict):
        return config_data

    for alias, key in (
        (ConfigKey.VISIBLE_ITEMS_ALIAS, ConfigKey.VISIBLE_ITEMS),
        (ConfigKey.HIDDEN_ITEMS_ALIAS, ConfigKey.HIDDEN_ITEMS),
    ):
        if alias in section:
            value = section.pop(alias)
            section.setdefault(key, value)
    return config_data


def split_env_list(value: str) -> List[str]:
    """Split a comma-separated environment value into masks."""
    return [item.strip() for item in value.split(ENV_LIST_SEPARATOR) if item.strip()]


class ConfigManager:
    """Thread-safe layered configuration manager.

    Manages configuration from multiple sources with precedence:
    1. Compiled defaults (lowest)
    2. System config
    3. User config
    4. Environment variables (APIVISIBILITY_*)
    5. CLI arguments
    6. Runtime updates (highest)
    """

    def __init__(self, config_file: Optional[str] = None, load_environment: bool = True):
        """Initialize configuration manager.

        Args:
            config_file: Optional config file to load
            load_environment: Whether to read APIVISIBILITY_* variables
        """
        self._config: Dict[ConfigSource, Dict[str, Any]] = {}
        self._lock = threading.RLock()
        self._watchers: List[Callable[[Dict[str, Any]], None]] = []
        self._files: Dict[str, ConfigSource] = {}

        self._config[ConfigSource.COMPILED_DEFAULTS] = copy.deepcopy(DEFAULT_CONFIG)

        if config_file:
            self.load_file(config_file)

        if load_environment:
            self.load_environment()

    def load_file(self, file_path: str, source: ConfigSource = ConfigSource.USER_CONFIG) -> None:
        """Load configuration from a YAML (or JSON) file.

        Args:
            file_path: Path to config file
            source: Configuration source level

        Raises:
            ConfigError: If file cannot be loaded or parsed
        """
        path = Path(file_path).expanduser().resolve()

        if not path.exists():
            raise ConfigError(f"Config file not found: {file_path}", ErrorCode.NOT_FOUND)

        try:
            with open(path, "r", encoding="utf-8") as f:
                config_data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"YAML parse error in {file_path}: {e}", ErrorCode.INVALID_INPUT)
        except OSError as e:
            raise ConfigError(f"Error loading config {file_path}: {e}", ErrorCode.INTERNAL_ERROR)

        if config_data is None:
            config_data = {}
        if not isinstance(config_data, dict):
            raise ConfigError(f"Invalid config format in {file_path}", ErrorCode.INVALID_INPUT)

        with self._lock:
            self._config[source] = _canonical_keys(config_data)
            self._files[str(path)] = source

        self._notify_watchers()

    def load_dict(self, config_data: Dict[str, Any], source: ConfigSource = ConfigSource.RUNTIME) -> None:
        """Load configuration from dictionary.

        Args:
            config_data: Configuration dictionary
            source: Configuration source level
        """
        with self._lock:
            self._config[source] = _canonical_keys(copy.deepcopy(config_data))

        self._notify_watchers()

    def load_environment(self, environ: Optional[Dict[str, str]] = None) -> None:
        """Load configuration from environment variables.

        ``APIVISIBILITY_VISIBLE_ITEMS`` and ``APIVISIBILITY_HIDDEN_ITEMS``
        hold comma-separated masks. Other variables map as
        ``APIVISIBILITY_<SECTION>_<KEY>``, e.g. ``APIVISIBILITY_LOGGING_LEVEL``.

        Args:
            environ: Mapping to read instead of ``os.environ``
        """
        environ = os.environ if environ is None else environ
        env_config: Dict[str, Any] = {}

        for key, value in environ.items():
            if not key.startswith(ENV_PREFIX):
                continue

            if key == ENV_VISIBLE_ITEMS:
                env_config.setdefault(ConfigKey.SECTION, {})[ConfigKey.VISIBLE_ITEMS] = split_env_list(value)
            elif key == ENV_HIDDEN_ITEMS:
                env_config.setdefault(ConfigKey.SECTION, {})[ConfigKey.HIDDEN_ITEMS] = split_env_list(value)
            else:
                section, _, name = key[len(ENV_PREFIX):].lower().partition("_")
                if not name:
                    continue
                env_config.setdefault(section, {})[name] = self._parse_env_value(value)

        if env_config:
            with self._lock:
                self._config[ConfigSource.ENVIRONMENT] = env_config

    def _parse_env_value(self, value: str) -> Any:
        """Parse environment variable value.

        Args:
            value: String value from environment

        Returns:
            Parsed value (int, float, bool, or str)
        """
        if value.lower() in ("true", "yes"):
            return True
        if value.lower() in ("false", "no"):
            return False

        try:
            return int(value)
        except ValueError:
            pass

        try:
            return float(value)
        except ValueError:
            pass

        return value

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value by key.

        Args:
            key: Dot-separated key path (e.g., "logging.level")
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        with self._lock:
            for source in sorted(self._config.keys(), key=lambda s: s.value, reverse=True):
                value = self._get_nested(self._config[source], key)
                if value is not None:
                    return value

            return default

    def get_with_source(self, key: str) -> Optional[ConfigValue]:
        """Get configuration value together with the source that supplied it."""
        with self._lock:
            for source in sorted(self._config.keys(), key=lambda s: s.value, reverse=True):
                value = self._get_nested(self._config[source], key)
                if value is not None:
                    return ConfigValue(value=value, source=source)
            return None

    def _get_nested(self, config: Dict[str, Any], key: str) -> Optional[Any]:
        current: Any = config
        for part in key.split("."):
            if not isinstance(current, dict) or part not in current:
                return None
            current = current[part]
        return current

    def set(self, key: str, value: Any, source: ConfigSource = ConfigSource.RUNTIME) -> None:
        """Set configuration value.

        Args:
            key: Dot-separated key path
            value: Value to set
            source: Configuration source level
        """
        with self._lock:
            current = self._config.setdefault(source, {})

            parts = key.split(".")
            for part in parts[:-1]:
                current = current.setdefault(part, {})
            current[parts[-1]] = value

        self._notify_watchers()

    def get_all(self) -> Dict[str, Any]:
        """Get merged configuration from all sources.

        Returns:
            Merged configuration dictionary
        """
        with self._lock:
            merged: Dict[str, Any] = {}
            for source in sorted(self._config.keys(), key=lambda s: s.value):
                merged = self._deep_merge(merged, self._config[source])
            return merged

    def _deep_merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = copy.deepcopy(value)

        return result

    def get_api_configuration(self) -> ApiConfiguration:
        """Resolve the ``ApiConfiguration`` section from all sources.

        Raises:
            ConfigError: If the merged section is malformed
        """
        return ApiConfiguration.from_dict(self.get_all().get(ConfigKey.SECTION))

    def reload(self) -> None:
        """Reload all file-based configurations."""
        with self._lock:
            files = list(self._files.items())

        for file_path, source in files:
            self.load_file(file_path, source)

    def add_watcher(self, callback: Callable[[Dict[str, Any]], None]) -> None:
        """Add configuration change watcher.

        Args:
            callback: Function called with merged config on changes
        """
        with self._lock:
            self._watchers.append(callback)

    def remove_watcher(self, callback: Callable[[Dict[str, Any]], None]) -> None:
        """Remove configuration change watcher."""
        with self._lock:
            if callback in self._watchers:
                self._watchers.remove(callback)

    def _notify_watchers(self) -> None:
        with self._lock:
            watchers = list(self._watchers)
        if not watchers:
            return

        merged = self.get_all()
        for watcher in watchers:
            watcher(merged)

    def clear(self, source: Optional[ConfigSource] = None) -> None:
        """Clear configuration.

        Args:
            source: Specific source to clear, or None for all except defaults
        """
        with self._lock:
            if source:
                if source in self._config and source != ConfigSource.COMPILED_DEFAULTS:
                    del self._config[source]
            else:
                for s in [s for s in self._config if s != ConfigSource.COMPILED_DEFAULTS]:
                    del self._config[s]
                self._files.clear()


# Global config manager instance
_global_config: Optional[ConfigManager] = None


def get_config_manager(config_file: Optional[str] = None) -> ConfigManager:
    """Get or create global configuration manager.

    Args:
        config_file: Optional config file to load

    Returns:
        Global configuration manager
    """
    global _global_config
    if _global_config is None:
        _global_config = ConfigManager(config_file)
    return _global_config


def set_global_config(config: Optional[ConfigManager]) -> None:
    """Set (or reset with None) the global configuration manager."""
    global _global_config
    _global_config = config
