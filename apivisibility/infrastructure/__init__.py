"""apivisibility infrastructure layer.

Services shared by the rule engine, host adapters and the CLI:
- ConfigManager: layered configuration (defaults, files, environment, CLI)
- Logger: structured logging with key-value context
"""

from .config_manager import (
    ApiConfiguration,
    ConfigError,
    ConfigManager,
    ConfigSource,
    ConfigValue,
    get_config_manager,
    set_global_config,
)
from .logger import Logger, LogLevel, configure_logging, get_logger, set_global_logger

__all__ = [
    # Logger exports
    "Logger",
    "LogLevel",
    "configure_logging",
    "get_logger",
    "set_global_logger",
    # ConfigManager exports
    "ApiConfiguration",
    "ConfigSource",
    "ConfigValue",
    "ConfigError",
    "ConfigManager",
    "get_config_manager",
    "set_global_config",
]
