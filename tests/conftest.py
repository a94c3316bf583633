"""Shared pytest fixtures for apivisibility tests."""
import logging
from pathlib import Path
from typing import Any, Dict

import pytest
import yaml

from apivisibility.infrastructure.config_manager import set_global_config
from apivisibility.infrastructure.logger import Logger, configure_logging
from apivisibility.rules.patterns import clear_pattern_cache


@pytest.fixture
def quiet_logger() -> Logger:
    """Logger that discards output."""
    return Logger("apivisibility.test", level="DEBUG", handlers=[logging.NullHandler()])


@pytest.fixture
def sample_config() -> Dict[str, Any]:
    """Provide a sample visibility configuration."""
    return {
        "ApiConfiguration": {
            "VisibleItems": ["User.*", "WeatherForecast.Get*"],
            "HiddenItems": ["User.DeleteUser"],
        },
        "logging": {
            "level": "DEBUG",
            "file": None,
        },
    }


@pytest.fixture
def config_file(tmp_path: Path, sample_config: Dict[str, Any]) -> Path:
    """Create a configuration file."""
    config_path = tmp_path / "appsettings.yaml"
    with open(config_path, "w") as f:
        yaml.dump(sample_config, f)
    return config_path


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Remove APIVISIBILITY_* variables so host settings don't leak in."""
    import os

    for key in list(os.environ):
        if key.startswith("APIVISIBILITY_"):
            monkeypatch.delenv(key, raising=False)
    yield


@pytest.fixture(autouse=True)
def reset_singletons():
    """Reset shared state between tests."""
    clear_pattern_cache()
    set_global_config(None)
    yield
    clear_pattern_cache()
    set_global_config(None)
    configure_logging()
