"""Pytest configuration and fixtures."""

import logging

import pytest

from hastebin_core.config import Config
from hastebin_core.observability import ROOT_LOGGER_NAME, clear_metric_callbacks


@pytest.fixture
def sample_config_dict(tmp_path):
    """Sample configuration dictionary for testing."""
    return {
        "key_length": 8,
        "key_generator": "random",
        "key_space": "abc",
        "max_length": 100,
        "expiration": 60,
        "storage": {"type": "file", "file_path": str(tmp_path / "data")},
        "logging": {"level": "debug", "type": "json"},
    }


@pytest.fixture
def memory_config() -> Config:
    """Configuration using the in-memory backend, isolated from the environment."""
    return Config.from_dict(
        {
            "key_length": 6,
            "max_length": 50,
            "expiration": 60,
            "storage": {"type": "memory"},
        },
        environ={},
    )


@pytest.fixture(autouse=True)
def _reset_metric_callbacks():
    """Keep metric callbacks registered by one test out of the next."""
    yield
    clear_metric_callbacks()


@pytest.fixture(autouse=True)
def _restore_package_logger():
    """Undo configure_logging() calls made by a test."""
    root = logging.getLogger(ROOT_LOGGER_NAME)
    level, handlers = root.level, list(root.handlers)
    yield
    root.setLevel(level)
    root.handlers[:] = handlers
