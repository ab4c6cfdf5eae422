"""
Pytest configuration and shared fixtures

Provides server configs, process handle doubles and launcher mocks.
"""

import pytest
from typing import Callable
from unittest.mock import Mock

from config import ServerConfig


@pytest.fixture
def server_config() -> ServerConfig:
    """
    Server config with three attempts and no retry delay

    Returns:
        ServerConfig object
    """
    return ServerConfig(
        host="127.0.0.1",
        port=4723,
        startup_retries=3,
        retry_delay=0,
        log_file_path="appium-test.log",
    )


@pytest.fixture
def make_handle() -> Callable[..., Mock]:
    """
    Factory for process handle doubles

    Returns:
        Callable creating a Mock with is_alive/terminate
    """
    def _make(alive: bool = True) -> Mock:
        handle = Mock()
        handle.is_alive.return_value = alive
        return handle

    return _make


@pytest.fixture
def launcher() -> Mock:
    """
    Launcher double; configure launch.return_value or side_effect per test

    Returns:
        Mock launcher
    """
    return Mock()


@pytest.fixture
def healthy_probe() -> Mock:
    """
    Status probe that always answers 200

    Returns:
        Mock probe
    """
    return Mock(return_value=200)
