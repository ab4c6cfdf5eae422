"""
Fixtures for device-backed UI tests

These tests need a device or emulator and an Appium installation. They are
skipped unless APPIUM_DEVICE_TESTS=1. Set APPIUM_AUTO_START=1 to have the
session start its own Appium server; otherwise one must already be running.
"""

import logging
import os

import pytest

from automation import DeviceConfig
from automation.driver import create_driver, quit_driver
from config import ServerConfig, parse_bool
from server_mgmt import AppiumServerError, AppiumServerManager


logger = logging.getLogger(__name__)


def _flag(name: str) -> bool:
    return parse_bool(os.environ.get(name, ""))


@pytest.fixture(scope="session")
def ui_server_config() -> ServerConfig:
    """Server config for the UI session (APPIUM_* variables apply)"""
    if not _flag("APPIUM_DEVICE_TESTS"):
        pytest.skip("Device tests disabled (set APPIUM_DEVICE_TESTS=1)")
    return ServerConfig.from_env()


@pytest.fixture(scope="session")
def appium_server(ui_server_config):
    """
    Appium server manager for the whole session

    Started only when APPIUM_AUTO_START=1, always stopped at the end.
    """
    manager = AppiumServerManager(ui_server_config)
    if _flag("APPIUM_AUTO_START"):
        try:
            manager.start()
        except AppiumServerError as e:
            pytest.fail(f"Could not start Appium server: {e}")
    else:
        logger.info("Automatic Appium server startup is disabled - ensure server is running")

    yield manager

    manager.stop()


@pytest.fixture(scope="session")
def device() -> DeviceConfig:
    """Device under test (DEVICE_* variables apply)"""
    return DeviceConfig.from_env()


@pytest.fixture(scope="class")
def driver(request, appium_server, device):
    """
    Appium session shared by one test class

    The class provides its capabilities through a `capabilities(device)`
    classmethod.
    """
    capabilities = request.cls.capabilities(device)
    session = create_driver(appium_server.config.server_url, capabilities)
    yield session
    quit_driver(session)
