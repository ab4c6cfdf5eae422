"""
UI automation helpers: capability sets, driver helpers and a desktop
browser launcher.

Driver helpers import the Appium client, so they are not re-exported here.
"""

from .capabilities import (
    AppTarget,
    AutomationName,
    DeviceConfig,
    Platform,
    android_capabilities,
    browser_capabilities,
    build_capabilities,
    ios_capabilities,
    settings_app_path,
)

from .browser_launcher import BrowserLauncher, default_chrome_path

__all__ = [
    # Capabilities
    'AppTarget',
    'AutomationName',
    'DeviceConfig',
    'Platform',
    'android_capabilities',
    'browser_capabilities',
    'build_capabilities',
    'ios_capabilities',
    'settings_app_path',

    # Browser
    'BrowserLauncher',
    'default_chrome_path',
]
