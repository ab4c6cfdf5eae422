"""
Appium capability sets for the devices and apps under test.
"""

import logging
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Mapping, Optional


logger = logging.getLogger(__name__)


# Five minutes, expressed in seconds as Appium expects
COMMAND_TIMEOUT_SECONDS = 300

SETTINGS_APP_RELATIVE_PATH = (
    "node_modules/appium-uiautomator2-driver/node_modules/"
    "io.appium.settings/apks/settings_apk-debug.apk"
)


class Platform(str, Enum):
    """Target platforms"""
    ANDROID = "android"
    IOS = "ios"


class AutomationName(str, Enum):
    """Appium drivers"""
    UIAUTOMATOR2 = "UiAutomator2"
    XCUITEST = "XCUITest"


class AppTarget(str, Enum):
    """Package and activity of known apps"""
    TIKTOK_PACKAGE = "com.zhiliaoapp.musically"
    TIKTOK_ACTIVITY = "com.ss.android.ugc.aweme.splash.SplashActivity"
    DESKCLOCK_PACKAGE = "com.google.android.deskclock"
    DESKCLOCK_ACTIVITY = "com.android.deskclock.DeskClock"
    IOS_CALCULATOR = "com.apple.calculator"


@dataclass(frozen=True)
class DeviceConfig:
    """
    Device and app under test.

    Attributes:
        platform: Android or iOS
        platform_version: OS version string
        device_name: Device or emulator name
        udid: Device serial / UDID
        app_package: Android app package
        app_activity: Android launch activity
        bundle_id: iOS bundle identifier
    """
    platform: Platform = Platform.ANDROID
    platform_version: str = "16.0"
    device_name: str = "sdk_gphone64_arm64"
    udid: str = "emulator-5554"
    app_package: str = AppTarget.TIKTOK_PACKAGE.value
    app_activity: str = AppTarget.TIKTOK_ACTIVITY.value
    bundle_id: str = AppTarget.IOS_CALCULATOR.value

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        **overrides: Any
    ) -> "DeviceConfig":
        """
        Build a device config from DEVICE_* environment variables.

        Args:
            environ: Mapping to read from (defaults to os.environ)
            **overrides: Field values that win over the environment

        Raises:
            ValueError: If DEVICE_PLATFORM is not a known platform
        """
        if environ is None:
            environ = os.environ

        names = {
            "platform": "DEVICE_PLATFORM",
            "platform_version": "DEVICE_PLATFORM_VERSION",
            "device_name": "DEVICE_NAME",
            "udid": "DEVICE_UDID",
            "app_package": "DEVICE_APP_PACKAGE",
            "app_activity": "DEVICE_APP_ACTIVITY",
            "bundle_id": "DEVICE_BUNDLE_ID",
        }
        values: Dict[str, Any] = {
            field_name: environ[var]
            for field_name, var in names.items()
            if environ.get(var)
        }
        values.update({k: v for k, v in overrides.items() if v is not None})

        if "platform" in values:
            values["platform"] = Platform(str(values["platform"]).lower())
        return cls(**values)


def settings_app_path(home: Optional[Path] = None) -> str:
    """Path of the Appium Settings APK shipped with the UiAutomator2 driver"""
    home = Path(home) if home else Path.home()
    return str(home / ".appium" / SETTINGS_APP_RELATIVE_PATH)


def android_capabilities(
    device: DeviceConfig,
    settings_app: Optional[str] = None
) -> Dict[str, Any]:
    """
    Capabilities for a native Android app session.

    Args:
        device: Device and app under test
        settings_app: Settings APK path (defaults to settings_app_path())

    Returns:
        Capability dictionary
    """
    caps = {
        "platformName": "Android",
        "appium:platformVersion": device.platform_version,
        "appium:deviceName": device.device_name,
        "appium:udid": device.udid,
        "appium:appPackage": device.app_package,
        "appium:appActivity": device.app_activity,
        "appium:autoGrantPermissions": True,
        "appium:noReset": True,
        "appium:fullReset": False,
        "appium:newCommandTimeout": COMMAND_TIMEOUT_SECONDS,
        "appium:automationName": AutomationName.UIAUTOMATOR2.value,
        "appium:settingsApp": settings_app or settings_app_path(),
    }
    logger.info(
        f"Android capabilities configured for {device.app_package}:{device.app_activity}"
    )
    return caps


def ios_capabilities(device: DeviceConfig) -> Dict[str, Any]:
    """Capabilities for a native iOS app session"""
    caps = {
        "platformName": "iOS",
        "appium:automationName": AutomationName.XCUITEST.value,
        "appium:bundleId": device.bundle_id,
    }
    logger.info("iOS capabilities configured")
    return caps


def browser_capabilities(
    device: DeviceConfig,
    browser_name: str = "Browser"
) -> Dict[str, Any]:
    """Capabilities for a mobile browser session on Android"""
    return {
        "platformName": "Android",
        "browserName": browser_name,
        "appium:platformVersion": device.platform_version,
        "appium:udid": device.udid,
        "appium:automationName": AutomationName.UIAUTOMATOR2.value,
        "appium:autoGrantPermissions": True,
        "appium:noReset": True,
    }


def build_capabilities(device: DeviceConfig) -> Dict[str, Any]:
    """Capabilities for a native app session on the device's platform"""
    if device.platform == Platform.ANDROID:
        return android_capabilities(device)
    return ios_capabilities(device)
