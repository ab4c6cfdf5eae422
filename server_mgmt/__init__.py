"""
Appium server process management.

Provides a lifecycle manager that starts a local Appium server with
retries, checks its health over HTTP and stops it idempotently.
"""

from .errors import (
    AppiumServerError,
    LaunchError,
    ServerUnresponsiveError,
    StartupExhausted,
    StartupInterrupted,
)

from .health import StatusProbe, fetch_status_code

from .launcher import (
    AppiumLauncher,
    AppiumProcess,
    ProcessLauncher,
    ServerHandle,
)

from .appium_server import (
    AppiumServerManager,
    ServerStatus,
)

__all__ = [
    # Errors
    'AppiumServerError',
    'LaunchError',
    'ServerUnresponsiveError',
    'StartupExhausted',
    'StartupInterrupted',

    # Health probe
    'StatusProbe',
    'fetch_status_code',

    # Launcher
    'AppiumLauncher',
    'AppiumProcess',
    'ProcessLauncher',
    'ServerHandle',

    # Lifecycle
    'AppiumServerManager',
    'ServerStatus',
]
