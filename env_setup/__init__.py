"""
Workstation setup for mobile and web UI automation.

Provides the toolchain installer and the shell profile editor.
"""

from .shell_profile import (
    ShellProfileUpdater,
    ProfileUpdate,
    VerificationReport,
)

from .installer import (
    CommandError,
    CommandResult,
    CommandRunner,
    DEFAULT_TOOLS,
    EnvironmentInstaller,
    InstallationError,
    InstallResult,
    ToolSpec,
    ToolStatus,
)

__all__ = [
    # Shell profile
    'ShellProfileUpdater',
    'ProfileUpdate',
    'VerificationReport',

    # Installer
    'CommandError',
    'CommandResult',
    'CommandRunner',
    'DEFAULT_TOOLS',
    'EnvironmentInstaller',
    'InstallationError',
    'InstallResult',
    'ToolSpec',
    'ToolStatus',
]
