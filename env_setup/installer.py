"""
Automation environment bootstrapper.

Installs the tools a local Appium setup needs by shelling out to the
package managers:
- Homebrew
- Node.js & npm
- Google Chrome
- Appium, appium-doctor and Selenium WebDriver (npm)
- UiAutomator2 and XCUITest drivers (appium driver install)

Each tool is checked first and only installed when the check fails.
"""

import logging
import subprocess
import time
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Tuple

from config import COMMAND_TIMEOUT
from env_setup.shell_profile import ShellProfileUpdater


logger = logging.getLogger(__name__)


HOMEBREW_INSTALL_URL = "https://raw.githubusercontent.com/Homebrew/install/HEAD/install.sh"
HOMEBREW_SHELLENV = 'eval "$(/opt/homebrew/bin/brew shellenv)"'


class ToolStatus(str, Enum):
    """Outcome of installing one tool"""
    ALREADY_INSTALLED = "already_installed"
    INSTALLED = "installed"
    UNVERIFIED = "unverified"
    SKIPPED = "skipped"
    FAILED = "failed"


class CommandError(RuntimeError):
    """A shell command could not be run to completion"""


class InstallationError(RuntimeError):
    """A tool's install command exited with a non-zero status"""


@dataclass(frozen=True)
class CommandResult:
    """Exit status and combined output of a shell command"""
    command: str
    returncode: int
    output: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


@dataclass(frozen=True)
class ToolSpec:
    """
    How to detect and install one tool.

    Attributes:
        key: Short identifier used on the command line
        name: Display name
        check_command: Shell command that exits 0 when the tool is present
        install_commands: Shell commands run in order to install the tool
        profile_lines: Lines added to the shell profile after installation
        timeout: Per-command timeout overriding the installer default
    """
    key: str
    name: str
    check_command: str
    install_commands: Tuple[str, ...]
    profile_lines: Tuple[str, ...] = ()
    timeout: Optional[float] = None


@dataclass
class InstallResult:
    """Result of installing one tool"""
    tool: str
    status: ToolStatus
    duration: float = 0.0
    message: str = ""

    def __str__(self) -> str:
        marker = "✗" if self.status == ToolStatus.FAILED else "✓"
        text = f"{marker} {self.tool}: {self.status.value}"
        if self.duration:
            text += f" ({self.duration:.2f}s)"
        if self.message:
            text += f" - {self.message}"
        return text


DEFAULT_TOOLS: Tuple[ToolSpec, ...] = (
    ToolSpec(
        key="homebrew",
        name="Homebrew",
        check_command="command -v brew",
        install_commands=(
            f'NONINTERACTIVE=1 /bin/bash -c "$(curl -fsSL {HOMEBREW_INSTALL_URL})"',
        ),
        profile_lines=(HOMEBREW_SHELLENV,),
        timeout=900,
    ),
    ToolSpec(
        key="node",
        name="Node.js & npm",
        check_command="command -v node && command -v npm",
        install_commands=("brew install node",),
    ),
    ToolSpec(
        key="chrome",
        name="Chrome",
        check_command=(
            'test -d "/Applications/Google Chrome.app" || command -v google-chrome'
        ),
        install_commands=("brew install --cask google-chrome",),
        timeout=600,
    ),
    ToolSpec(
        key="appium",
        name="Appium",
        check_command="command -v appium",
        install_commands=("npm install -g appium", "npm install -g appium-doctor"),
    ),
    ToolSpec(
        key="selenium",
        name="Selenium",
        check_command="npm ls -g selenium-webdriver",
        install_commands=("npm install -g selenium-webdriver",),
    ),
    ToolSpec(
        key="uiautomator2",
        name="UiAutomator2",
        check_command="appium driver list --installed 2>&1 | grep -q uiautomator2",
        install_commands=("appium driver install uiautomator2",),
    ),
    ToolSpec(
        key="xcuitest",
        name="XCUITest",
        check_command="appium driver list --installed 2>&1 | grep -q xcuitest",
        install_commands=("appium driver install xcuitest",),
    ),
)


class CommandRunner:
    """Runs shell commands through bash and logs their output"""

    def __init__(self, shell: str = "/bin/bash"):
        self.shell = shell

    def run(self, command: str, timeout: float = COMMAND_TIMEOUT) -> CommandResult:
        """
        Run a command and capture its combined stdout/stderr.

        Args:
            command: Shell command line
            timeout: Seconds before the command is abandoned

        Returns:
            CommandResult

        Raises:
            CommandError: If the command cannot be started or times out
        """
        logger.debug(f"$ {command}")
        try:
            completed = subprocess.run(
                [self.shell, "-c", command],
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                stdin=subprocess.DEVNULL,
                text=True,
                timeout=timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise CommandError(
                f"Command timed out after {timeout} seconds: {command}"
            ) from e
        except OSError as e:
            raise CommandError(f"Command failed: {command} - {e}") from e

        output = completed.stdout or ""
        for line in output.splitlines():
            logger.info(f"  | {line}")

        return CommandResult(command, completed.returncode, output)


class EnvironmentInstaller:
    """
    Checks for and installs the automation toolchain.

    Example:
        installer = EnvironmentInstaller()
        for result in installer.run(skip=["XCUITest"]):
            print(result)
    """

    def __init__(
        self,
        tools: Iterable[ToolSpec] = DEFAULT_TOOLS,
        runner: Optional[CommandRunner] = None,
        profile: Optional[ShellProfileUpdater] = None,
        timeout: float = COMMAND_TIMEOUT
    ):
        """
        Initialize installer.

        Args:
            tools: Tools to install, in order
            runner: Command runner (defaults to CommandRunner())
            profile: Shell profile receiving post-install lines
            timeout: Per-command timeout in seconds
        """
        self.tools = list(tools)
        self.runner = runner or CommandRunner()
        self.profile = profile
        self.timeout = timeout
        self.summary: List[InstallResult] = []

    def is_installed(self, spec: ToolSpec) -> bool:
        """Run the tool's check command"""
        try:
            return self.runner.run(spec.check_command, self.timeout).ok
        except CommandError as e:
            logger.warning(f"{spec.name} check failed: {e}")
            return False

    def install_tool(self, spec: ToolSpec) -> InstallResult:
        """
        Install a tool unless it is already present.

        Args:
            spec: Tool to install

        Returns:
            InstallResult

        Raises:
            InstallationError: If an install command exits non-zero
            CommandError: If an install command cannot run or times out
        """
        logger.info(f"Checking {spec.name}")
        if self.is_installed(spec):
            logger.info(f"{spec.name} is already installed, skipping")
            return self._record(InstallResult(spec.name, ToolStatus.ALREADY_INSTALLED))

        logger.info(f"Installing {spec.name}")
        start_time = time.time()
        try:
            for command in spec.install_commands:
                result = self.runner.run(command, spec.timeout or self.timeout)
                if not result.ok:
                    raise InstallationError(
                        f"{spec.name} installation failed with exit code "
                        f"{result.returncode}: {command}"
                    )
        except (InstallationError, CommandError) as e:
            duration = time.time() - start_time
            logger.error(f"{spec.name} - Failed: {e}")
            self._record(InstallResult(spec.name, ToolStatus.FAILED, duration, str(e)))
            raise

        if spec.profile_lines and self.profile is not None:
            for line in spec.profile_lines:
                self.profile.ensure_line(line, comment=f"Added for {spec.name}")

        duration = time.time() - start_time
        if self.is_installed(spec):
            logger.info(f"{spec.name} - Installed successfully in {duration:.2f}s")
            return self._record(InstallResult(spec.name, ToolStatus.INSTALLED, duration))

        logger.warning(f"{spec.name} - Installation completed but verification failed")
        return self._record(InstallResult(
            spec.name,
            ToolStatus.UNVERIFIED,
            duration,
            "installation completed but verification failed",
        ))

    def run(self, skip: Iterable[str] = ()) -> List[InstallResult]:
        """
        Install every configured tool in order.

        Stops at the first failure; the failed result is kept in `summary`.

        Args:
            skip: Tool keys or names to leave alone (case-insensitive)

        Returns:
            Results for all tools
        """
        skipped = {name.lower() for name in skip}
        self.summary = []

        for spec in self.tools:
            if spec.key.lower() in skipped or spec.name.lower() in skipped:
                logger.info(f"Skipping {spec.name}")
                self._record(InstallResult(spec.name, ToolStatus.SKIPPED))
                continue
            self.install_tool(spec)

        return list(self.summary)

    def _record(self, result: InstallResult) -> InstallResult:
        self.summary.append(result)
        return result
