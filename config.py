# Mobile Test Harness Configuration
"""
Strongly typed configuration for the Appium server manager and its tooling.
"""

import os
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Literal, Mapping, Optional


# Logging configuration
LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
LOG_FORMAT: str = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# Timeout for shell commands run by the environment installer (seconds)
COMMAND_TIMEOUT: int = 60


class TimeoutValue(float, Enum):
    """Timeout values in seconds"""
    CONNECTION = 5.0
    READ = 10.0
    RETRY_DELAY = 2.0
    STARTUP = 60.0
    GRACEFUL_SHUTDOWN = 5.0


class DefaultPort(int, Enum):
    """Default ports"""
    APPIUM = 4723


class EnvVar(str, Enum):
    """Environment variables understood by ServerConfig.from_env"""
    HOST = "APPIUM_HOST"
    PORT = "APPIUM_PORT"
    CONNECTION_TIMEOUT = "APPIUM_CONNECTION_TIMEOUT"
    READ_TIMEOUT = "APPIUM_READ_TIMEOUT"
    STARTUP_RETRIES = "APPIUM_STARTUP_RETRIES"
    RETRY_DELAY = "APPIUM_RETRY_DELAY"
    LOG_FILE = "APPIUM_LOG_FILE"
    SHOW_LOGS = "APPIUM_SHOW_LOGS"
    BASE_PATH = "APPIUM_BASE_PATH"
    EXECUTABLE = "APPIUM_EXECUTABLE"
    STARTUP_TIMEOUT = "APPIUM_STARTUP_TIMEOUT"


_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


def parse_bool(value: str) -> bool:
    """Parse a boolean environment value ("1", "true", "yes", "on" and their negatives)."""
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ValueError(f"Not a boolean value: {value!r}")


@dataclass(frozen=True)
class ServerConfig:
    """
    Configuration for a locally managed Appium server.

    Attributes:
        host: Bind and probe address
        port: Bind and probe port
        connection_timeout: Connect timeout for the health probe (seconds)
        read_timeout: Read timeout for the health probe (seconds)
        startup_retries: Maximum number of start attempts
        retry_delay: Pause between failed start attempts (seconds)
        log_file_path: File receiving the server's stdout and stderr
        environment: Extra environment variables for the server process
        show_logs: Run the server with debug-level logging
        base_path: Appium base path; the status endpoint lives below it
        executable: Appium executable name or path
        startup_timeout: Seconds the launcher waits for the server to answer
        shutdown_timeout: Seconds to wait for graceful shutdown before killing
    """
    host: str = "127.0.0.1"
    port: int = DefaultPort.APPIUM.value
    connection_timeout: float = TimeoutValue.CONNECTION.value
    read_timeout: float = TimeoutValue.READ.value
    startup_retries: int = 3
    retry_delay: float = TimeoutValue.RETRY_DELAY.value
    log_file_path: str = "appium-server.log"
    environment: Mapping[str, str] = field(default_factory=dict, hash=False)
    show_logs: bool = False
    base_path: str = "/wd/hub"
    executable: str = "appium"
    startup_timeout: float = TimeoutValue.STARTUP.value
    shutdown_timeout: float = TimeoutValue.GRACEFUL_SHUTDOWN.value

    def __post_init__(self) -> None:
        if self.startup_retries < 1:
            raise ValueError(
                f"startup_retries must be at least 1, got {self.startup_retries}"
            )
        if not 0 < self.port <= 65535:
            raise ValueError(f"port must be between 1 and 65535, got {self.port}")
        for name in ("connection_timeout", "read_timeout", "retry_delay",
                     "startup_timeout", "shutdown_timeout"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must not be negative")

        # Copy so later changes to the caller's mapping never leak in
        object.__setattr__(
            self,
            "environment",
            MappingProxyType({str(k): str(v) for k, v in self.environment.items()}),
        )

        base_path = "/" + self.base_path.strip("/") if self.base_path.strip("/") else ""
        object.__setattr__(self, "base_path", base_path)

    @property
    def server_url(self) -> str:
        """Root URL clients connect to (includes the base path)"""
        return f"http://{self.host}:{self.port}{self.base_path}"

    @property
    def status_url(self) -> str:
        """URL of the readiness endpoint"""
        return f"{self.server_url}/status"

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        **overrides: Any
    ) -> "ServerConfig":
        """
        Build a config from APPIUM_* environment variables.

        Args:
            environ: Mapping to read from (defaults to os.environ)
            **overrides: Field values that win over the environment; None is ignored

        Returns:
            ServerConfig instance

        Raises:
            ValueError: If a variable holds a malformed value
        """
        if environ is None:
            environ = os.environ

        readers: dict[str, tuple[EnvVar, Callable[[str], Any]]] = {
            "host": (EnvVar.HOST, str),
            "port": (EnvVar.PORT, int),
            "connection_timeout": (EnvVar.CONNECTION_TIMEOUT, float),
            "read_timeout": (EnvVar.READ_TIMEOUT, float),
            "startup_retries": (EnvVar.STARTUP_RETRIES, int),
            "retry_delay": (EnvVar.RETRY_DELAY, float),
            "log_file_path": (EnvVar.LOG_FILE, str),
            "show_logs": (EnvVar.SHOW_LOGS, parse_bool),
            "base_path": (EnvVar.BASE_PATH, str),
            "executable": (EnvVar.EXECUTABLE, str),
            "startup_timeout": (EnvVar.STARTUP_TIMEOUT, float),
        }

        values: dict[str, Any] = {}
        for field_name, (var, parse) in readers.items():
            raw = environ.get(var.value)
            if raw is None:
                continue
            try:
                values[field_name] = parse(raw)
            except ValueError as e:
                raise ValueError(f"Invalid value for {var.value}: {raw!r}") from e

        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
