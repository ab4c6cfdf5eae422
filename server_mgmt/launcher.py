"""
Process launcher for a local Appium server.

Spawns the `appium` executable with host, port, base path and log level
arguments, redirects its output to the configured log file and waits until
the status endpoint answers before handing back a process handle.
"""

import logging
import os
import shutil
import subprocess
import time
from pathlib import Path
from typing import Dict, IO, List, Optional, Protocol

from config import ServerConfig, TimeoutValue
from server_mgmt.errors import LaunchError
from server_mgmt.health import StatusProbe, fetch_status_code


logger = logging.getLogger(__name__)


class ServerHandle(Protocol):
    """Ownership reference to a live server process"""

    def is_alive(self) -> bool:
        ...

    def terminate(self) -> None:
        ...


class ProcessLauncher(Protocol):
    """Starts a server process for a given configuration"""

    def launch(self, config: ServerConfig) -> ServerHandle:
        ...


class AppiumProcess:
    """
    Handle for a spawned Appium server process.

    Owns the Popen object and the log file the process writes to.
    """

    def __init__(
        self,
        process: subprocess.Popen,
        log_file: Optional[IO[bytes]] = None,
        shutdown_timeout: float = TimeoutValue.GRACEFUL_SHUTDOWN.value
    ):
        self.process = process
        self._log_file = log_file
        self._shutdown_timeout = shutdown_timeout

    @property
    def pid(self) -> int:
        return self.process.pid

    @property
    def returncode(self) -> Optional[int]:
        return self.process.poll()

    def is_alive(self) -> bool:
        return self.process.poll() is None

    def terminate(self) -> None:
        """
        Stop the process.

        Sends SIGTERM first and falls back to SIGKILL if the process does not
        exit within the shutdown timeout. The log file is closed either way.
        """
        try:
            if self.process.poll() is not None:
                logger.debug(f"Process {self.process.pid} already exited")
                return

            self.process.terminate()
            logger.debug(f"Sent SIGTERM to process {self.process.pid}")
            try:
                self.process.wait(timeout=self._shutdown_timeout)
                logger.info(f"Process {self.process.pid} stopped gracefully")
                return
            except subprocess.TimeoutExpired:
                logger.warning(
                    f"Process {self.process.pid} did not stop within "
                    f"{self._shutdown_timeout}s, force killing"
                )

            self.process.kill()
            self.process.wait(timeout=self._shutdown_timeout)
            logger.info(f"Process {self.process.pid} force killed")
        finally:
            self._close_log()

    def _close_log(self) -> None:
        if self._log_file is not None and not self._log_file.closed:
            self._log_file.close()


class AppiumLauncher:
    """
    Launches `appium` as a child process.

    Example:
        launcher = AppiumLauncher()
        handle = launcher.launch(ServerConfig(port=4723))
        ...
        handle.terminate()
    """

    def __init__(
        self,
        probe: Optional[StatusProbe] = None,
        poll_interval: float = 0.5
    ):
        """
        Initialize launcher.

        Args:
            probe: Status probe used while waiting for readiness
            poll_interval: Seconds between readiness probes
        """
        self._probe = probe or fetch_status_code
        self._poll_interval = poll_interval

    def build_command(self, config: ServerConfig, executable: str) -> List[str]:
        """Command line for the server process"""
        command = [
            executable,
            "--address", config.host,
            "--port", str(config.port),
        ]
        if config.base_path:
            command += ["--base-path", config.base_path]
        command += ["--log-level", "debug" if config.show_logs else "info"]
        return command

    def build_environment(self, config: ServerConfig) -> Dict[str, str]:
        """Current environment with the configured overrides applied"""
        env = dict(os.environ)
        env.update(config.environment)
        return env

    def launch(self, config: ServerConfig) -> AppiumProcess:
        """
        Start the server and wait for its status endpoint.

        Args:
            config: Server configuration

        Returns:
            Handle for the running process

        Raises:
            LaunchError: If the executable is missing, the process exits early,
                or the server does not answer within the startup timeout
        """
        executable = shutil.which(config.executable)
        if executable is None:
            raise LaunchError(f"Appium executable not found: {config.executable}")

        log_path = Path(config.log_file_path)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        log_file = open(log_path, "ab")

        command = self.build_command(config, executable)
        logger.info(f"Launching: {' '.join(command)}")

        try:
            process = subprocess.Popen(
                command,
                stdout=log_file,
                stderr=subprocess.STDOUT,
                stdin=subprocess.DEVNULL,
                env=self.build_environment(config),
            )
        except OSError as e:
            log_file.close()
            raise LaunchError(f"Failed to spawn Appium server: {e}") from e

        handle = AppiumProcess(process, log_file, config.shutdown_timeout)
        logger.info(f"Appium process started (PID: {process.pid})")

        try:
            self._wait_for_ready(handle, config)
        except BaseException:
            handle.terminate()
            raise
        return handle

    def _wait_for_ready(self, handle: AppiumProcess, config: ServerConfig) -> None:
        logger.info(
            f"Waiting for {config.status_url} (timeout: {config.startup_timeout}s)"
        )
        start_time = time.monotonic()

        while True:
            if not handle.is_alive():
                raise LaunchError(
                    f"Appium process exited during startup "
                    f"(exit code: {handle.returncode}); see {config.log_file_path}"
                )

            try:
                status_code = self._probe(
                    config.status_url,
                    config.connection_timeout,
                    config.read_timeout
                )
                if status_code == 200:
                    elapsed = time.monotonic() - start_time
                    logger.info(f"Appium server ready after {elapsed:.1f}s")
                    return
                logger.debug(f"Status endpoint returned {status_code}")
            except Exception as e:
                logger.debug(f"Status endpoint not reachable yet: {e}")

            if time.monotonic() - start_time >= config.startup_timeout:
                raise LaunchError(
                    f"Appium server not ready after {config.startup_timeout}s"
                )
            time.sleep(self._poll_interval)
