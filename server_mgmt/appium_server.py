"""
Lifecycle management for a local Appium server.

Provides a manager that owns at most one server process with:
- Start with bounded retries and cleanup of failed attempts
- Cancellable delay between attempts
- HTTP health checking against the status endpoint
- Idempotent stop that never raises
- Context manager support
"""

import logging
import threading
from enum import Enum
from typing import Optional

from config import ServerConfig
from server_mgmt.errors import (
    ServerUnresponsiveError,
    StartupExhausted,
    StartupInterrupted,
)
from server_mgmt.health import StatusProbe, fetch_status_code
from server_mgmt.launcher import AppiumLauncher, ProcessLauncher, ServerHandle


logger = logging.getLogger(__name__)


class ServerStatus(str, Enum):
    """Observed server status"""
    NOT_STARTED = "not_started"
    PROCESS_EXITED = "process_exited"
    UNRESPONSIVE = "unresponsive"
    RUNNING = "running"


class AppiumServerManager:
    """
    Owns the lifecycle of one Appium server process.

    start, stop and restart are serialized per instance. is_running and
    status take no lock and can be called at any time.

    Example:
        manager = AppiumServerManager(ServerConfig(port=4723))
        with manager:
            # Server is running
            ...
        # Server stopped
    """

    def __init__(
        self,
        config: Optional[ServerConfig] = None,
        launcher: Optional[ProcessLauncher] = None,
        probe: Optional[StatusProbe] = None
    ):
        """
        Initialize manager.

        Args:
            config: Server configuration (defaults to ServerConfig())
            launcher: Process launcher (defaults to AppiumLauncher)
            probe: HTTP status probe (defaults to fetch_status_code)
        """
        self.config = config or ServerConfig()
        self._probe = probe or fetch_status_code
        self._launcher = launcher or AppiumLauncher(probe=self._probe)
        self._handle: Optional[ServerHandle] = None
        self._lock = threading.RLock()
        self._cancel_event = threading.Event()

        logger.info(
            f"AppiumServerManager initialized for "
            f"{self.config.host}:{self.config.port}"
        )

    @property
    def handle(self) -> Optional[ServerHandle]:
        """Handle of the managed process, if any"""
        return self._handle

    def start(self) -> None:
        """
        Start the server, retrying failed attempts.

        Does nothing if the managed server is already running.

        Raises:
            StartupExhausted: If every attempt failed
            StartupInterrupted: If cancel_startup() was called during a retry delay
        """
        with self._lock:
            self._cancel_event.clear()

            if self.is_running():
                logger.info(
                    f"Appium server is already running on "
                    f"{self.config.host}:{self.config.port}"
                )
                return

            if self._handle is not None:
                logger.warning("Discarding handle of unresponsive Appium server")
                stale, self._handle = self._handle, None
                self._terminate_quietly(stale)

            retries = self.config.startup_retries
            last_error: Optional[Exception] = None

            for attempt in range(1, retries + 1):
                handle: Optional[ServerHandle] = None
                try:
                    logger.info(f"Starting Appium server (attempt {attempt}/{retries})...")
                    handle = self._launcher.launch(self.config)

                    if self._check(handle) is ServerStatus.RUNNING:
                        self._handle = handle
                        logger.info(
                            f"Appium server started successfully on "
                            f"{self.config.host}:{self.config.port}"
                        )
                        return

                    raise ServerUnresponsiveError("Appium server started but is not responding")

                except Exception as e:
                    last_error = e
                    self._terminate_quietly(handle)

                    if attempt < retries:
                        logger.warning(f"Attempt {attempt}/{retries} failed: {e}")
                        logger.debug("Error details:", exc_info=True)
                        self._wait_before_retry()
                    else:
                        logger.error(f"All {retries} startup attempts failed", exc_info=True)

            raise StartupExhausted(retries, last_error) from last_error

    def stop(self) -> None:
        """
        Stop the server if it is running.

        Never raises; failures are logged. The handle is always released.
        """
        with self._lock:
            handle, self._handle = self._handle, None
            if handle is None:
                return

            try:
                if handle.is_alive():
                    logger.info("Stopping Appium server...")
                    handle.terminate()
                    logger.info("Appium server stopped successfully")
            except Exception as e:
                logger.error(f"Error while stopping Appium server: {e}", exc_info=True)

    def restart(self) -> None:
        """
        Stop then start the server.

        Raises:
            StartupExhausted: If the start phase fails
            StartupInterrupted: If the start phase is cancelled
        """
        with self._lock:
            logger.info("Restarting Appium server")
            self.stop()
            self.start()

    def is_running(self) -> bool:
        """
        Check whether the managed server is alive and responsive.

        Returns:
            True only if the process is alive and the status endpoint returns 200
        """
        return self.status() is ServerStatus.RUNNING

    def status(self) -> ServerStatus:
        """
        Report the server status without collapsing failure modes.

        Returns:
            NOT_STARTED, PROCESS_EXITED, UNRESPONSIVE or RUNNING
        """
        # Single read; stop() may clear the attribute concurrently
        handle = self._handle
        if handle is None:
            return ServerStatus.NOT_STARTED
        return self._check(handle)

    def cancel_startup(self) -> None:
        """Abort an in-progress start() at its next retry delay."""
        logger.info("Cancelling Appium server startup")
        self._cancel_event.set()

    def _check(self, handle: ServerHandle) -> ServerStatus:
        try:
            alive = handle.is_alive()
        except Exception as e:
            logger.debug(f"Liveness check failed: {e}")
            alive = False
        if not alive:
            return ServerStatus.PROCESS_EXITED

        url = self.config.status_url
        try:
            status_code = self._probe(
                url,
                self.config.connection_timeout,
                self.config.read_timeout
            )
        except Exception as e:
            logger.debug(f"Appium server is not responding: {e}")
            return ServerStatus.UNRESPONSIVE

        if status_code == 200:
            logger.debug(f"Appium server is running and responsive at {url}")
            return ServerStatus.RUNNING

        logger.warning(f"Appium server returned unexpected status code: {status_code}")
        return ServerStatus.UNRESPONSIVE

    def _terminate_quietly(self, handle: Optional[ServerHandle]) -> None:
        if handle is None:
            return
        try:
            handle.terminate()
        except Exception as e:
            logger.warning(
                f"Error while stopping Appium server after failed start attempt: {e}"
            )

    def _wait_before_retry(self) -> None:
        if self._cancel_event.wait(self.config.retry_delay):
            raise StartupInterrupted("Server startup was interrupted")

    def __enter__(self):
        """Context manager entry"""
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit"""
        self.stop()
        return False
