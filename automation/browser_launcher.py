"""
Launch a desktop Chrome window for manual checks.
"""

import logging
import platform
import subprocess
import time
from typing import Callable, List, Optional, Sequence

from config import TimeoutValue


logger = logging.getLogger(__name__)


DEFAULT_FLAGS = ("--new-window", "--start-maximized")

CHROME_PATHS = {
    "Windows": r"C:\Program Files\Google\Chrome\Application\chrome.exe",
    "Darwin": "/Applications/Google Chrome.app/Contents/MacOS/Google Chrome",
    "Linux": "google-chrome",
}


def default_chrome_path(system: Optional[str] = None) -> str:
    """Chrome executable for the given (or current) operating system"""
    system = system or platform.system()
    return CHROME_PATHS.get(system, CHROME_PATHS["Linux"])


class BrowserLauncher:
    """
    Owns one Chrome process.

    Example:
        with BrowserLauncher() as browser:
            browser.open("https://www.google.com")
    """

    def __init__(
        self,
        executable: Optional[str] = None,
        shutdown_timeout: float = TimeoutValue.GRACEFUL_SHUTDOWN.value
    ):
        self.executable = executable or default_chrome_path()
        self.shutdown_timeout = shutdown_timeout
        self.process: Optional[subprocess.Popen] = None

    def build_command(self, url: str, flags: Sequence[str] = DEFAULT_FLAGS) -> List[str]:
        return [self.executable, *flags, url]

    def open(self, url: str, flags: Sequence[str] = DEFAULT_FLAGS) -> subprocess.Popen:
        """
        Start Chrome on a URL.

        Raises:
            RuntimeError: If a browser from this launcher is already open
            FileNotFoundError: If the Chrome executable does not exist
        """
        if self.process is not None and self.process.poll() is None:
            raise RuntimeError("Browser is already open")

        command = self.build_command(url, flags)
        logger.info(f"Opening Chrome: {' '.join(command)}")
        self.process = subprocess.Popen(
            command,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            stdin=subprocess.DEVNULL,
        )
        return self.process

    def close(self) -> None:
        """Terminate the browser, force killing it if needed."""
        process, self.process = self.process, None
        if process is None or process.poll() is not None:
            return

        logger.info("Closing Chrome...")
        process.terminate()
        try:
            process.wait(timeout=self.shutdown_timeout)
        except subprocess.TimeoutExpired:
            logger.warning("Chrome did not exit, force killing")
            process.kill()
            process.wait(timeout=self.shutdown_timeout)

    def open_for(
        self,
        url: str,
        seconds: int,
        tick: Optional[Callable[[int], None]] = None,
        sleep: Callable[[float], None] = time.sleep
    ) -> None:
        """
        Keep Chrome open on a URL for a countdown, then close it.

        Args:
            url: Page to open
            seconds: Countdown length
            tick: Called with the remaining seconds once per second
            sleep: Sleep function
        """
        self.open(url)
        try:
            for remaining in range(seconds, 0, -1):
                if tick:
                    tick(remaining)
                sleep(1)
        finally:
            self.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
