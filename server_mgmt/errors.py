"""
Exceptions raised by the Appium server lifecycle manager.
"""

from typing import Optional


class AppiumServerError(RuntimeError):
    """Base class for Appium server lifecycle errors"""


class LaunchError(AppiumServerError):
    """A single launch attempt failed (missing executable, early exit, timeout)"""


class ServerUnresponsiveError(AppiumServerError):
    """The server process started but its status endpoint did not answer"""


class StartupInterrupted(AppiumServerError):
    """The retry delay between start attempts was cancelled"""


class StartupExhausted(AppiumServerError):
    """
    Every configured start attempt failed.

    Attributes:
        attempts: Number of attempts made
        last_error: Failure of the final attempt
    """

    def __init__(self, attempts: int, last_error: Optional[BaseException] = None):
        message = f"Failed to start Appium server after {attempts} attempts"
        if last_error is not None:
            message = f"{message}: {last_error}"
        super().__init__(message)
        self.attempts = attempts
        self.last_error = last_error
