"""
HTTP readiness probe for the Appium status endpoint.
"""

import logging
from typing import Callable

import requests


logger = logging.getLogger(__name__)


# (url, connect_timeout, read_timeout) -> HTTP status code
StatusProbe = Callable[[str, float, float], int]


def fetch_status_code(url: str, connect_timeout: float, read_timeout: float) -> int:
    """
    Perform a GET against a status URL.

    Args:
        url: Status endpoint URL
        connect_timeout: Socket connect timeout in seconds
        read_timeout: Socket read timeout in seconds

    Returns:
        HTTP status code

    Raises:
        requests.RequestException: On any network failure or timeout
    """
    with requests.get(url, timeout=(connect_timeout, read_timeout)) as response:
        logger.debug(f"GET {url} -> {response.status_code}")
        return response.status_code
