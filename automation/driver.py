"""
Appium driver helpers shared by the UI tests.
"""

import logging
import time
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Tuple

from appium import webdriver
from appium.options.common import AppiumOptions
from selenium.common.exceptions import TimeoutException, WebDriverException
from selenium.webdriver.remote.webelement import WebElement
from selenium.webdriver.support import expected_conditions as EC
from selenium.webdriver.support.ui import WebDriverWait


logger = logging.getLogger(__name__)


# (by, value) pair, e.g. (AppiumBy.ACCESSIBILITY_ID, "Alarm")
Locator = Tuple[str, str]

IMPLICIT_WAIT_SECONDS = 10


def create_driver(
    server_url: str,
    capabilities: Dict[str, Any],
    implicit_wait: float = IMPLICIT_WAIT_SECONDS
) -> webdriver.Remote:
    """
    Open an Appium session.

    Args:
        server_url: Appium server URL
        capabilities: W3C capability dictionary
        implicit_wait: Implicit element wait in seconds

    Returns:
        Connected driver
    """
    logger.info(f"Connecting to Appium server at: {server_url}")
    options = AppiumOptions().load_capabilities(capabilities)
    driver = webdriver.Remote(server_url, options=options)
    driver.implicitly_wait(implicit_wait)
    logger.debug(f"Driver session {driver.session_id} created")
    return driver


def quit_driver(driver: Optional[webdriver.Remote]) -> None:
    """Close a driver session; failures are logged, not raised."""
    if driver is None:
        return
    try:
        driver.quit()
        logger.info("Driver quit successfully")
    except WebDriverException as e:
        logger.error(f"Error while quitting the driver: {e}")


def find_first_present(
    driver: webdriver.Remote,
    locators: Sequence[Locator],
    timeout: float
) -> Optional[WebElement]:
    """
    Try several locators in order and return the first element present.

    Args:
        driver: Active driver
        locators: Candidate (by, value) pairs
        timeout: Seconds to wait per locator

    Returns:
        First element found, or None
    """
    wait = WebDriverWait(driver, timeout)
    for locator in locators:
        try:
            element = wait.until(EC.presence_of_element_located(locator))
            logger.info(f"Found element with locator: {locator}")
            return element
        except TimeoutException:
            logger.debug(f"Element not found with locator: {locator}")
    return None


def wait_for_page_without(driver: webdriver.Remote, text: str, timeout: float) -> None:
    """Wait until the page source no longer contains `text`."""
    WebDriverWait(driver, timeout).until(lambda d: text not in d.page_source)


def save_screenshot(
    driver: webdriver.Remote,
    name: str,
    directory: Path = Path("screenshots")
) -> Optional[Path]:
    """
    Save a screenshot named after the test step.

    Returns:
        Screenshot path, or None if the driver could not take one
    """
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / f"{name}_{time.strftime('%Y%m%d_%H%M%S')}.png"
    try:
        if driver.get_screenshot_as_file(str(path)):
            logger.info(f"Screenshot saved: {path}")
            return path
    except WebDriverException as e:
        logger.warning(f"Could not take screenshot '{name}': {e}")
    return None
