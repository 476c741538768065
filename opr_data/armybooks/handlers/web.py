"""
Browser session handling for the army book fetcher.

Wraps a single Selenium Chrome driver behind the handful of operations the
catalog walker, selection discoverer and snapshot renderer need.
"""

import time
import base64
import logging
from pathlib import Path
from typing import Any, List, Optional, Tuple
from selenium import webdriver
from selenium.webdriver.common.by import By
from selenium.webdriver.common.keys import Keys
from selenium.webdriver.remote.webelement import WebElement
from selenium.webdriver.support.ui import WebDriverWait
from selenium.webdriver.support import expected_conditions as EC
from selenium.webdriver.chrome.options import Options
from selenium.common.exceptions import TimeoutException, WebDriverException

from ...config import (
    HEADLESS_BROWSER,
    PAGE_LOAD_TIMEOUT,
    USER_AGENT,
    PDF_PAPER_SIZE,
    PDF_MARGIN_PX,
    PDF_PRINT_BACKGROUND,
)
from ...error_handling import NavigationTimeout, FetchError, FilesystemError

logger = logging.getLogger(__name__)

# Text of the first element matching a selector, or null
_FIRST_TEXT_JS = """
const el = document.querySelector(arguments[0]);
return el ? el.textContent.trim() : null;
"""


class WebPageHandler:
    """
    Handles browser automation for one run: navigation, waits, clicks and PDF rendering.
    """

    def __init__(self, headless: bool = HEADLESS_BROWSER, timeout: int = PAGE_LOAD_TIMEOUT):
        """
        Initialize the web page handler.

        Args:
            headless: Whether to run browser in headless mode
            timeout: Default page load timeout in seconds
        """
        self.headless = headless
        self.timeout = timeout
        self.driver = None

    def setup_driver(self) -> None:
        """Set up the Chrome WebDriver with appropriate options."""
        try:
            chrome_options = Options()

            if self.headless:
                chrome_options.add_argument("--headless=new")

            chrome_options.add_argument("--no-sandbox")
            chrome_options.add_argument("--disable-dev-shm-usage")
            chrome_options.add_argument("--disable-gpu")
            chrome_options.add_argument("--window-size=1920,1080")
            chrome_options.add_argument(f"--user-agent={USER_AGENT}")
            chrome_options.add_argument("--disable-blink-features=AutomationControlled")
            chrome_options.add_experimental_option("excludeSwitches", ["enable-automation"])

            self.driver = webdriver.Chrome(options=chrome_options)
            self.driver.set_page_load_timeout(self.timeout)

            logger.info("Chrome WebDriver initialized successfully")

        except Exception as e:
            logger.error(f"Failed to initialize Chrome WebDriver: {e}")
            raise

    def _wait_until_idle(self, timeout: float) -> None:
        WebDriverWait(self.driver, timeout).until(
            lambda d: d.execute_script("return document.readyState") == "complete"
        )

    def navigate(self, url: str, timeout: Optional[float] = None) -> None:
        """
        Navigate to a URL and wait for the document to finish loading.

        Raises:
            NavigationTimeout: if the page does not load within the timeout
            FetchError: if the browser cannot load the page at all
        """
        timeout = timeout or self.timeout
        logger.info(f"Navigating to: {url}")
        try:
            self.driver.set_page_load_timeout(timeout)
            self.driver.get(url)
            self._wait_until_idle(timeout)
        except TimeoutException as e:
            raise NavigationTimeout(f"Page load timeout after {timeout}s for {url}", url=url) from e
        except WebDriverException as e:
            raise FetchError(f"Failed to load {url}: {e.msg or e}", url=url) from e
        finally:
            self.driver.set_page_load_timeout(self.timeout)

    def wait_for_element(self, selector: str, timeout: float) -> bool:
        """Wait for a CSS selector to match. Returns False on timeout."""
        try:
            WebDriverWait(self.driver, timeout).until(
                EC.presence_of_element_located((By.CSS_SELECTOR, selector))
            )
            return True
        except TimeoutException:
            return False

    def query_all(self, selector: str) -> List[WebElement]:
        return self.driver.find_elements(By.CSS_SELECTOR, selector)

    def evaluate(self, script: str, *args) -> Any:
        """Run a script in the page; positional args are available as arguments[n]."""
        return self.driver.execute_script(script, *args)

    def click(self, selector: str) -> None:
        self.driver.find_element(By.CSS_SELECTOR, selector).click()

    def press_key(self, key: str) -> None:
        """Send a named key (e.g. "Escape") to the focused document."""
        keys = {"Escape": Keys.ESCAPE, "Enter": Keys.ENTER}
        self.driver.find_element(By.TAG_NAME, "body").send_keys(keys.get(key, key))

    def current_url(self) -> str:
        return self.driver.current_url

    def wait_for_url_change(self, old_url: str, timeout: float) -> bool:
        """
        Wait for the location to move away from old_url and the new page to load.

        Returns False if nothing changed within the timeout.
        """
        try:
            WebDriverWait(self.driver, timeout).until(EC.url_changes(old_url))
            self._wait_until_idle(timeout)
            return True
        except TimeoutException:
            return False

    def wait_for_text_change(self, selector: str, old_text: Optional[str], timeout: float) -> None:
        """
        Block until the first element matching selector exists with text other than old_text.

        Raises:
            NavigationTimeout: if the content never changed
        """
        try:
            WebDriverWait(self.driver, timeout).until(
                lambda d: d.execute_script(_FIRST_TEXT_JS, selector) not in (None, old_text)
            )
        except TimeoutException as e:
            raise NavigationTimeout(
                f"Content of '{selector}' did not change within {timeout}s",
                url=self.current_url(),
            ) from e

    def go_back(self, timeout: Optional[float] = None) -> None:
        timeout = timeout or self.timeout
        self.driver.back()
        try:
            self._wait_until_idle(timeout)
        except TimeoutException as e:
            raise NavigationTimeout(f"Back navigation did not settle within {timeout}s") from e

    def render_to_pdf(self, output_path: Path,
                      paper_size: Tuple[float, float] = PDF_PAPER_SIZE,
                      margin_px: int = PDF_MARGIN_PX,
                      print_background: bool = PDF_PRINT_BACKGROUND) -> None:
        """
        Print the current page to a PDF file through the DevTools protocol.

        Args:
            output_path: Where to write the PDF
            paper_size: (width, height) in inches
            margin_px: Margin on every side in CSS pixels
            print_background: Whether to include background graphics
        """
        margin_in = margin_px / 96.0
        try:
            result = self.driver.execute_cdp_cmd("Page.printToPDF", {
                "paperWidth": paper_size[0],
                "paperHeight": paper_size[1],
                "marginTop": margin_in,
                "marginBottom": margin_in,
                "marginLeft": margin_in,
                "marginRight": margin_in,
                "printBackground": print_background,
            })
            content = base64.b64decode(result["data"])
        except (WebDriverException, KeyError) as e:
            raise FetchError(f"Failed to render page to PDF: {e}", url=self.current_url()) from e

        try:
            with open(output_path, "wb") as f:
                f.write(content)
        except OSError as e:
            raise FilesystemError(f"Could not write {output_path}: {e}", path=output_path) from e
        logger.info(f"Rendered PDF: {output_path} ({len(content) / (1024 * 1024):.2f}MB)")

    def accept_cookie_banner(self, selector: str, timeout: float, settle_delay: float = 0.0) -> bool:
        """
        Click the cookie consent button if it shows up in time.

        Returns True if the banner was found and clicked.
        """
        if not self.wait_for_element(selector, timeout):
            return False
        self.click(selector)
        if settle_delay:
            time.sleep(settle_delay)
        return True

    def cleanup(self) -> None:
        """Clean up resources."""
        if self.driver:
            try:
                self.driver.quit()
                logger.info("WebDriver closed successfully")
            except Exception as e:
                logger.warning(f"Error closing WebDriver: {e}")
            finally:
                self.driver = None

    def __enter__(self):
        """Context manager entry."""
        self.setup_driver()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.cleanup()
