"""
Renders army book preview pages to PDF.
"""

import time
import logging
from pathlib import Path

from selenium.common.exceptions import WebDriverException

from ...config import PREVIEW_TIMEOUT, PREVIEW_SETTLE_DELAY
from ...error_handling import FetchError, NavigationTimeout

logger = logging.getLogger(__name__)


class SnapshotHandler:
    """Turns a live preview page into a PDF file using the shared browser."""

    def __init__(self, timeout: float = PREVIEW_TIMEOUT, settle_delay: float = PREVIEW_SETTLE_DELAY):
        self.timeout = timeout
        self.settle_delay = settle_delay

    def snapshot(self, web, preview_url: str, destination: Path) -> Path:
        """
        Load preview_url and print it to destination.

        Raises:
            FetchError: if the page does not load or cannot be rendered
        """
        try:
            web.navigate(preview_url, timeout=self.timeout)
        except (NavigationTimeout, WebDriverException) as e:
            raise FetchError(f"Preview did not load: {e}", url=preview_url) from e

        # The preview keeps laying out client side after the load completes
        time.sleep(self.settle_delay)

        web.render_to_pdf(Path(destination))
        return Path(destination)
