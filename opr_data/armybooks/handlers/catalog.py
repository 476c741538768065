"""
Walks the paginated resources listing and downloads every core rulebook.

Each listed resource can be tagged for several game systems; it is saved
once into each of their folders.
"""

import time
import logging
from pathlib import Path
from typing import List, Optional
from urllib.parse import urljoin

from bs4 import BeautifulSoup
from selenium.common.exceptions import WebDriverException

from .download import DownloadHandler
from ..utils import resolve_directory, resolve_file, target_exists
from ...config import (
    RESOURCES_URL,
    PAGE_LOAD_TIMEOUT,
    CATALOG_TIMEOUT,
    PAGE_SETTLE_DELAY,
    RESOURCE_LIST_SELECTOR,
    RESOURCE_ITEM_SELECTOR,
    RESOURCE_NAME_SELECTOR,
    RESOURCE_LINK_SELECTOR,
    RESOURCE_GAME_SELECTOR,
    NEXT_PAGE_SELECTOR,
    FIRST_ITEM_SELECTOR,
)
from ...error_handling import ElementNotFound, FetchError
from ...models import CatalogEntry, FetchResult

logger = logging.getLogger(__name__)

_NEXT_VISIBLE_JS = """
const btn = document.querySelector(arguments[0]);
return !!btn && window.getComputedStyle(btn).display !== 'none';
"""

_FIRST_TEXT_JS = """
const el = document.querySelector(arguments[0]);
return el ? el.textContent.trim() : null;
"""


def parse_catalog_item(html: str, base_url: str) -> Optional[CatalogEntry]:
    """
    Parse one resource card.

    Cards without a name or a download button are decorative and give None.
    """
    soup = BeautifulSoup(html or "", "html.parser")
    name_el = soup.select_one(RESOURCE_NAME_SELECTOR)
    link_el = soup.select_one(RESOURCE_LINK_SELECTOR)
    if name_el is None or link_el is None:
        return None

    name = name_el.get_text(strip=True)
    href = (link_el.get("href") or "").strip()
    if not name or not href or href.startswith("#"):
        return None

    games = {el.get_text(strip=True) for el in soup.select(RESOURCE_GAME_SELECTOR)}
    games.discard("")
    return CatalogEntry(
        document_name=name,
        download_url=urljoin(base_url, href),
        tagged_product_lines=games,
    )


class CatalogWalker:
    """
    Enumerates the resources listing page by page.
    """

    def __init__(self, download_handler: DownloadHandler,
                 resources_url: str = RESOURCES_URL,
                 timeout: float = CATALOG_TIMEOUT,
                 settle_delay: float = PAGE_SETTLE_DELAY,
                 stop_on_item_error: bool = False):
        self.download_handler = download_handler
        self.resources_url = resources_url
        self.timeout = timeout
        self.settle_delay = settle_delay
        self.stop_on_item_error = stop_on_item_error

    def walk(self, web, output_root: Path, run_date: str) -> List[FetchResult]:
        """
        Download every tagged resource across all pages.

        Args:
            web: Browser session
            output_root: Directory holding the per-game folders
            run_date: Run date stamp

        Returns:
            One FetchResult per (resource, game) pair

        Raises:
            ElementNotFound: if the listing never appears
            NavigationTimeout: if a next page never loads
            FetchError: if a download fails and stop_on_item_error is set
        """
        logger.info(f"--- Processing Core Rulebooks & Resources from {self.resources_url} ---")
        web.navigate(self.resources_url, timeout=PAGE_LOAD_TIMEOUT)
        if not web.wait_for_element(RESOURCE_LIST_SELECTOR, self.timeout):
            raise ElementNotFound(RESOURCE_LIST_SELECTOR, self.timeout)

        results: List[FetchResult] = []
        page_num = 1
        while True:
            logger.info(f"[Catalog] Scraping resources page {page_num}...")
            entries = self.read_page(web)
            logger.info(f"[Catalog] Found {len(entries)} downloadable resources on this page")

            for entry in entries:
                results.extend(self.fetch_entry(entry, output_root, run_date))

            if not web.evaluate(_NEXT_VISIBLE_JS, NEXT_PAGE_SELECTOR):
                logger.info("[Catalog] No more pages to process")
                break

            page_num += 1
            logger.info("[Catalog] Navigating to next page...")
            witness = web.evaluate(_FIRST_TEXT_JS, FIRST_ITEM_SELECTOR)
            web.click(NEXT_PAGE_SELECTOR)
            web.wait_for_text_change(FIRST_ITEM_SELECTOR, witness, self.timeout)
            time.sleep(self.settle_delay)

        return results

    def read_page(self, web) -> List[CatalogEntry]:
        base_url = web.current_url()
        entries = []
        for item in web.query_all(RESOURCE_ITEM_SELECTOR):
            try:
                html = item.get_attribute("outerHTML")
            except WebDriverException as e:
                logger.debug(f"[Catalog] Skipping unreadable resource card: {e}")
                continue
            entry = parse_catalog_item(html, base_url)
            if entry is not None:
                entries.append(entry)
        return entries

    def fetch_entry(self, entry: CatalogEntry, output_root: Path, run_date: str) -> List[FetchResult]:
        results = []
        for game_name in sorted(entry.tagged_product_lines):
            start = time.time()
            directory = resolve_directory(output_root, game_name, run_date)
            target = resolve_file(directory, entry.document_name)

            if target_exists(target.full_path):
                logger.info(f"   -> Skipping \"{entry.document_name}\" for \"{game_name}\" (already exists)")
                results.append(FetchResult(
                    item_name=entry.document_name,
                    product_line=game_name,
                    success=True,
                    method="already_exists",
                    file_path=str(target.full_path),
                ))
                continue

            logger.info(f"   -> Downloading \"{entry.document_name}\" for \"{game_name}\"...")
            try:
                self.download_handler.download(entry.download_url, target.full_path)
            except FetchError as e:
                if self.stop_on_item_error:
                    raise
                results.append(FetchResult(
                    item_name=entry.document_name,
                    product_line=game_name,
                    success=False,
                    method="error",
                    error_message=str(e),
                    processing_time=time.time() - start,
                ))
                continue
            results.append(FetchResult(
                item_name=entry.document_name,
                product_line=game_name,
                success=True,
                method="download",
                file_path=str(target.full_path),
                processing_time=time.time() - start,
            ))
        return results
