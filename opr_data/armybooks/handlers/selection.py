"""
Discovers the army books offered on a game system's selection page.

A tile either opens a menu of sub-factions or navigates straight to a
single army. Tiles are addressed by index and re-read from the live page
on every iteration, since returning from a navigation replaces them.
"""

import time
import logging
from typing import List

from bs4 import BeautifulSoup

from ..utils import extract_id_param, entry_from_url
from ...config import (
    TILE_SELECTOR,
    MENU_SELECTOR,
    TILE_TIMEOUT,
    MENU_TIMEOUT,
    NAVIGATION_TIMEOUT,
    PAGE_LOAD_TIMEOUT,
    MENU_SETTLE_DELAY,
)
from ...error_handling import ElementNotFound, safe_execute
from ...models import ClickOutcome, ProductLine, SelectionEntry

logger = logging.getLogger(__name__)

_TILE_LABEL_JS = """
const tile = document.querySelectorAll(arguments[0])[arguments[1]];
if (!tile) return null;
const label = tile.querySelector('p');
return label ? label.textContent.trim() : 'Unknown Tile';
"""

_CLICK_TILE_JS = """
const tile = document.querySelectorAll(arguments[0])[arguments[1]];
if (!tile) return false;
tile.click();
return true;
"""


def parse_menu_links(html: str, id_param: str) -> List[SelectionEntry]:
    """
    Turn a sub-faction menu into entries.

    Links whose href lacks id_param are dropped.
    """
    soup = BeautifulSoup(html or "", "html.parser")
    entries = []
    for link in soup.find_all("a"):
        identifier = extract_id_param(link.get("href") or "", id_param)
        if not identifier:
            continue
        name = link.get_text(strip=True) or identifier
        entries.append(SelectionEntry(display_name=name, identifier=identifier))
    return entries


class SelectionDiscoverer:
    """
    Enumerates concrete army books for one product line.
    """

    def __init__(self,
                 tile_timeout: float = TILE_TIMEOUT,
                 menu_timeout: float = MENU_TIMEOUT,
                 navigation_timeout: float = NAVIGATION_TIMEOUT,
                 back_timeout: float = PAGE_LOAD_TIMEOUT,
                 menu_settle_delay: float = MENU_SETTLE_DELAY):
        self.tile_timeout = tile_timeout
        self.menu_timeout = menu_timeout
        self.navigation_timeout = navigation_timeout
        self.back_timeout = back_timeout
        self.menu_settle_delay = menu_settle_delay

    def discover(self, web, product_line: ProductLine) -> List[SelectionEntry]:
        """
        Click through every tile on the current selection page.

        Args:
            web: Browser session already showing the selection page
            product_line: Line whose id parameter is used for parsing

        Returns:
            Entries in discovery order

        Raises:
            ElementNotFound: if the page shows no tiles at all
        """
        if not web.wait_for_element(TILE_SELECTOR, self.tile_timeout):
            raise ElementNotFound(TILE_SELECTOR, self.tile_timeout)

        selection_url = web.current_url()
        tile_count = len(web.query_all(TILE_SELECTOR))
        logger.info(f"Found {tile_count} army book tiles. Checking each for sub-factions...")

        entries: List[SelectionEntry] = []
        for index in range(tile_count):
            outcome = self.process_tile(web, product_line, index, tile_count, selection_url)
            entries.extend(outcome.entries)

        logger.info(f"Discovery complete. Total army books for {product_line.name}: {len(entries)}")
        return entries

    def process_tile(self, web, product_line: ProductLine, index: int,
                     tile_count: int, selection_url: str) -> ClickOutcome:
        if not web.wait_for_element(TILE_SELECTOR, self.tile_timeout):
            logger.warning(f"Tiles disappeared before tile {index + 1}; skipping it")
            return ClickOutcome(kind="neither")

        label = web.evaluate(_TILE_LABEL_JS, TILE_SELECTOR, index)
        if label is None:
            logger.warning(f"Tile {index + 1}/{tile_count} no longer exists; skipping it")
            return ClickOutcome(kind="neither")
        logger.info(f"Processing tile {index + 1}/{tile_count}: \"{label}\"")

        if not web.evaluate(_CLICK_TILE_JS, TILE_SELECTOR, index):
            return ClickOutcome(kind="neither")

        outcome = self.probe_click_outcome(web, product_line, selection_url)
        if outcome.kind == "menu":
            logger.info(f"      -> Found {len(outcome.entries)} sub-factions")
        elif outcome.kind == "direct":
            logger.info(f"      -> Found single army: {outcome.entries[0].display_name}")
        else:
            logger.info("      -> Tile produced no army book")
        return outcome

    def probe_click_outcome(self, web, product_line: ProductLine, selection_url: str) -> ClickOutcome:
        """
        Decide what a tile click did.

        A menu appearing within the short menu window wins; otherwise the
        click is assumed to have navigated and the new URL is read.
        """
        if web.wait_for_element(MENU_SELECTOR, self.menu_timeout):
            logger.info("   -> Sub-faction menu found. Scraping menu items...")
            entries = self._read_menu(web, product_line)
            safe_execute(web.press_key, "Escape", error_msg="Could not dismiss sub-faction menu")
            time.sleep(self.menu_settle_delay)
            return ClickOutcome(kind="menu", entries=entries)

        logger.info("   -> No sub-faction menu. Extracting army from the page URL...")
        web.wait_for_url_change(selection_url, self.navigation_timeout)
        current_url = web.current_url()
        entry = entry_from_url(current_url, product_line.id_param)

        if current_url != selection_url:
            logger.info("   -> Navigating back to army selection page...")
            web.go_back(self.back_timeout)

        if entry is None:
            return ClickOutcome(kind="neither")
        return ClickOutcome(kind="direct", entries=[entry])

    def _read_menu(self, web, product_line: ProductLine) -> List[SelectionEntry]:
        menus = web.query_all(MENU_SELECTOR)
        if not menus:
            return []
        return parse_menu_links(menus[0].get_attribute("outerHTML"), product_line.id_param)
