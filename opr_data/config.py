"""
Configuration settings for the One Page Rules army book fetcher.
"""

import os
from pathlib import Path

from .models import ProductLine

# Project paths
PROJECT_ROOT = Path(__file__).parent.parent  # Go up one level to workspace root
# Army book folders land directly under the working directory unless overridden
OUTPUT_DIR = Path(os.environ.get("OPR_OUTPUT_DIR", os.getcwd()))
# Logs directory for optional per-run log files
LOGS_DIR = PROJECT_ROOT / "opr_data_cache" / "logs"

# Site endpoints
SCRAPE_URL_BASE = "https://army-forge.onepagerules.com"
PREVIEW_URL_BASE = "https://army-forge-studio.onepagerules.com"
RESOURCES_URL = "https://www.onepagerules.com/resources"

# Game systems whose army books are snapshotted
PRODUCT_LINES = [
    ProductLine(identifier=2, name="Grimdark Future"),
    ProductLine(identifier=3, name="Grimdark Future Firefight"),
    ProductLine(identifier=4, name="Age of Fantasy"),
    ProductLine(identifier=5, name="Age of Fantasy Skirmish"),
    ProductLine(identifier=6, name="Age of Fantasy Regiments"),
    ProductLine(identifier=None, name="Warfleets FTL", uses_alternate_id_param=True),
]

# Warfleets FTL has no gameSystem id of its own but previews under this one
FTL_PREVIEW_GAME_ID = 6

# Selenium configuration
HEADLESS_BROWSER = os.environ.get("OPR_HEADLESS", "1").lower() not in ("0", "false", "no")
USER_AGENT = "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"

# Bounded waits, in seconds
PAGE_LOAD_TIMEOUT = 60
CATALOG_TIMEOUT = 30
TILE_TIMEOUT = 30
MENU_TIMEOUT = 2
NAVIGATION_TIMEOUT = 10
PREVIEW_TIMEOUT = 60
COOKIE_TIMEOUT = 5

# Settle delays, in seconds
PAGE_SETTLE_DELAY = 1.0
MENU_SETTLE_DELAY = 0.5
PREVIEW_SETTLE_DELAY = 2.0
COOKIE_SETTLE_DELAY = 1.5

# Direct downloads
DOWNLOAD_TIMEOUT = 60
DOWNLOAD_CHUNK_SIZE = 64 * 1024

# PDF rendering (A4 in inches, margins in CSS pixels)
PDF_PAPER_SIZE = (8.27, 11.69)
PDF_MARGIN_PX = 20
PDF_PRINT_BACKGROUND = True

# Resources listing selectors
RESOURCE_LIST_SELECTOR = ".resourses__col-list"
RESOURCE_ITEM_SELECTOR = ".w-dyn-item"
RESOURCE_NAME_SELECTOR = "._1rem-text"
RESOURCE_LINK_SELECTOR = "a.w-button"
RESOURCE_GAME_SELECTOR = 'div[fs-cmsfilter-field="game"]'
NEXT_PAGE_SELECTOR = "a.w-pagination-next"
FIRST_ITEM_SELECTOR = ".w-dyn-item:first-child ._1rem-text"

# Army selection selectors
TILE_SELECTOR = ".army-book-tile"
MENU_SELECTOR = ".MuiMenu-list"
COOKIE_BUTTON_SELECTOR = "#onetrust-accept-btn-handler"

# Query parameters that may carry a display name after a tile navigates
NAME_PARAMS = ("armyName", "fleetName")
