"""Shared fakes for the army book fetcher tests.

``FakeBrowser`` implements the browser session surface used by the catalog
walker, selection discoverer, snapshot handler and orchestrator, driven by a
small in-memory model of the resources listing and selection pages.
"""

from __future__ import annotations

import time
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

import pytest
from selenium.common.exceptions import StaleElementReferenceException, WebDriverException

from opr_data import config
from opr_data.error_handling import FetchError, NavigationTimeout


def resource_card(name: Optional[str], href: Optional[str], games: Sequence[str] = ()) -> str:
    parts = ['<div class="w-dyn-item">']
    if name is not None:
        parts.append(f'<div class="_1rem-text">{name}</div>')
    if href is not None:
        parts.append(f'<a class="w-button" href="{href}">Download</a>')
    for game in games:
        parts.append(f'<div fs-cmsfilter-field="game">{game}</div>')
    parts.append('</div>')
    return "".join(parts)


def menu_html(links: Sequence[Tuple[str, Optional[str]]]) -> str:
    items = []
    for name, href in links:
        if href is None:
            items.append(f'<li><a>{name}</a></li>')
        else:
            items.append(f'<li><a href="{href}">{name}</a></li>')
    return f'<ul class="MuiMenu-list">{"".join(items)}</ul>'


def menu_tile(label: str, links: Sequence[Tuple[str, Optional[str]]]) -> dict:
    return {"label": label, "kind": "menu", "html": menu_html(links)}


def nav_tile(label: str, url: str) -> dict:
    return {"label": label, "kind": "navigate", "url": url}


def dead_tile(label: str) -> dict:
    return {"label": label, "kind": "none"}


class FakeElement:
    def __init__(self, html: str):
        self.html = html

    def get_attribute(self, name: str):
        if name == "outerHTML":
            return self.html
        return None


class StaleElement:
    """An element whose node was replaced after it was queried."""

    def get_attribute(self, name: str):
        raise StaleElementReferenceException("stale element reference: element is not attached to the page document")


class FakeBrowser:
    """In-memory stand-in for WebPageHandler."""

    def __init__(self,
                 catalog_pages: Optional[List[List[Tuple[str, str]]]] = None,
                 selection_pages: Optional[Dict[str, List[dict]]] = None,
                 cookie_banner: bool = False,
                 failing_urls: Sequence[str] = (),
                 unreachable_urls: Sequence[str] = (),
                 failing_renders: Sequence[str] = (),
                 stuck_pagination: bool = False,
                 vanishing_tiles: Optional[Dict[str, int]] = None):
        # catalog_pages: per page, a list of (first-line text, card html); html None is a stale card
        self.catalog_pages = catalog_pages if catalog_pages is not None else [[]]
        self.selection_pages = selection_pages or {}
        self.cookie_banner = cookie_banner
        self.failing_urls = set(failing_urls)
        self.unreachable_urls = set(unreachable_urls)
        self.failing_renders = set(failing_renders)
        self.stuck_pagination = stuck_pagination
        # after this many tile reads on a page, the tile list shrinks to that size
        self.vanishing_tiles = vanishing_tiles or {}

        self.history: List[str] = ["about:blank"]
        self.catalog_index = 0
        self.menu_open: Optional[str] = None
        self.page_reads = 0
        self.navigations: List[str] = []
        self.renders: List[Tuple[str, Path]] = []
        self.keys: List[str] = []
        self.back_count = 0
        self.tile_clicks: Dict[str, int] = {}

    # helpers -------------------------------------------------------------

    @property
    def url(self) -> str:
        return self.history[-1]

    def _on_resources(self) -> bool:
        return self.url == config.RESOURCES_URL

    def _tiles(self) -> List[dict]:
        tiles = self.selection_pages.get(self.url, [])
        limit = self.vanishing_tiles.get(self.url)
        if limit is not None and self.tile_clicks.get(self.url, 0) >= limit:
            return tiles[:limit]
        return tiles

    def _first_text(self) -> Optional[str]:
        page = self.catalog_pages[self.catalog_index]
        return page[0][0] if page else None

    # session surface -----------------------------------------------------

    def navigate(self, url: str, timeout: Optional[float] = None) -> None:
        self.navigations.append(url)
        if url in self.failing_urls:
            raise NavigationTimeout(f"Page load timeout for {url}", url=url)
        if url in self.unreachable_urls:
            raise WebDriverException("unknown error: net::ERR_NAME_NOT_RESOLVED")
        self.history.append(url)
        self.menu_open = None
        if url == config.RESOURCES_URL:
            self.catalog_index = 0

    def wait_for_element(self, selector: str, timeout: float) -> bool:
        if selector == config.RESOURCE_LIST_SELECTOR:
            return self._on_resources()
        if selector == config.TILE_SELECTOR:
            return bool(self._tiles())
        if selector == config.MENU_SELECTOR:
            return self.menu_open is not None
        if selector == config.COOKIE_BUTTON_SELECTOR:
            return self.cookie_banner
        return False

    def query_all(self, selector: str) -> List[FakeElement]:
        if selector == config.RESOURCE_ITEM_SELECTOR and self._on_resources():
            self.page_reads += 1
            return [FakeElement(html) if html is not None else StaleElement()
                    for _, html in self.catalog_pages[self.catalog_index]]
        if selector == config.TILE_SELECTOR:
            return [FakeElement(tile["label"]) for tile in self._tiles()]
        if selector == config.MENU_SELECTOR and self.menu_open is not None:
            return [FakeElement(self.menu_open)]
        return []

    def evaluate(self, script: str, *args):
        if "tile.click()" in script:
            return self._click_tile(args[1])
        if "querySelector('p')" in script:
            tiles = self._tiles()
            index = args[1]
            return tiles[index]["label"] if index < len(tiles) else None
        if args and args[0] == config.NEXT_PAGE_SELECTOR:
            return self._on_resources() and self.catalog_index < len(self.catalog_pages) - 1
        if args and args[0] == config.FIRST_ITEM_SELECTOR:
            return self._first_text()
        raise AssertionError(f"Unexpected script: {script!r}")

    def _click_tile(self, index: int) -> bool:
        tiles = self._tiles()
        if index >= len(tiles):
            return False
        page = self.url
        self.tile_clicks[page] = self.tile_clicks.get(page, 0) + 1
        tile = tiles[index]
        if tile["kind"] == "menu":
            self.menu_open = tile["html"]
        elif tile["kind"] == "navigate":
            self.history.append(tile["url"])
        return True

    def click(self, selector: str) -> None:
        if selector == config.NEXT_PAGE_SELECTOR:
            if not self.stuck_pagination:
                self.catalog_index += 1
            return
        if selector == config.COOKIE_BUTTON_SELECTOR:
            self.cookie_banner = False
            return
        raise AssertionError(f"Unexpected click on {selector}")

    def press_key(self, key: str) -> None:
        self.keys.append(key)
        if key == "Escape":
            self.menu_open = None

    def current_url(self) -> str:
        return self.url

    def wait_for_url_change(self, old_url: str, timeout: float) -> bool:
        return self.url != old_url

    def wait_for_text_change(self, selector: str, old_text: Optional[str], timeout: float) -> None:
        current = self._first_text()
        if current is None or current == old_text:
            raise NavigationTimeout(f"Content of '{selector}' did not change within {timeout}s")

    def go_back(self, timeout: Optional[float] = None) -> None:
        self.back_count += 1
        if len(self.history) > 1:
            self.history.pop()
        self.menu_open = None

    def render_to_pdf(self, output_path: Path, *args, **kwargs) -> None:
        if self.url in self.failing_renders:
            raise FetchError("Failed to render page to PDF", url=self.url)
        Path(output_path).write_bytes(b"%PDF-1.7 fake")
        self.renders.append((self.url, Path(output_path)))

    def accept_cookie_banner(self, selector: str, timeout: float, settle_delay: float = 0.0) -> bool:
        if not self.wait_for_element(selector, timeout):
            return False
        self.click(selector)
        return True


class FakeDownloadHandler:
    """Records downloads and writes a small PDF for each."""

    def __init__(self, failing_urls: Sequence[str] = ()):
        self.failing_urls = set(failing_urls)
        self.calls: List[Tuple[str, Path]] = []

    def download(self, url: str, destination: Path) -> Path:
        self.calls.append((url, Path(destination)))
        if url in self.failing_urls:
            raise FetchError(f"Failed to get '{url}' (404)", url=url, status_code=404)
        Path(destination).write_bytes(b"%PDF-1.4 " + url.encode())
        return Path(destination)


def catalog_page(*cards: Tuple[str, Optional[str], Sequence[str]]) -> List[Tuple[str, str]]:
    """Build one listing page from (name, href, games) triples."""
    return [(name or "", resource_card(name, href, games)) for name, href, games in cards]


@pytest.fixture(autouse=True)
def no_sleep(monkeypatch):
    monkeypatch.setattr(time, "sleep", lambda seconds: None)


@pytest.fixture
def run_date() -> str:
    return "2024-06-01"
