"""
Handlers for the different parts of army book fetching.

This module contains specialized handlers for:
- Browser session control
- Direct file downloads
- Preview page PDF rendering
- Resources catalog pagination
- Army selection discovery
"""

from .web import WebPageHandler
from .download import DownloadHandler
from .snapshot import SnapshotHandler
from .catalog import CatalogWalker, parse_catalog_item
from .selection import SelectionDiscoverer, parse_menu_links

__all__ = [
    "WebPageHandler",
    "DownloadHandler",
    "SnapshotHandler",
    "CatalogWalker",
    "parse_catalog_item",
    "SelectionDiscoverer",
    "parse_menu_links",
]
