"""
Army book orchestrator using LangGraph to coordinate each product line.

The resources catalog is walked once up front. Every game system then runs
through the same small graph (open selection page, dismiss cookie banner,
discover army books, fetch them) so the order of steps stays explicit.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Any, List, Optional, Sequence, TypedDict

from langgraph.graph import StateGraph, END

from .handlers import (
    CatalogWalker,
    DownloadHandler,
    SelectionDiscoverer,
    SnapshotHandler,
)
from .utils import (
    build_preview_url,
    build_selection_url,
    format_run_date,
    resolve_directory,
    resolve_file,
    target_exists,
)
from ..config import (
    OUTPUT_DIR,
    PRODUCT_LINES,
    PAGE_LOAD_TIMEOUT,
    COOKIE_BUTTON_SELECTOR,
    COOKIE_TIMEOUT,
    COOKIE_SETTLE_DELAY,
)
from ..error_handling import FetchError, FilesystemError, safe_execute
from ..models import FetchResult, ProductLine, SelectionEntry


logger = logging.getLogger(__name__)


class LineState(TypedDict, total=False):
    web: Any
    product_line: ProductLine
    entries: List[SelectionEntry]
    results: List[FetchResult]


class ArmyBookOrchestrator:
    """Runs the catalog walk and then every product line, one at a time."""

    def __init__(self,
                 output_dir: Path = OUTPUT_DIR,
                 run_date: Optional[str] = None,
                 product_lines: Sequence[ProductLine] = PRODUCT_LINES,
                 stop_on_item_error: bool = False,
                 download_handler: Optional[DownloadHandler] = None,
                 snapshot_handler: Optional[SnapshotHandler] = None,
                 discoverer: Optional[SelectionDiscoverer] = None,
                 catalog_walker: Optional[CatalogWalker] = None):
        self.output_dir = Path(output_dir)
        self.run_date = run_date or format_run_date()
        self.product_lines = list(product_lines)
        self.stop_on_item_error = stop_on_item_error

        # Handlers reused across nodes
        self._owns_download_handler = download_handler is None
        self.download_handler = download_handler or DownloadHandler()
        self.snapshot_handler = snapshot_handler or SnapshotHandler()
        self.discoverer = discoverer or SelectionDiscoverer()
        self.catalog_walker = catalog_walker or CatalogWalker(
            self.download_handler, stop_on_item_error=stop_on_item_error
        )

        self.graph = self._build_graph()

    def _build_graph(self):
        graph = StateGraph(LineState)

        def open_selection_page(state: LineState) -> LineState:
            line = state["product_line"]
            url = build_selection_url(line)
            state["web"].navigate(url, timeout=PAGE_LOAD_TIMEOUT)
            return {}

        def dismiss_cookie_banner(state: LineState) -> LineState:
            web = state["web"]
            dismissed = safe_execute(
                web.accept_cookie_banner,
                COOKIE_BUTTON_SELECTOR,
                COOKIE_TIMEOUT,
                COOKIE_SETTLE_DELAY,
                default_return=False,
                error_msg="Cookie banner could not be dismissed",
            )
            if dismissed:
                logger.info("Cookie banner found. Clicked \"Accept\"")
            else:
                logger.info("Cookie banner not found or already accepted")
            return {}

        def discover_entries(state: LineState) -> LineState:
            entries = self.discoverer.discover(state["web"], state["product_line"])
            return {"entries": entries}

        def fetch_entries(state: LineState) -> LineState:
            line = state["product_line"]
            entries = state.get("entries") or []
            directory = resolve_directory(self.output_dir, line.name, self.run_date)
            results = []
            for i, entry in enumerate(entries):
                results.append(self.fetch_entry(state["web"], line, entry, directory, i, len(entries)))
            return {"results": results}

        def route_after_discovery(state: LineState) -> str:
            return "fetch" if state.get("entries") else "done"

        graph.add_node("open_selection_page", open_selection_page)
        graph.add_node("dismiss_cookie_banner", dismiss_cookie_banner)
        graph.add_node("discover_entries", discover_entries)
        graph.add_node("fetch_entries", fetch_entries)

        graph.add_edge("open_selection_page", "dismiss_cookie_banner")
        graph.add_edge("dismiss_cookie_banner", "discover_entries")
        graph.add_conditional_edges(
            "discover_entries",
            route_after_discovery,
            {"fetch": "fetch_entries", "done": END},
        )
        graph.add_edge("fetch_entries", END)

        graph.set_entry_point("open_selection_page")
        return graph.compile()

    def fetch_entry(self, web, line: ProductLine, entry: SelectionEntry,
                    directory: Path, index: int, total: int) -> FetchResult:
        start = time.time()
        target = resolve_file(directory, entry.display_name, self.run_date)

        if target_exists(target.full_path):
            logger.info(f"({index + 1}/{total}) Skipping \"{entry.display_name}\" (already exists)")
            return FetchResult(
                item_name=entry.display_name,
                product_line=line.name,
                success=True,
                method="already_exists",
                file_path=str(target.full_path),
            )

        preview_url = build_preview_url(entry, line)
        logger.info(f"({index + 1}/{total}) Generating PDF for \"{entry.display_name}\" from {preview_url}")
        try:
            self.snapshot_handler.snapshot(web, preview_url, target.full_path)
        except FetchError as e:
            if self.stop_on_item_error:
                raise
            logger.error(f"   -> Failed to snapshot \"{entry.display_name}\": {e}")
            return FetchResult(
                item_name=entry.display_name,
                product_line=line.name,
                success=False,
                method="error",
                error_message=str(e),
                processing_time=time.time() - start,
            )

        logger.info(f"   -> Saved: {target.full_path}")
        return FetchResult(
            item_name=entry.display_name,
            product_line=line.name,
            success=True,
            method="snapshot",
            file_path=str(target.full_path),
            processing_time=time.time() - start,
        )

    def process_product_line(self, web, line: ProductLine) -> List[FetchResult]:
        """
        Run one product line through the graph.

        Any failure other than a filesystem one is logged and reported as a
        single failed result so the next line can run.
        """
        logger.info(f"--- Processing Army Books for: {line.name} ---")
        start = time.time()
        state: LineState = {"web": web, "product_line": line, "entries": [], "results": []}
        try:
            final: LineState = self.graph.invoke(state)
        except FilesystemError:
            raise
        except Exception as e:
            logger.error(f"An error occurred while processing army books for {line.name}: {e}")
            return [FetchResult(
                item_name=line.name,
                product_line=line.name,
                success=False,
                method="error",
                error_message=str(e),
                processing_time=time.time() - start,
            )]
        return final.get("results") or []

    def run(self, web) -> List[FetchResult]:
        """
        Fetch the catalog and then every configured product line.

        Args:
            web: Open browser session owned by the caller

        Returns:
            Results for every catalog document and army book touched

        Raises:
            Any catalog failure, and FilesystemError from any stage
        """
        logger.info(f"Run date: {self.run_date}, output directory: {self.output_dir}")
        try:
            results: List[FetchResult] = self.catalog_walker.walk(web, self.output_dir, self.run_date)

            for line in self.product_lines:
                results.extend(self.process_product_line(web, line))
            return results
        finally:
            if self._owns_download_handler:
                self.download_handler.close()
