"""
Main CLI entry point for OPR Data package.
"""

import argparse
import logging
from collections import Counter
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Sequence

from ..config import OUTPUT_DIR, PRODUCT_LINES, HEADLESS_BROWSER
from ..armybooks import ArmyBookOrchestrator
from ..armybooks.handlers import WebPageHandler
from ..armybooks.utils import build_selection_url
from ..logging_config import setup_logging
from ..models import FetchResult, ProductLine

logger = logging.getLogger(__name__)


def select_product_lines(names: Optional[Sequence[str]],
                         lines: Sequence[ProductLine] = PRODUCT_LINES) -> List[ProductLine]:
    """
    Restrict the configured lines to the given names (case-insensitive).

    Raises:
        ValueError: if a name matches no configured line
    """
    if not names:
        return list(lines)
    by_name = {line.name.lower(): line for line in lines}
    selected = []
    for name in names:
        line = by_name.get(name.strip().lower())
        if line is None:
            raise ValueError(f"Unknown product line: {name!r}")
        if line not in selected:
            selected.append(line)
    return selected


def summarize_results(results: List[FetchResult]) -> dict:
    counts = Counter(r.method for r in results)
    return {
        'downloaded': counts.get('download', 0),
        'snapshotted': counts.get('snapshot', 0),
        'skipped': counts.get('already_exists', 0),
        'failed': sum(1 for r in results if not r.success),
    }


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Download One Page Rules rulebooks and army books as PDFs")
    parser.add_argument("--output-dir", type=Path, default=OUTPUT_DIR, help="Directory for the per-game folders")
    parser.add_argument("--date", type=str, default=None, help="Run date stamp (YYYY-MM-DD), defaults to today")
    parser.add_argument("--only", action="append", default=None, metavar="NAME",
                        help="Only process this game system (repeatable)")
    parser.add_argument("--headed", action="store_true", help="Show the browser window")
    parser.add_argument("--stop-on-item-error", action="store_true",
                        help="Abandon the rest of a game system after one failed army book")
    parser.add_argument("--list-lines", action="store_true", help="Only list configured game systems and exit")
    parser.add_argument("--log-file", type=str, default=None, help="Custom log file name or absolute path")
    args = parser.parse_args(argv)

    if args.date:
        try:
            datetime.strptime(args.date, "%Y-%m-%d")
        except ValueError:
            parser.error(f"--date must be YYYY-MM-DD, got {args.date!r}")
    try:
        select_product_lines(args.only)
    except ValueError as e:
        parser.error(str(e))
    return args


def main(argv: Optional[Sequence[str]] = None):
    """Main CLI entry point for army book fetching."""
    try:
        args = parse_args(argv)
        setup_logging(args.log_file)

        lines = select_product_lines(args.only)

        if args.list_lines:
            print("\n" + "="*60)
            print("CONFIGURED GAME SYSTEMS")
            print("="*60)
            for line in lines:
                print(f"- {line.name}  |  {build_selection_url(line)}")
            return

        orchestrator = ArmyBookOrchestrator(
            output_dir=args.output_dir,
            run_date=args.date,
            product_lines=lines,
            stop_on_item_error=args.stop_on_item_error,
        )

        logger.info("Launching browser...")
        headless = HEADLESS_BROWSER and not args.headed
        with WebPageHandler(headless=headless) as web:
            results = orchestrator.run(web)

        # Show results
        stats = summarize_results(results)
        print("\n" + "="*60)
        print("FETCH RESULTS")
        print("="*60)
        print(f"Downloaded: {stats['downloaded']}  |  Snapshotted: {stats['snapshotted']}")
        print(f"Skipped (already exists): {stats['skipped']}")
        print(f"Failed: {stats['failed']}")
        for result in results:
            if not result.success:
                print(f"✗ FAILED | {result.product_line} | {result.item_name}")
                print(f"  └─ Error: {result.error_message}")
        print("="*60)
        logger.info("Process finished.")

    except KeyboardInterrupt:
        print("\nProcess interrupted by user")
    except Exception as e:
        logger.error(f"Unexpected error in main: {e}")
        raise


if __name__ == "__main__":
    main()
