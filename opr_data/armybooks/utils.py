"""
Utility functions for naming, locating and linking army book files.
"""

import re
import logging
from datetime import date
from pathlib import Path
from typing import Optional
from urllib.parse import parse_qs, urlparse

from ..config import SCRAPE_URL_BASE, PREVIEW_URL_BASE, FTL_PREVIEW_GAME_ID, NAME_PARAMS
from ..error_handling import FilesystemError
from ..models import OutputTarget, ProductLine, SelectionEntry

logger = logging.getLogger(__name__)

_INVALID_CHARS = re.compile(r'[/\\?%*:|"<>]')


def sanitize_filename(filename: str) -> str:
    """
    Sanitize a display name so it can be used as a path segment.

    Args:
        filename: Original name

    Returns:
        Name with path-hostile characters replaced by '-' and outer
        whitespace removed
    """
    return _INVALID_CHARS.sub('-', filename).strip()


def format_run_date(day: Optional[date] = None) -> str:
    """Return the YYYY-MM-DD stamp shared by every folder and file of a run."""
    return (day or date.today()).strftime("%Y-%m-%d")


def resolve_directory(output_root: Path, product_line_name: str, run_date: str) -> Path:
    """
    Compute and create the folder for one product line on one run date.

    Args:
        output_root: Directory the per-line folders live in
        product_line_name: Display name of the product line
        run_date: Run date stamp

    Returns:
        Path of the (existing) directory
    """
    directory = Path(output_root) / f"{sanitize_filename(product_line_name)} - {run_date}"
    if directory.is_dir():
        return directory
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FilesystemError(f"Could not create directory {directory}: {e}", path=directory) from e
    logger.info(f"Created directory: {directory}")
    return directory


def resolve_file(directory: Path, item_name: str, run_date: Optional[str] = None) -> OutputTarget:
    """
    Build the PDF target for an item inside a product line folder.

    Catalog documents use "<name>.pdf"; army books append the run date.
    """
    stem = sanitize_filename(item_name)
    if run_date:
        stem = f"{stem} - {run_date}"
    file_name = f"{stem}.pdf"
    return OutputTarget(directory=Path(directory), file_name=file_name, full_path=Path(directory) / file_name)


def target_exists(path: Path) -> bool:
    """An existing file counts as already fetched. Content is not checked."""
    return Path(path).exists()


def build_selection_url(product_line: ProductLine) -> str:
    if product_line.uses_alternate_id_param:
        return f"{SCRAPE_URL_BASE}/ftl/fleetSelection"
    return f"{SCRAPE_URL_BASE}/armyBookSelection?gameSystem={product_line.identifier}"


def preview_game_id(product_line: ProductLine) -> int:
    if product_line.uses_alternate_id_param:
        return FTL_PREVIEW_GAME_ID
    return product_line.identifier


def build_preview_url(entry: SelectionEntry, product_line: ProductLine) -> str:
    """Army Forge Studio page that renders a print-ready army book."""
    return f"{PREVIEW_URL_BASE}/army-books/view/{entry.identifier}~{preview_game_id(product_line)}/preview"


def extract_id_param(href: str, id_param: str) -> Optional[str]:
    """
    Pull an identifier such as armyId out of a link.

    Args:
        href: Link target, absolute or relative
        id_param: Query parameter name ("armyId" or "fleetId")

    Returns:
        The identifier, or None when the link does not carry one
    """
    if not href:
        return None
    match = re.search(rf"[?&#]{re.escape(id_param)}=([a-zA-Z0-9_-]+)", href)
    return match.group(1) if match else None


def entry_from_url(url: str, id_param: str) -> Optional[SelectionEntry]:
    """
    Read an army id and name from the page a tile navigated to.

    Both must be present; FTL pages use fleetName instead of armyName.
    """
    params = parse_qs(urlparse(url or "").query)
    identifier = (params.get(id_param) or [None])[0]
    name = None
    for param in NAME_PARAMS:
        values = params.get(param)
        if values and values[0]:
            name = values[0]
            break
    if identifier and name:
        return SelectionEntry(display_name=name, identifier=identifier)
    return None


def log_download_attempt(item_name: str, url: str, success: bool, error: Optional[str] = None):
    """
    Log download attempt details.

    Args:
        item_name: Name of the document
        url: URL that was attempted
        success: Whether download was successful
        error: Error message if download failed
    """
    if success:
        logger.info(f"Successfully fetched '{item_name}' from {url}")
    else:
        if error:
            logger.error(f"Failed to fetch '{item_name}' from {url}: {error}")
        else:
            logger.warning(f"Nothing fetched for '{item_name}' at {url}")
