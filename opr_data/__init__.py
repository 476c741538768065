"""
OPR Data Package - One Page Rules rulebook and army book fetching.

This package provides:
1. Downloading core rulebooks from the paginated resources catalog
2. Snapshotting every army book of each game system to PDF
"""

__version__ = "0.1.0"
__author__ = "OPR Data Team"

# Main package imports for convenience
from .armybooks import ArmyBookOrchestrator
from .models import ProductLine, CatalogEntry, SelectionEntry, FetchResult
from .logging_config import setup_logging

__all__ = [
    "ArmyBookOrchestrator",
    "ProductLine",
    "CatalogEntry",
    "SelectionEntry",
    "FetchResult",
    "setup_logging",
]
