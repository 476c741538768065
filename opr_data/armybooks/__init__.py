"""
Army books module for finding and downloading One Page Rules documents.

This package handles:
- Walking the resources catalog for core rulebooks
- Discovering army books on each game system's selection page
- Direct PDF downloads and preview page snapshots
- Orchestrated flow (LangGraph)
"""

from .orchestrator import ArmyBookOrchestrator
from ..models import CatalogEntry, SelectionEntry, FetchResult

__all__ = [
    "ArmyBookOrchestrator",
    "CatalogEntry",
    "SelectionEntry",
    "FetchResult",
]
