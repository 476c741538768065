"""
Shared data models for the OPR Data package.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Literal, Optional, Set


@dataclass(frozen=True)
class ProductLine:
    """A game system with its own army selection page."""
    name: str
    identifier: Optional[int] = None
    uses_alternate_id_param: bool = False

    @property
    def id_param(self) -> str:
        return "fleetId" if self.uses_alternate_id_param else "armyId"


@dataclass
class CatalogEntry:
    """A directly downloadable document from the resources listing."""
    document_name: str
    download_url: str
    tagged_product_lines: Set[str] = field(default_factory=set)


@dataclass(frozen=True)
class SelectionEntry:
    """A concrete army book discovered on a selection page."""
    display_name: str
    identifier: str


@dataclass(frozen=True)
class OutputTarget:
    directory: Path
    file_name: str
    full_path: Path


@dataclass
class ClickOutcome:
    """What happened after clicking a tile: a menu, a navigation, or nothing."""
    kind: Literal["menu", "direct", "neither"]
    entries: List[SelectionEntry] = field(default_factory=list)


@dataclass
class FetchResult:
    """Result of a single fetch attempt."""
    item_name: str
    product_line: str
    success: bool
    method: str = "unknown"
    file_path: Optional[str] = None
    error_message: Optional[str] = None
    processing_time: float = 0.0
