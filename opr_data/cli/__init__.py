"""
Command-line interface for the OPR Data package.

This module provides CLI commands for:
- Core rulebook downloads
- Army book snapshots
"""

from .main import main

__all__ = [
    "main",
]
