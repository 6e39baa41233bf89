"""vPIC remote source module.

This module provides:
- VPICClient: Async vPIC API client with per-request client identity
- markup: XML parsing and Make/VehicleType extraction
- Pacing: BatchExecutor, ProgressTracker
"""

from . import markup
from .client import VPICClient
from .markup import ParsedTree, extract_count, extract_makes, extract_types, parse
from .pacing import BatchExecutor, BatchResult, ProgressTracker

__all__ = [
    # Client
    "VPICClient",
    # Markup
    "ParsedTree",
    "extract_count",
    "extract_makes",
    "extract_types",
    "markup",
    "parse",
    # Pacing
    "BatchExecutor",
    "BatchResult",
    "ProgressTracker",
]
