"""Request pacing for the vPIC API.

Components:
- BatchExecutor: bounded-concurrency groups with an inter-batch delay
- ProgressTracker: progress counting and periodic progress logging
"""

from .batch import BatchExecutor, BatchResult
from .progress import ProgressState, ProgressTracker, ProgressUpdate

__all__ = [
    # Batch execution
    "BatchExecutor",
    "BatchResult",
    # Progress tracking
    "ProgressState",
    "ProgressTracker",
    "ProgressUpdate",
]
