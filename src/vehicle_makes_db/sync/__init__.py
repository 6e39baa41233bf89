"""Sync module for make and vehicle type synchronization.

Components:
- SyncOrchestrator / run_sync_cycle: one complete sync run
- reconcile: diff of remote makes against the stored snapshot
- TypeLoader: bounded-concurrency vehicle type loading
- CommitManager: commit boundaries for the shared session
"""

from .commit_manager import CommitManager
from .orchestrator import SyncOrchestrator, check_make_count, run_sync_cycle
from .reconciler import ReconcilePlan, reconcile
from .results import MakeTypeLoad, SelfCheckResult, SyncRunResult, TypeLoadResult
from .type_loader import TypeLoader

__all__ = [
    # Orchestration
    "SyncOrchestrator",
    "check_make_count",
    "run_sync_cycle",
    # Reconciliation
    "ReconcilePlan",
    "reconcile",
    # Type loading
    "TypeLoader",
    "CommitManager",
    # Results
    "MakeTypeLoad",
    "SelfCheckResult",
    "SyncRunResult",
    "TypeLoadResult",
]
