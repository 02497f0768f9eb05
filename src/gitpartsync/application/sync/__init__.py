"""
Sync Module - Reconciliation of the sync bucket with desired state.
"""

from .resolver import CommitResolver, SourceCommits
from .snapshot import BucketSnapshotReader
from .reconciler import ReconcilePlan, diff
from .pipeline import MaterializationPipeline, PipelineResult, FailedItem
from .change_detector import ChangeDetector
from .orchestrator import SyncOrchestrator, SyncResult

__all__ = [
    "CommitResolver",
    "SourceCommits",
    "BucketSnapshotReader",
    "ReconcilePlan",
    "diff",
    "MaterializationPipeline",
    "PipelineResult",
    "FailedItem",
    "ChangeDetector",
    "SyncOrchestrator",
    "SyncResult",
]
