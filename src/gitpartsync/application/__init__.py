"""
Application Layer - Use cases, commands, and orchestration.

This layer contains:
- context: Per-cycle cache and cancellation signal
- commands/: Individual bucket writes (upload archive, delete object)
- sync/: Resolver, snapshot reader, reconciler, pipeline and orchestrator
"""

from .context import CycleContext
from .sync import SyncOrchestrator, SyncResult, ChangeDetector
from .commands import (
    Command,
    CommandResult,
    CommandBatch,
    UploadArchiveCommand,
    DeleteObjectCommand,
)

__all__ = [
    "CycleContext",
    "SyncOrchestrator",
    "SyncResult",
    "ChangeDetector",
    "Command",
    "CommandResult",
    "CommandBatch",
    "UploadArchiveCommand",
    "DeleteObjectCommand",
]
