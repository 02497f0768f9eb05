"""
Commands - Individual operations that can be executed.

Commands represent write operations against the bucket and can be:
- Executed, or previewed in dry-run
- Run in bounded parallel batches
- Logged for audit
"""

from .base import Command, CommandResult, CommandBatch
from .archive_commands import UploadArchiveCommand, DeleteObjectCommand

__all__ = [
    "Command",
    "CommandResult",
    "CommandBatch",
    "UploadArchiveCommand",
    "DeleteObjectCommand",
]
