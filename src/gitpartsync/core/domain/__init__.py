"""
Domain - Entities, the key codec and domain events.
"""

from .entities import (
    GitTarget,
    SyncTarget,
    StoredObjectRecord,
    ObjectInfo,
    BucketSnapshot,
    validate_sync_targets,
)
from .keys import ARCHIVE_EXTENSION, encode_key, decode_key
from .events import (
    DomainEvent,
    SyncStarted,
    ArchiveUploaded,
    ObjectDeleted,
    SyncCompleted,
    EventBus,
)

__all__ = [
    "GitTarget",
    "SyncTarget",
    "StoredObjectRecord",
    "ObjectInfo",
    "BucketSnapshot",
    "validate_sync_targets",
    "ARCHIVE_EXTENSION",
    "encode_key",
    "decode_key",
    "DomainEvent",
    "SyncStarted",
    "ArchiveUploaded",
    "ObjectDeleted",
    "SyncCompleted",
    "EventBus",
]
