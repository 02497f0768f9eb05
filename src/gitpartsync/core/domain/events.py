"""
Domain Events - Things that happened during a reconciliation cycle.

Events are immutable records of something that occurred.
They enable loose coupling and audit trails.
"""

import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable
from uuid import uuid4


@dataclass(frozen=True)
class DomainEvent:
    """Base class for all domain events."""

    event_id: str = field(default_factory=lambda: str(uuid4()))
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def event_type(self) -> str:
        """Get the event type name."""
        return self.__class__.__name__


@dataclass(frozen=True)
class SyncStarted(DomainEvent):
    """Event: A reconciliation cycle started."""

    dry_run: bool = True
    target_count: int = 0


@dataclass(frozen=True)
class ArchiveUploaded(DomainEvent):
    """Event: An encrypted archive was written to the bucket."""

    destination: str = ""
    commit_sha: str = ""
    key: str = ""
    size: int = 0


@dataclass(frozen=True)
class ObjectDeleted(DomainEvent):
    """Event: A stale or orphaned object was removed."""

    key: str = ""


@dataclass(frozen=True)
class SyncCompleted(DomainEvent):
    """Event: A reconciliation cycle completed."""

    dry_run: bool = True
    rebuilt: int = 0
    deleted: int = 0
    errors: list = field(default_factory=list)


class EventBus:
    """
    Simple event bus for publishing and subscribing to domain events.

    Commands publish from worker threads, so publishing is serialized.
    """

    def __init__(self):
        self._handlers: dict[type, list] = {}
        self._history: list[DomainEvent] = []
        self._lock = threading.Lock()

    def subscribe(self, event_type: type, handler: Callable[[DomainEvent], None]) -> None:
        """Subscribe a handler to an event type."""
        self._handlers.setdefault(event_type, []).append(handler)

    def publish(self, event: DomainEvent) -> None:
        """Publish an event to all subscribers."""
        with self._lock:
            self._history.append(event)

            for handler in self._handlers.get(type(event), []):
                handler(event)

            # Catch-all handlers
            for handler in self._handlers.get(DomainEvent, []):
                handler(event)

    def get_history(self) -> list[DomainEvent]:
        """Get all published events."""
        with self._lock:
            return self._history.copy()

    def clear_history(self) -> None:
        """Clear event history."""
        with self._lock:
            self._history.clear()
