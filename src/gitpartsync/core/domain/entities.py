"""
Domain Entities - Sync targets and the records decoded from the bucket.
"""

from collections import Counter
from dataclasses import dataclass, field
from typing import Iterable, Optional

from ..exceptions import DuplicateDestinationError


@dataclass(frozen=True, order=True)
class GitTarget:
    """
    A repository location within the git host.

    The branch selects which commit to resolve; it is not part of identity.
    """

    group: str
    project_name: str
    branch: str = ""

    @property
    def identity(self) -> str:
        """The project path, ``group/project_name``."""
        return f"{self.group}/{self.project_name}"

    def __str__(self) -> str:
        if self.branch:
            return f"{self.identity}@{self.branch}"
        return self.identity


@dataclass(frozen=True, order=True)
class SyncTarget:
    """Content of ``source`` at its branch tip, stored under ``destination``."""

    source: GitTarget
    destination: GitTarget

    def __str__(self) -> str:
        return f"{self.source} -> {self.destination.identity}"


@dataclass(frozen=True)
class StoredObjectRecord:
    """One archive present in the bucket, as described by its key."""

    key: str
    group: str
    project_name: str
    commit_sha: str
    branch: str = ""

    @property
    def identity(self) -> str:
        return f"{self.group}/{self.project_name}"


@dataclass(frozen=True)
class ObjectInfo:
    """An entry from the storage listing."""

    key: str
    size: int = 0
    etag: Optional[str] = None


@dataclass
class BucketSnapshot:
    """
    Decoded view of the bucket at the start of a cycle.

    ``records`` holds the first record seen per destination identity.
    Further records for the same identity are drift and land in
    ``duplicates``; keys that failed to decode land in ``malformed``.
    """

    records: dict[str, StoredObjectRecord] = field(default_factory=dict)
    duplicates: list[StoredObjectRecord] = field(default_factory=list)
    malformed: list[str] = field(default_factory=list)

    def get(self, identity: str) -> Optional[StoredObjectRecord]:
        return self.records.get(identity)

    def records_for(self, identity: str) -> list[StoredObjectRecord]:
        """All records for an identity, primary first."""
        primary = self.records.get(identity)
        if primary is None:
            return []
        return [primary] + [d for d in self.duplicates if d.identity == identity]

    def __len__(self) -> int:
        return len(self.records) + len(self.duplicates)


def validate_sync_targets(targets: Iterable[SyncTarget]) -> list[SyncTarget]:
    """
    Reject desired state that maps two targets onto one destination.

    Returns:
        The targets, as a list, in their original order

    Raises:
        DuplicateDestinationError: For the first destination declared twice
    """
    targets = list(targets)
    counts = Counter(t.destination.identity for t in targets)
    for identity, count in counts.items():
        if count > 1:
            raise DuplicateDestinationError(identity, count)
    return targets
