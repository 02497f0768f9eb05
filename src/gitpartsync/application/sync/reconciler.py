"""
Reconciler - Diff desired state against the bucket.

Given the desired sync targets, their resolved source commits and a decoded
bucket snapshot, compute which targets must be (re)built and which keys must
be deleted. Pure: no I/O, deterministic, and stable with respect to the
order of ``desired``.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional, Union

from ...core.domain.entities import (
    BucketSnapshot,
    GitTarget,
    StoredObjectRecord,
    SyncTarget,
)
from .resolver import SourceCommits


@dataclass
class ReconcilePlan:
    """Actions needed to converge the bucket on desired state."""

    to_rebuild: list[SyncTarget] = field(default_factory=list)
    to_delete: list[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.to_rebuild and not self.to_delete

    def describe(self) -> list[str]:
        """One line per planned action."""
        lines = [
            f"would update destination `{t.destination.identity}`"
            for t in self.to_rebuild
        ]
        lines.extend(f"would delete key `{key}`" for key in self.to_delete)
        return lines


def diff(
    desired: Iterable[SyncTarget],
    source_commits: Union[SourceCommits, Mapping],
    snapshot: Union[BucketSnapshot, Mapping],
) -> ReconcilePlan:
    """
    Compute the minimal rebuild and delete sets.

    A target is rebuilt when no object exists for its destination or the
    stored commit differs from the resolved source commit; the replaced
    object is deleted. Objects whose destination is not desired are deleted.
    When drift left several objects for one destination, an up-to-date one is
    kept if present and the rest are deleted.

    Args:
        desired: Sync targets, in the order actions should be listed
        source_commits: Resolved commits; a plain mapping is read as
            source identity -> commit
        snapshot: Decoded bucket; a plain mapping is read as
            destination identity -> record

    Returns:
        ReconcilePlan with disjoint rebuild and delete sets
    """
    if not isinstance(snapshot, BucketSnapshot):
        snapshot = BucketSnapshot(records=dict(snapshot))
    commit_for = _commit_lookup(source_commits)

    plan = ReconcilePlan()
    queued: set[str] = set()

    def delete(record: StoredObjectRecord) -> None:
        if record.key not in queued:
            queued.add(record.key)
            plan.to_delete.append(record.key)

    live = dict.fromkeys(snapshot.records)

    for target in desired:
        dest_id = target.destination.identity
        records = snapshot.records_for(dest_id)

        if not records:
            # never materialized
            plan.to_rebuild.append(target)
            continue

        wanted = commit_for(target.source)
        keep = None
        if wanted is not None:
            keep = next((r for r in records if r.commit_sha == wanted), None)

        if keep is None:
            # stale: source advanced
            plan.to_rebuild.append(target)
        for record in records:
            if record is not keep:
                delete(record)
        live.pop(dest_id, None)

    # orphans: no desired target left for these destinations
    for dest_id in live:
        for record in snapshot.records_for(dest_id):
            delete(record)

    return plan


def _commit_lookup(
    source_commits: Union[SourceCommits, Mapping],
) -> Callable[[GitTarget], Optional[str]]:
    if isinstance(source_commits, SourceCommits):
        return source_commits.commit_for
    return lambda source: source_commits.get(source.identity)
