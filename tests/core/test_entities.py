"""Tests for domain entities."""

import pytest

from gitpartsync.core.domain.entities import (
    BucketSnapshot,
    GitTarget,
    StoredObjectRecord,
    validate_sync_targets,
)
from gitpartsync.core.domain.events import DomainEvent, EventBus, ObjectDeleted, SyncStarted
from gitpartsync.core.exceptions import ConfigurationError, DuplicateDestinationError


class TestGitTarget:

    def test_identity_ignores_branch(self):
        assert GitTarget("A", "repo", "main").identity == GitTarget("A", "repo", "dev").identity

    def test_str(self):
        assert str(GitTarget("A", "repo", "main")) == "A/repo@main"
        assert str(GitTarget("A", "repo")) == "A/repo"


class TestValidateSyncTargets:

    def test_accepts_distinct_destinations(self, make_sync_target):
        targets = [
            make_sync_target(dest="X/one"),
            make_sync_target(dest="X/two"),
        ]
        assert validate_sync_targets(iter(targets)) == targets

    def test_shared_source_is_fine(self, make_sync_target):
        targets = [
            make_sync_target(src="A/repo", dest="X/one"),
            make_sync_target(src="A/repo", dest="Y/one"),
        ]
        assert len(validate_sync_targets(targets)) == 2

    def test_rejects_duplicate_destination(self, make_sync_target):
        targets = [
            make_sync_target(src="A/repo", dest="X/mirror"),
            make_sync_target(src="B/other", dest="X/mirror", dest_branch="main"),
        ]
        with pytest.raises(DuplicateDestinationError) as exc_info:
            validate_sync_targets(targets)

        assert exc_info.value.identity == "X/mirror"
        assert exc_info.value.count == 2
        assert isinstance(exc_info.value, ConfigurationError)


class TestBucketSnapshot:

    def test_records_for(self):
        primary = StoredObjectRecord("k1", "X", "mirror", "c1")
        dup = StoredObjectRecord("k2", "X", "mirror", "c2")
        other = StoredObjectRecord("k3", "Y", "mirror", "c1")
        snapshot = BucketSnapshot(records={"X/mirror": primary, "Y/mirror": other}, duplicates=[dup])

        assert snapshot.records_for("X/mirror") == [primary, dup]
        assert snapshot.records_for("Y/mirror") == [other]
        assert snapshot.records_for("Z/none") == []
        assert len(snapshot) == 3


class TestEventBus:

    def test_publish_to_specific_and_catch_all(self):
        bus = EventBus()
        specific, catch_all = [], []
        bus.subscribe(ObjectDeleted, specific.append)
        bus.subscribe(DomainEvent, catch_all.append)

        bus.publish(ObjectDeleted(key="k"))
        bus.publish(SyncStarted(dry_run=False))

        assert [e.key for e in specific] == ["k"]
        assert [e.event_type for e in catch_all] == ["ObjectDeleted", "SyncStarted"]
        assert len(bus.get_history()) == 2

        bus.clear_history()
        assert bus.get_history() == []
