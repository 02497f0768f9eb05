"""Tests for application commands."""

import threading
import time

import pytest
from unittest.mock import Mock

from gitpartsync.application.commands import (
    CommandBatch,
    CommandResult,
    DeleteObjectCommand,
    UploadArchiveCommand,
)
from gitpartsync.application.context import CycleContext
from gitpartsync.core.domain.events import ArchiveUploaded, EventBus, ObjectDeleted
from gitpartsync.core.exceptions import DeleteError


class TestCommandResult:
    """Tests for CommandResult."""

    def test_ok(self):
        result = CommandResult.ok("data")
        assert result.success
        assert result.data == "data"
        assert not result.dry_run

    def test_ok_dry_run(self):
        result = CommandResult.ok("data", dry_run=True)
        assert result.success
        assert result.dry_run

    def test_fail(self):
        result = CommandResult.fail("error message")
        assert not result.success
        assert result.error == "error message"

    def test_skip(self):
        result = CommandResult.skip("reason")
        assert result.success
        assert result.skipped


class TestUploadArchiveCommand:
    """Tests for UploadArchiveCommand."""

    def test_validate_missing_commit(self, store, materializer, target, tmp_path):
        cmd = UploadArchiveCommand(store, materializer, target, None, tmp_path)
        assert cmd.validate() is not None
        assert not cmd.execute().success

    def test_execute_dry_run(self, store, materializer, target, tmp_path):
        cmd = UploadArchiveCommand(store, materializer, target, "c1", tmp_path, dry_run=True)

        result = cmd.execute()

        assert result.success
        assert result.dry_run
        assert result.data == "would update destination `X/mirror`"
        assert materializer.built == []
        assert store.objects == {}

    def test_execute_success(self, store, materializer, target, tmp_path, make_key):
        bus = EventBus()
        cmd = UploadArchiveCommand(
            store, materializer, target, "c1", tmp_path, event_bus=bus, dry_run=False
        )

        result = cmd.execute()

        assert result.success
        assert result.data == make_key(commit="c1")
        assert store.objects[make_key(commit="c1")] == b"A/repo@c1"
        assert materializer.built == [("X/mirror", "c1")]
        events = bus.get_history()
        assert len(events) == 1
        assert isinstance(events[0], ArchiveUploaded)
        assert events[0].key == make_key(commit="c1")

    def test_slot_is_removed(self, store, materializer, target, tmp_path):
        UploadArchiveCommand(store, materializer, target, "c1", tmp_path, dry_run=False).execute()
        assert list(tmp_path.iterdir()) == []

    def test_slot_is_removed_on_failure(self, store, materializer, target, tmp_path):
        materializer.fail_for.add("X/mirror")

        result = UploadArchiveCommand(
            store, materializer, target, "c1", tmp_path, dry_run=False
        ).execute()

        assert not result.success
        assert "clone" in result.error
        assert list(tmp_path.iterdir()) == []
        assert store.objects == {}

    def test_cancelled_context(self, store, materializer, target, tmp_path):
        context = CycleContext()
        context.cancel()

        result = UploadArchiveCommand(
            store, materializer, target, "c1", tmp_path, context=context, dry_run=False
        ).execute()

        assert not result.success
        assert materializer.built == []


class TestDeleteObjectCommand:
    """Tests for DeleteObjectCommand."""

    def test_validate_missing_key(self, store):
        assert DeleteObjectCommand(store, "").validate() is not None

    def test_execute_dry_run(self, store, make_key):
        store.objects[make_key()] = b"x"

        result = DeleteObjectCommand(store, make_key(), dry_run=True).execute()

        assert result.dry_run
        assert result.data.startswith("would delete key `")
        assert make_key() in store.objects

    def test_execute_success(self, store, make_key):
        bus = EventBus()
        store.objects[make_key()] = b"x"

        result = DeleteObjectCommand(store, make_key(), event_bus=bus, dry_run=False).execute()

        assert result.success
        assert store.objects == {}
        assert isinstance(bus.get_history()[0], ObjectDeleted)

    def test_missing_key_is_success(self, store, make_key):
        result = DeleteObjectCommand(store, make_key(), dry_run=False).execute()
        assert result.success

    def test_store_error_is_failure(self):
        store = Mock()
        store.delete_object.side_effect = DeleteError("denied", key="k")

        result = DeleteObjectCommand(store, "k", dry_run=False).execute()

        assert not result.success
        assert "denied" in result.error

    def test_unexpected_error_is_failure(self, caplog):
        store = Mock()
        store.delete_object.side_effect = RuntimeError("socket closed")

        result = DeleteObjectCommand(store, "k", dry_run=False).execute()

        assert not result.success
        assert result.error == "RuntimeError: socket closed"
        assert "failed unexpectedly" in caplog.text


class TestCommandBatch:
    """Tests for CommandBatch."""

    def test_execute_all_success(self):
        cmd1 = Mock()
        cmd1.execute.return_value = CommandResult.ok("result1")

        cmd2 = Mock()
        cmd2.execute.return_value = CommandResult.ok("result2")

        batch = CommandBatch()
        batch.add(cmd1).add(cmd2)

        results = batch.execute_all()

        assert len(results) == 2
        assert batch.all_succeeded
        assert batch.executed_count == 2

    def test_execute_stop_on_error(self):
        cmd1 = Mock()
        cmd1.execute.return_value = CommandResult.fail("error")

        cmd2 = Mock()
        cmd2.execute.return_value = CommandResult.ok()

        batch = CommandBatch(stop_on_error=True)
        batch.add(cmd1).add(cmd2)

        results = batch.execute_all()

        assert len(results) == 1
        assert batch.failed_count == 1
        cmd2.execute.assert_not_called()

    def test_execute_continue_on_error(self):
        cmd1 = Mock()
        cmd1.execute.return_value = CommandResult.fail("error")

        cmd2 = Mock()
        cmd2.execute.return_value = CommandResult.ok()

        batch = CommandBatch(stop_on_error=False)
        batch.add(cmd1).add(cmd2)

        results = batch.execute_all()

        assert len(results) == 2
        assert batch.failed_count == 1
        assert batch.executed_count == 1
        assert batch.errors == ["error"]

    def test_pooled_keeps_order(self):
        commands = []
        for i, delay in enumerate([0.05, 0.0, 0.02, 0.0]):
            cmd = Mock()
            cmd.execute.side_effect = (
                lambda i=i, delay=delay: time.sleep(delay) or CommandResult.ok(i)
            )
            commands.append(cmd)

        batch = CommandBatch(max_workers=4)
        for cmd in commands:
            batch.add(cmd)

        results = batch.execute_all()

        assert [r.data for r in results] == [0, 1, 2, 3]

    def test_pool_is_bounded(self):
        lock = threading.Lock()
        active, peak = [0], [0]

        def work():
            with lock:
                active[0] += 1
                peak[0] = max(peak[0], active[0])
            time.sleep(0.01)
            with lock:
                active[0] -= 1
            return CommandResult.ok()

        batch = CommandBatch(max_workers=2)
        for _ in range(8):
            cmd = Mock()
            cmd.execute.side_effect = work
            batch.add(cmd)

        batch.execute_all()

        assert batch.all_succeeded
        assert peak[0] <= 2

    def test_pooled_stop_on_error(self):
        first = Mock()
        first.execute.return_value = CommandResult.fail("boom")
        rest = [Mock() for _ in range(5)]
        for cmd in rest:
            cmd.execute.side_effect = lambda: time.sleep(0.05) or CommandResult.ok()

        batch = CommandBatch(stop_on_error=True, max_workers=2)
        batch.add(first)
        for cmd in rest:
            batch.add(cmd)

        results = batch.execute_all()

        assert results[0].error == "boom"
        assert len(results) < 6
        rest[-1].execute.assert_not_called()


@pytest.mark.parametrize("workers", [1, 3])
def test_executed_count_ignores_dry_run(workers):
    batch = CommandBatch(max_workers=workers)
    for result in (CommandResult.ok(dry_run=True), CommandResult.skip("n/a"), CommandResult.ok()):
        cmd = Mock()
        cmd.execute.return_value = result
        batch.add(cmd)

    batch.execute_all()

    assert batch.executed_count == 1
