"""
Archive Commands - Upload a fresh archive, or delete an obsolete one.
"""

import re
import tempfile
from pathlib import Path
from typing import Optional

from ...core.domain.entities import SyncTarget
from ...core.domain.events import ArchiveUploaded, EventBus, ObjectDeleted
from ...core.domain.keys import encode_key
from ...core.ports.materializer import MaterializerPort
from ...core.ports.object_store import ObjectStorePort
from ..context import CycleContext
from .base import Command, CommandResult


class UploadArchiveCommand(Command):
    """
    Materialize one sync target at its resolved commit and upload it.

    All work happens inside a private slot under ``workdir`` that is removed
    when the command finishes, whether it succeeded or not. The key is
    derived from the destination identity and the resolved commit.
    """

    def __init__(
        self,
        store: ObjectStorePort,
        materializer: MaterializerPort,
        target: SyncTarget,
        commit_sha: Optional[str],
        workdir: Path,
        event_bus: Optional[EventBus] = None,
        context: Optional[CycleContext] = None,
        timeout: Optional[float] = None,
        dry_run: bool = True,
    ):
        super().__init__(dry_run=dry_run)
        self.store = store
        self.materializer = materializer
        self.target = target
        self.commit_sha = commit_sha
        self.workdir = Path(workdir)
        self.event_bus = event_bus
        self.context = context or CycleContext()
        self.timeout = timeout

    @property
    def key(self) -> str:
        return encode_key(self.target.destination, self.commit_sha or "")

    def validate(self) -> Optional[str]:
        if not self.commit_sha:
            return f"No resolved commit for {self.target.source}"
        return None

    def describe(self) -> str:
        return f"would update destination `{self.target.destination.identity}`"

    def _execute(self) -> CommandResult:
        self.context.check()
        prefix = re.sub(r"[^A-Za-z0-9_.-]+", "-", self.target.destination.identity) + "-"

        with tempfile.TemporaryDirectory(prefix=prefix, dir=self.workdir) as slot:
            artifact = self.materializer.materialize(
                self.target,
                self.commit_sha,
                Path(slot),
                timeout=self.context.remaining(self.timeout),
            )
            self.context.check()

            key = self.key
            size = artifact.stat().st_size
            self.store.put_object(key, artifact)

        self.logger.info(
            f"Uploaded {self.target.destination.identity} at {self.commit_sha} ({size} bytes)"
        )
        if self.event_bus:
            self.event_bus.publish(ArchiveUploaded(
                destination=self.target.destination.identity,
                commit_sha=self.commit_sha,
                key=key,
                size=size,
            ))
        return CommandResult.ok(key)


class DeleteObjectCommand(Command):
    """Delete one key from the bucket. A key that is already gone is fine."""

    def __init__(
        self,
        store: ObjectStorePort,
        key: str,
        event_bus: Optional[EventBus] = None,
        context: Optional[CycleContext] = None,
        dry_run: bool = True,
    ):
        super().__init__(dry_run=dry_run)
        self.store = store
        self.key = key
        self.event_bus = event_bus
        self.context = context or CycleContext()

    def validate(self) -> Optional[str]:
        if not self.key:
            return "Object key is required"
        return None

    def describe(self) -> str:
        return f"would delete key `{self.key}`"

    def _execute(self) -> CommandResult:
        self.context.check()
        self.store.delete_object(self.key)
        self.logger.info(f"Deleted {self.key}")
        if self.event_bus:
            self.event_bus.publish(ObjectDeleted(key=self.key))
        return CommandResult.ok(self.key)
