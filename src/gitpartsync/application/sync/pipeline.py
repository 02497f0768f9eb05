"""
Materialization Pipeline - Execute a reconcile plan against the bucket.

Each rebuild and each delete is an independent command; a failure is
reported for that item only and the rest of the plan still runs.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

from ...core.domain.events import EventBus
from ...core.domain.keys import decode_key
from ...core.exceptions import MalformedKeyError, MaterializeError
from ...core.ports.config_provider import PipelineConfig
from ...core.ports.materializer import MaterializerPort
from ...core.ports.object_store import ObjectStorePort
from ..commands import CommandBatch, DeleteObjectCommand, UploadArchiveCommand
from ..context import CycleContext
from .reconciler import ReconcilePlan
from .resolver import SourceCommits


@dataclass
class FailedItem:
    """A rebuild or delete that did not complete."""

    action: str  # "rebuild" or "delete"
    subject: str
    error: str


@dataclass
class PipelineResult:
    """What the pipeline did (or, in dry-run, would do)."""

    dry_run: bool = True
    uploaded: list[str] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)
    planned: list[str] = field(default_factory=list)
    failed_rebuilds: list[FailedItem] = field(default_factory=list)
    failed_deletes: list[FailedItem] = field(default_factory=list)

    @property
    def failures(self) -> list[FailedItem]:
        return self.failed_rebuilds + self.failed_deletes


class MaterializationPipeline:
    """
    Runs uploads and deletions for a plan on bounded worker pools.

    Uploads run before deletions so a destination is never left without an
    archive while its replacement is still being built. A key whose
    replacement failed to upload is kept until a later cycle succeeds.
    """

    def __init__(
        self,
        materializer: MaterializerPort,
        store: ObjectStorePort,
        config: Optional[PipelineConfig] = None,
        event_bus: Optional[EventBus] = None,
    ):
        self.materializer = materializer
        self.store = store
        self.config = config or PipelineConfig()
        self.event_bus = event_bus or EventBus()
        self.logger = logging.getLogger("MaterializationPipeline")

    def preview(self, plan: ReconcilePlan) -> PipelineResult:
        """Report the plan without side effects."""
        result = PipelineResult(dry_run=True, planned=plan.describe())
        for line in result.planned:
            self.logger.info(line)
        return result

    def execute(
        self,
        plan: ReconcilePlan,
        source_commits: Union[SourceCommits, dict],
        context: Optional[CycleContext] = None,
        dry_run: bool = False,
    ) -> PipelineResult:
        """
        Carry out ``plan``.

        Args:
            plan: Output of the reconciler
            source_commits: Resolved commits the plan was computed against
            context: Cycle context carrying the cancellation signal
            dry_run: Only report what would be done

        Returns:
            PipelineResult with per-item outcomes
        """
        if dry_run:
            return self.preview(plan)

        context = context or CycleContext(timeout=self.config.cycle_timeout)
        result = PipelineResult(dry_run=False)

        if plan.to_rebuild:
            self._rebuild(plan, source_commits, context, result)
        if plan.to_delete:
            failed = {item.subject for item in result.failed_rebuilds}
            keys = [k for k in plan.to_delete if _identity_of(k) not in failed]
            for key in plan.to_delete:
                if key not in keys:
                    self.logger.info(f"Keeping {key} until its replacement is uploaded")
            self._delete(keys, context, result)

        self.logger.info(
            f"Uploaded {len(result.uploaded)}, deleted {len(result.deleted)}, "
            f"failed {len(result.failures)}"
        )
        return result

    # -------------------------------------------------------------------------
    # Phases
    # -------------------------------------------------------------------------

    def _rebuild(
        self,
        plan: ReconcilePlan,
        source_commits: Union[SourceCommits, dict],
        context: CycleContext,
        result: PipelineResult,
    ) -> None:
        workdir = Path(self.config.workdir)
        try:
            workdir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            error = MaterializeError(f"Cannot prepare working directory {workdir}: {e}", cause=e)
            self.logger.error(str(error))
            for target in plan.to_rebuild:
                result.failed_rebuilds.append(FailedItem(
                    action="rebuild",
                    subject=target.destination.identity,
                    error=str(error),
                ))
            return

        batch = CommandBatch(stop_on_error=False, max_workers=self.config.max_workers)
        for target in plan.to_rebuild:
            batch.add(UploadArchiveCommand(
                store=self.store,
                materializer=self.materializer,
                target=target,
                commit_sha=_commit_of(source_commits, target.source),
                workdir=workdir,
                event_bus=self.event_bus,
                context=context,
                timeout=self.config.command_timeout,
                dry_run=False,
            ))

        for target, cmd_result in zip(plan.to_rebuild, batch.execute_all()):
            if cmd_result.success:
                result.uploaded.append(cmd_result.data)
            else:
                self.logger.error(f"Rebuild of {target.destination.identity} failed: {cmd_result.error}")
                result.failed_rebuilds.append(FailedItem(
                    action="rebuild",
                    subject=target.destination.identity,
                    error=cmd_result.error or "unknown error",
                ))

    def _delete(
        self,
        keys: list[str],
        context: CycleContext,
        result: PipelineResult,
    ) -> None:
        batch = CommandBatch(stop_on_error=False, max_workers=self.config.max_workers)
        for key in keys:
            batch.add(DeleteObjectCommand(
                store=self.store,
                key=key,
                event_bus=self.event_bus,
                context=context,
                dry_run=False,
            ))

        for key, cmd_result in zip(keys, batch.execute_all()):
            if cmd_result.success:
                result.deleted.append(key)
            else:
                self.logger.warning(f"Delete of {key} failed: {cmd_result.error}")
                result.failed_deletes.append(FailedItem(
                    action="delete",
                    subject=key,
                    error=cmd_result.error or "unknown error",
                ))


def _identity_of(key: str) -> Optional[str]:
    try:
        return decode_key(key).identity
    except MalformedKeyError:
        return None


def _commit_of(source_commits: Union[SourceCommits, dict], source) -> Optional[str]:
    if isinstance(source_commits, SourceCommits):
        return source_commits.commit_for(source)
    return source_commits.get(source.identity)
