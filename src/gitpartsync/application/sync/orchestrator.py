"""
Sync Orchestrator - Coordinates one reconciliation cycle.

This is the main entry point for sync operations.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

from ...core.domain.entities import SyncTarget, validate_sync_targets
from ...core.domain.events import EventBus, SyncCompleted, SyncStarted
from ...core.ports.config_provider import PipelineConfig
from ...core.ports.desired_state import DesiredStatePort
from ...core.ports.git_host import GitHostPort
from ...core.ports.materializer import MaterializerPort
from ...core.ports.object_store import ObjectStorePort
from ..context import CycleContext
from .pipeline import MaterializationPipeline, PipelineResult
from .reconciler import ReconcilePlan, diff
from .resolver import CommitResolver, SourceCommits
from .snapshot import BucketSnapshotReader


@dataclass
class SyncResult:
    """Result of a reconciliation cycle."""

    success: bool = True
    dry_run: bool = True

    # Counts
    targets: int = 0
    objects_in_bucket: int = 0

    # Details
    to_rebuild: list[str] = field(default_factory=list)  # destination identities
    to_delete: list[str] = field(default_factory=list)  # keys
    planned: list[str] = field(default_factory=list)
    uploaded: list[str] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)
    malformed_keys: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def add_error(self, error: str) -> None:
        """Add an error message."""
        self.errors.append(error)
        self.success = False

    def add_warning(self, warning: str) -> None:
        """Add a warning message."""
        self.warnings.append(warning)

    @property
    def in_sync(self) -> bool:
        return not self.to_rebuild and not self.to_delete


class SyncOrchestrator:
    """
    Orchestrates one pass of resolve -> snapshot -> diff -> materialize.

    Phases:
    1. Fetch and validate desired state
    2. Plan: resolve source commits, snapshot the bucket, diff
    3. Execute the plan (or preview it in dry-run)

    Failures in phases 1-2 abort the cycle before the bucket is touched.
    Failures of individual items in phase 3 are collected on the result.
    """

    def __init__(
        self,
        feed: DesiredStatePort,
        git_host: GitHostPort,
        store: ObjectStorePort,
        materializer: MaterializerPort,
        config: Optional[PipelineConfig] = None,
        event_bus: Optional[EventBus] = None,
    ):
        """
        Initialize the orchestrator.

        Args:
            feed: Desired-state port
            git_host: Git host port
            store: Object store port
            materializer: Materializer port
            config: Pipeline configuration
            event_bus: Optional event bus
        """
        self.feed = feed
        self.config = config or PipelineConfig()
        self.event_bus = event_bus or EventBus()
        self.logger = logging.getLogger("SyncOrchestrator")

        self.resolver = CommitResolver(git_host, max_workers=self.config.max_workers)
        self.reader = BucketSnapshotReader(store)
        self.pipeline = MaterializationPipeline(
            materializer, store, config=self.config, event_bus=self.event_bus
        )

    # -------------------------------------------------------------------------
    # Main Entry Points
    # -------------------------------------------------------------------------

    def plan(
        self,
        targets: list[SyncTarget],
        context: Optional[CycleContext] = None,
        result: Optional[SyncResult] = None,
    ) -> tuple[ReconcilePlan, SourceCommits]:
        """
        Compute the reconcile plan for ``targets`` against the live bucket.

        Returns:
            (plan, source commits)
        """
        context = context or CycleContext(timeout=self.config.cycle_timeout)
        result = result or SyncResult()

        commits = self.resolver.resolve(targets, context)
        context.check()

        snapshot = self.reader.snapshot()
        result.objects_in_bucket = len(snapshot) + len(snapshot.malformed)
        for key in snapshot.malformed:
            result.malformed_keys.append(key)
            result.add_warning(f"Undecodable object left in place: {key}")

        plan = diff(targets, commits, snapshot)
        result.to_rebuild = [t.destination.identity for t in plan.to_rebuild]
        result.to_delete = list(plan.to_delete)
        return plan, commits

    def run_cycle(
        self,
        dry_run: bool = True,
        context: Optional[CycleContext] = None,
        progress_callback: Optional[Callable[[str, int, int], None]] = None,
    ) -> SyncResult:
        """
        Run a full reconciliation cycle.

        Args:
            dry_run: Report planned actions without touching the bucket
            context: Cycle context; a fresh one is created when omitted
            progress_callback: Optional callback for progress updates

        Returns:
            SyncResult with cycle details

        Raises:
            ConfigurationError: If desired state is invalid
            FetchError: If desired state cannot be fetched
            ResolutionError: If a source branch cannot be resolved
            ListError: If the bucket cannot be listed
            CycleCancelledError: If the cycle is cancelled before the plan runs
        """
        # history is per cycle
        self.event_bus.clear_history()
        context = context or CycleContext(timeout=self.config.cycle_timeout)
        result = SyncResult(dry_run=dry_run)

        # Phase 1: Desired state
        self._report_progress(progress_callback, "Fetching desired state", 1, 3)
        targets = validate_sync_targets(self.feed.fetch_sync_targets())
        result.targets = len(targets)
        self.logger.info(f"Desired state has {len(targets)} sync target(s)")

        self.event_bus.publish(SyncStarted(dry_run=dry_run, target_count=len(targets)))

        # Phase 2: Resolve, snapshot, diff
        self._report_progress(progress_callback, "Planning", 2, 3)
        plan, commits = self.plan(targets, context, result)
        self.logger.info(
            f"{len(plan.to_rebuild)} destination(s) to update, {len(plan.to_delete)} key(s) to delete"
        )

        # Phase 3: Execute
        self._report_progress(progress_callback, "Applying changes", 3, 3)
        outcome = self.pipeline.execute(plan, commits, context=context, dry_run=dry_run)
        self._collect(outcome, result)

        self.event_bus.publish(SyncCompleted(
            dry_run=dry_run,
            rebuilt=len(result.uploaded),
            deleted=len(result.deleted),
            errors=list(result.errors),
        ))

        return result

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _collect(self, outcome: PipelineResult, result: SyncResult) -> None:
        result.planned = list(outcome.planned)
        result.uploaded = list(outcome.uploaded)
        result.deleted = list(outcome.deleted)

        for item in outcome.failed_rebuilds:
            result.add_error(f"Failed to update {item.subject}: {item.error}")

        for item in outcome.failed_deletes:
            message = f"Failed to delete {item.subject}: {item.error}"
            if self.config.strict_deletes:
                result.add_error(message)
            else:
                result.add_warning(message)

    def _report_progress(
        self,
        callback: Optional[Callable],
        phase: str,
        current: int,
        total: int
    ) -> None:
        """Report progress to callback if provided."""
        if callback:
            callback(phase, current, total)
        self.logger.debug(f"Phase {current}/{total}: {phase}")
