"""
Change Detector - Decide whether a reconciliation cycle can be skipped.

Compares two snapshots of desired state over the fields that affect the
outcome: the sync targets, and the deployment descriptor of the saas file
that rolls out this producer, so a promotion of the producer itself is never
skipped.
"""

import logging
from typing import Optional

from ...core.domain.entities import SyncTarget
from ...core.exceptions import FetchError, GitPartSyncError
from ...core.ports.desired_state import DesiredState, DesiredStatePort, ResourceTemplate


DEFAULT_SAAS_NAME = "saas-git-partition-sync-producer"


class ChangeDetector:
    """Structural comparison of desired state between two bundles."""

    def __init__(self, feed: DesiredStatePort, saas_name: str = DEFAULT_SAAS_NAME):
        self.feed = feed
        self.saas_name = saas_name
        self.logger = logging.getLogger("ChangeDetector")

    def unchanged(
        self,
        previous_snapshot_id: str,
        current_snapshot_id: Optional[str] = None,
    ) -> bool:
        """
        True when nothing relevant differs between the two bundles.

        Args:
            previous_snapshot_id: Bundle to compare against
            current_snapshot_id: Bundle to compare; None for the current one

        Raises:
            FetchError: If either bundle cannot be fetched
        """
        previous = self._fetch(previous_snapshot_id)
        current = self._fetch(current_snapshot_id)

        if self.sync_view(previous) != self.sync_view(current):
            self.logger.info("Sync targets changed")
            return False

        if self.deployment_view(previous) != self.deployment_view(current):
            self.logger.info(f"Deployment of {self.saas_name} changed")
            return False

        return True

    def sync_view(self, state: DesiredState) -> tuple[SyncTarget, ...]:
        """Sync targets, order independent."""
        return tuple(sorted(state.sync_targets))

    def deployment_view(self, state: DesiredState) -> tuple[ResourceTemplate, ...]:
        """Resource templates of the producer's own saas file."""
        return tuple(state.saas_files.get(self.saas_name, ()))

    def _fetch(self, snapshot_id: Optional[str]) -> DesiredState:
        label = snapshot_id or "current"
        try:
            return self.feed.fetch(snapshot_id)
        except GitPartSyncError:
            raise
        except Exception as e:
            raise FetchError(f"Could not fetch desired state at {label}: {e}", cause=e) from e
