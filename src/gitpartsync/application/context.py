"""
Cycle Context - State scoped to one reconciliation cycle.

Replaces any process-wide cache: a fresh context is created for every cycle
and dropped when the cycle ends, so nothing leaks into the next one.
"""

import threading
import time
from typing import Optional

from ..core.exceptions import CycleCancelledError


class CycleContext:
    """
    Per-cycle commit cache plus a single cancellation / deadline signal.

    Args:
        timeout: Seconds until the cycle deadline; None for no deadline
    """

    def __init__(self, timeout: Optional[float] = None):
        self._cancelled = threading.Event()
        self._deadline = time.monotonic() + timeout if timeout else None
        self._lock = threading.Lock()
        self._commits: dict[tuple[str, str], str] = {}

    # -------------------------------------------------------------------------
    # Cancellation
    # -------------------------------------------------------------------------

    def cancel(self) -> None:
        """Signal every in-flight step of this cycle to stop."""
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        if self._cancelled.is_set():
            return True
        return self._deadline is not None and time.monotonic() >= self._deadline

    def remaining(self, default: Optional[float] = None) -> Optional[float]:
        """Seconds left before the deadline, capped at ``default``."""
        if self._deadline is None:
            return default
        left = max(self._deadline - time.monotonic(), 0.0)
        return left if default is None else min(left, default)

    def check(self) -> None:
        """Raise if the cycle was cancelled or its deadline passed."""
        if self._cancelled.is_set():
            raise CycleCancelledError("Reconciliation cycle cancelled")
        if self.cancelled:
            raise CycleCancelledError("Reconciliation cycle deadline exceeded")

    # -------------------------------------------------------------------------
    # Commit cache
    # -------------------------------------------------------------------------

    def cached_commit(self, identity: str, branch: str) -> Optional[str]:
        with self._lock:
            return self._commits.get((identity, branch))

    def remember_commit(self, identity: str, branch: str, commit_sha: str) -> None:
        with self._lock:
            self._commits[(identity, branch)] = commit_sha

    @property
    def resolved_count(self) -> int:
        with self._lock:
            return len(self._commits)
