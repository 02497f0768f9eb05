"""
Materializer Port - Clone, archive and encrypt a source project.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from ..domain.entities import SyncTarget


class MaterializerPort(ABC):
    """Interface for building the encrypted archive of one sync target."""

    @abstractmethod
    def materialize(
        self,
        target: SyncTarget,
        commit_sha: str,
        workdir: Path,
        timeout: Optional[float] = None,
    ) -> Path:
        """
        Build the encrypted archive of ``target.source`` at ``commit_sha``.

        Args:
            target: Sync target to materialize
            commit_sha: Exact commit to check out
            workdir: Scratch directory owned by the caller for this item
            timeout: Upper bound in seconds for each external tool call

        Returns:
            Path of the encrypted artifact, inside ``workdir``

        Raises:
            CloneError: If the clone or checkout fails
            ArchiveError: If the working tree cannot be packed
            EncryptError: If encryption fails
        """
        ...
