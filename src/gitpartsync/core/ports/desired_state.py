"""
Desired State Port - Where the declared sync targets come from.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional

from ..domain.entities import SyncTarget


@dataclass(frozen=True)
class ResourceTemplate:
    """Deployment descriptor of a saas file: the refs its targets promote."""

    name: str = ""
    target_refs: tuple[str, ...] = ()


@dataclass
class DesiredState:
    """
    Normalized desired-state document.

    ``saas_files`` maps a saas file name to its resource templates; only the
    saas file that deploys this producer matters for change detection.
    """

    sync_targets: list[SyncTarget] = field(default_factory=list)
    saas_files: dict[str, tuple[ResourceTemplate, ...]] = field(default_factory=dict)


class DesiredStatePort(ABC):
    """Interface for the desired-state feed."""

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @abstractmethod
    def fetch(self, snapshot_id: Optional[str] = None) -> DesiredState:
        """
        Fetch the desired state.

        Args:
            snapshot_id: Bundle to read; None reads the current bundle

        Raises:
            FetchError: If the document cannot be retrieved
            ConfigurationError: If the document cannot be parsed
        """
        ...

    def fetch_sync_targets(self) -> list[SyncTarget]:
        """Flattened sync targets of the current bundle."""
        return self.fetch().sync_targets
