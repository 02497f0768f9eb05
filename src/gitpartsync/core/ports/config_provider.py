"""
Config Provider Port - Typed application configuration.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional


@dataclass
class StorageConfig:
    """S3 bucket and credentials."""

    access_key_id: str = ""
    secret_access_key: str = ""
    region: str = ""
    bucket: str = ""
    connect_timeout: float = 5.0
    read_timeout: float = 5.0
    max_attempts: int = 3


@dataclass
class GitLabConfig:
    """GitLab instance and credentials."""

    base_url: str = ""
    username: str = ""
    token: str = ""
    timeout: float = 10.0


@dataclass
class GraphQLConfig:
    """Desired-state feed (qontract GraphQL server)."""

    server: str = ""
    query_file: Path = Path("./queries/gitlabSync.graphql")
    username: str = "dev"
    password: str = "dev"
    timeout: float = 30.0
    retry_delays: tuple[float, ...] = (1.0, 3.0, 10.0)


@dataclass
class PipelineConfig:
    """Materialization and reconciliation settings."""

    public_key: str = ""
    workdir: Path = Path("/working")
    max_workers: int = 4
    strict_deletes: bool = False
    command_timeout: float = 600.0
    cycle_timeout: Optional[float] = None


@dataclass
class PrCheckConfig:
    """Early-exit comparison against a previous desired-state bundle."""

    previous_bundle_sha: Optional[str] = None
    query_file: Path = Path("/queries/prCheck.graphql")
    saas_name: str = "saas-git-partition-sync-producer"

    @property
    def enabled(self) -> bool:
        return bool(self.previous_bundle_sha)


@dataclass
class AppConfig:
    """Complete application configuration."""

    storage: StorageConfig = field(default_factory=StorageConfig)
    gitlab: GitLabConfig = field(default_factory=GitLabConfig)
    graphql: GraphQLConfig = field(default_factory=GraphQLConfig)
    pipeline: PipelineConfig = field(default_factory=PipelineConfig)
    pr_check: PrCheckConfig = field(default_factory=PrCheckConfig)

    dry_run: bool = True
    run_once: bool = True
    verbose: bool = False
    reconcile_interval: float = 300.0
    # only labels log output; there is no metrics surface
    instance_shard: str = "fedramp"


class ConfigProviderPort(ABC):
    """Interface for configuration sources."""

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @abstractmethod
    def load(self) -> AppConfig:
        """Load complete configuration."""
        ...

    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        """Get a single configuration value."""
        ...

    @abstractmethod
    def validate(self) -> list[str]:
        """
        Validate configuration.

        Returns:
            Error messages; empty when the configuration is usable
        """
        ...
