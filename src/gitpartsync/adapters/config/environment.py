"""
Environment Config Provider - Load configuration from environment variables.

Supports:
- Environment variables (AWS_*, GITLAB_*, GRAPHQL_*, PUBLIC_KEY, WORKDIR, ...)
- .env files
- Command line argument overrides
"""

import os
import re
from pathlib import Path
from typing import Any, Optional

from ...core.ports.config_provider import (
    ConfigProviderPort,
    AppConfig,
    StorageConfig,
    GitLabConfig,
    GraphQLConfig,
    PipelineConfig,
    PrCheckConfig,
)


_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(ms|h|m|s)")
_DURATION_UNITS = {"h": 3600.0, "m": 60.0, "s": 1.0, "ms": 0.001}


def parse_duration(value: str) -> float:
    """
    Parse a Go-style duration (``5m``, ``1h30m``, ``90s``) into seconds.

    A bare number is read as seconds.

    Raises:
        ValueError: If the value is not a duration
    """
    text = str(value).strip()
    if not text:
        raise ValueError("empty duration")
    try:
        return float(text)
    except ValueError:
        pass

    pos = 0
    total = 0.0
    for match in _DURATION_PART.finditer(text):
        if match.start() != pos:
            break
        total += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        pos = match.end()
    if pos != len(text):
        raise ValueError(f"invalid duration {value!r}")
    return total


class EnvironmentConfigProvider(ConfigProviderPort):
    """
    Configuration provider that loads from environment variables and .env files.

    Later sources win: .env file, then process environment, then CLI overrides.
    """

    # environment variable -> (config key, default); None default = required
    ENV_MAPPING: dict[str, tuple[str, Optional[str]]] = {
        "AWS_ACCESS_KEY_ID": ("aws_access_key_id", None),
        "AWS_SECRET_ACCESS_KEY": ("aws_secret_access_key", None),
        "AWS_REGION": ("aws_region", None),
        "AWS_S3_BUCKET": ("aws_s3_bucket", None),
        "GITLAB_BASE_URL": ("gitlab_base_url", None),
        "GITLAB_USERNAME": ("gitlab_username", None),
        "GITLAB_TOKEN": ("gitlab_token", None),
        "GRAPHQL_SERVER": ("graphql_server", None),
        "GRAPHQL_GLSYNC_QUERY_FILE": ("graphql_glsync_query_file", "./queries/gitlabSync.graphql"),
        "GRAPHQL_USERNAME": ("graphql_username", "dev"),
        "GRAPHQL_PASSWORD": ("graphql_password", "dev"),
        "INSTANCE_SHARD": ("instance_shard", "fedramp"),
        "PUBLIC_KEY": ("public_key", None),
        "RECONCILE_SLEEP_TIME": ("reconcile_sleep_time", "5m"),
        "WORKDIR": ("workdir", "/working"),
        "MAX_WORKERS": ("max_workers", "4"),
        "STRICT_DELETES": ("strict_deletes", "false"),
        "CYCLE_TIMEOUT": ("cycle_timeout", ""),
        "PREVIOUS_BUNDLE_SHA": ("previous_bundle_sha", ""),
        "GRAPHQL_PRCHECK_QUERY_FILE": ("graphql_prcheck_query_file", "/queries/prCheck.graphql"),
        "GIT_PARTITION_SAAS_NAME": ("git_partition_saas_name", "saas-git-partition-sync-producer"),
        "GITPARTSYNC_VERBOSE": ("verbose", "false"),
    }

    BOOLEAN_KEYS = {"strict_deletes", "verbose", "dry_run", "run_once"}

    def __init__(
        self,
        env_file: Optional[Path] = None,
        cli_overrides: Optional[dict[str, Any]] = None,
        environ: Optional[dict[str, str]] = None,
    ):
        """
        Initialize the config provider.

        Args:
            env_file: Path to .env file (auto-detected if not specified)
            cli_overrides: Command line argument overrides
            environ: Environment to read instead of ``os.environ``
        """
        self._values: dict[str, Any] = {}
        self._env_file = env_file
        self._cli_overrides = cli_overrides or {}
        self._environ = os.environ if environ is None else environ

        # Load configuration
        self._load_env_file()
        self._load_environment()
        self._apply_cli_overrides()

    # -------------------------------------------------------------------------
    # ConfigProviderPort Implementation
    # -------------------------------------------------------------------------

    @property
    def name(self) -> str:
        return "Environment"

    def load(self) -> AppConfig:
        """Load complete configuration."""
        storage = StorageConfig(
            access_key_id=self.get("aws_access_key_id", ""),
            secret_access_key=self.get("aws_secret_access_key", ""),
            region=self.get("aws_region", ""),
            bucket=self.get("aws_s3_bucket", ""),
        )

        gitlab = GitLabConfig(
            base_url=self.get("gitlab_base_url", ""),
            username=self.get("gitlab_username", ""),
            token=self.get("gitlab_token", ""),
        )

        graphql = GraphQLConfig(
            server=self.get("graphql_server", ""),
            query_file=Path(self._with_default("graphql_glsync_query_file")),
            username=self._with_default("graphql_username"),
            password=self._with_default("graphql_password"),
        )

        cycle_timeout = self._with_default("cycle_timeout")
        pipeline = PipelineConfig(
            public_key=self.get("public_key", ""),
            workdir=Path(self._with_default("workdir")),
            max_workers=int(self._with_default("max_workers")),
            strict_deletes=self._flag("strict_deletes"),
            cycle_timeout=parse_duration(cycle_timeout) if cycle_timeout else None,
        )

        pr_check = PrCheckConfig(
            previous_bundle_sha=self.get("previous_bundle_sha") or None,
            query_file=Path(self._with_default("graphql_prcheck_query_file")),
            saas_name=self._with_default("git_partition_saas_name"),
        )

        return AppConfig(
            storage=storage,
            gitlab=gitlab,
            graphql=graphql,
            pipeline=pipeline,
            pr_check=pr_check,
            dry_run=self._flag("dry_run", True),
            run_once=self._flag("run_once", True),
            verbose=self._flag("verbose"),
            reconcile_interval=parse_duration(self._with_default("reconcile_sleep_time")),
            instance_shard=self._with_default("instance_shard"),
        )

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value."""
        # Normalize key
        key = key.lower().replace("-", "_")

        # Check CLI overrides first
        if key in self._cli_overrides and self._cli_overrides[key] is not None:
            return self._cli_overrides[key]

        # Check loaded values
        return self._values.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Set a configuration value."""
        key = key.lower().replace("-", "_")
        self._values[key] = value

    def validate(self) -> list[str]:
        """Validate configuration."""
        errors = []

        for env_key, (config_key, default) in self.ENV_MAPPING.items():
            if default is None and not self.get(config_key):
                errors.append(f"Missing {env_key} - set in environment or .env file")

        try:
            parse_duration(self._with_default("reconcile_sleep_time"))
        except ValueError as e:
            errors.append(f"Invalid RECONCILE_SLEEP_TIME: {e}")

        cycle_timeout = self._with_default("cycle_timeout")
        if cycle_timeout:
            try:
                parse_duration(cycle_timeout)
            except ValueError as e:
                errors.append(f"Invalid CYCLE_TIMEOUT: {e}")

        try:
            if int(self._with_default("max_workers")) < 1:
                errors.append("MAX_WORKERS must be at least 1")
        except (TypeError, ValueError):
            errors.append(f"Invalid MAX_WORKERS: {self.get('max_workers')!r}")

        return errors

    # -------------------------------------------------------------------------
    # Private Methods
    # -------------------------------------------------------------------------

    def _with_default(self, config_key: str) -> Any:
        for key, default in self.ENV_MAPPING.values():
            if key == config_key:
                return self.get(config_key) or default
        return self.get(config_key)

    def _flag(self, key: str, default: bool = False) -> bool:
        value = self.get(key)
        if value is None or value == "":
            value = self._with_default(key)
        if value is None or value == "":
            return default
        if isinstance(value, bool):
            return value
        return str(value).strip().lower() in ("true", "1", "yes")

    def _load_env_file(self) -> None:
        """Load values from .env file."""
        env_file = self._find_env_file()
        if not env_file:
            return

        for line in env_file.read_text().splitlines():
            line = line.strip()

            # Skip empty lines and comments
            if not line or line.startswith("#"):
                continue

            # Parse key=value
            if "=" not in line:
                continue

            key, value = line.split("=", 1)
            key = key.strip().upper()
            value = value.strip().strip('"').strip("'")

            if key in self.ENV_MAPPING:
                self._values[self.ENV_MAPPING[key][0]] = value

    def _find_env_file(self) -> Optional[Path]:
        """Find .env file."""
        if self._env_file and self._env_file.exists():
            return self._env_file

        # Check current directory
        cwd_env = Path.cwd() / ".env"
        if cwd_env.exists():
            return cwd_env

        return None

    def _load_environment(self) -> None:
        """Load values from environment variables."""
        for env_key, (config_key, _) in self.ENV_MAPPING.items():
            raw_value = self._environ.get(env_key)
            if raw_value:
                self._values[config_key] = raw_value

    def _apply_cli_overrides(self) -> None:
        """Apply CLI argument overrides."""
        # Map CLI args to config keys
        cli_mapping = {
            "dry_run": "dry_run",
            "run_once": "run_once",
            "verbose": "verbose",
        }

        for cli_key, config_key in cli_mapping.items():
            if cli_key in self._cli_overrides and self._cli_overrides[cli_key] is not None:
                self._values[config_key] = self._cli_overrides[cli_key]
