"""
GraphQL Desired State Adapter - Implements DesiredStatePort for qontract.

The feed is a nested document; only two parts of it are read:

    apps_v1[].codeComponents[].gitlabSync
        { sourceProject { name group branch }
          destinationProject { name group branch } }

    saas_files[].{ name, resourceTemplates[].{ name, targets[].ref } }
"""

import logging
from pathlib import Path
from typing import Any, Optional

from ...core.domain.entities import GitTarget, SyncTarget
from ...core.exceptions import ConfigurationError
from ...core.ports.config_provider import GraphQLConfig
from ...core.ports.desired_state import DesiredState, DesiredStatePort, ResourceTemplate
from .client import GraphQLClient


class GraphQLDesiredStateAdapter(DesiredStatePort):
    """
    Reads sync targets (and saas deployment descriptors) from GraphQL.

    The query text comes from a file so the same adapter serves both the
    regular sync query and the PR-check query.
    """

    def __init__(
        self,
        config: GraphQLConfig,
        query_file: Optional[Path] = None,
        client: Optional[GraphQLClient] = None,
        query: Optional[str] = None,
    ):
        """
        Initialize the adapter.

        Args:
            config: GraphQL configuration
            query_file: Query to run; defaults to ``config.query_file``
            client: Optional preconfigured client
            query: Query text, taking precedence over any file
        """
        self.config = config
        self.query_file = Path(query_file or config.query_file)
        self.logger = logging.getLogger("GraphQLDesiredStateAdapter")
        self._query = query
        self._client = client or GraphQLClient(
            url=config.server,
            username=config.username,
            password=config.password,
            timeout=config.timeout,
            retry_delays=config.retry_delays,
        )

    @property
    def name(self) -> str:
        return "GraphQL"

    @property
    def query(self) -> str:
        if self._query is None:
            try:
                self._query = self.query_file.read_text()
            except OSError as e:
                raise ConfigurationError(
                    f"Cannot read GraphQL query file {self.query_file}", cause=e
                ) from e
        return self._query

    def fetch(self, snapshot_id: Optional[str] = None) -> DesiredState:
        data = self._client.query(self.query, bundle_sha=snapshot_id)
        state = parse_desired_state(data)
        self.logger.debug(
            f"Fetched {len(state.sync_targets)} sync target(s) from "
            f"{'bundle ' + snapshot_id if snapshot_id else 'current bundle'}"
        )
        return state


# -----------------------------------------------------------------------------
# Document parsing
# -----------------------------------------------------------------------------

def parse_desired_state(data: dict[str, Any]) -> DesiredState:
    """
    Normalize a GraphQL ``data`` object into typed desired state.

    Raises:
        ConfigurationError: If the document does not have the expected shape
    """
    state = DesiredState()

    for app in _list(data, "apps_v1"):
        for component in _list(app, "codeComponents"):
            sync = component.get("gitlabSync") if isinstance(component, dict) else None
            if sync is None:
                continue
            state.sync_targets.append(SyncTarget(
                source=_git_target(sync, "sourceProject", require_branch=True),
                destination=_git_target(sync, "destinationProject"),
            ))

    for saas in _list(data, "saas_files"):
        name = saas.get("name") if isinstance(saas, dict) else None
        if not isinstance(name, str):
            raise ConfigurationError("saas file without a name")
        templates = []
        for template in _list(saas, "resourceTemplates"):
            refs = tuple(
                str(target.get("ref", ""))
                for target in _list(template, "targets")
                if isinstance(target, dict)
            )
            templates.append(ResourceTemplate(name=str(template.get("name") or ""), target_refs=refs))
        state.saas_files[name] = tuple(templates)

    return state


def _list(node: Any, field: str) -> list:
    if not isinstance(node, dict):
        raise ConfigurationError(f"Expected an object holding {field!r}")
    value = node.get(field)
    if value is None:
        return []
    if not isinstance(value, list):
        raise ConfigurationError(f"Field {field!r} must be a list")
    return value


def _git_target(sync: dict[str, Any], field: str, require_branch: bool = False) -> GitTarget:
    project = sync.get(field)
    if not isinstance(project, dict):
        raise ConfigurationError(f"gitlabSync is missing {field}")

    group = project.get("group")
    name = project.get("name")
    branch = project.get("branch") or ""
    if not isinstance(group, str) or not group or not isinstance(name, str) or not name:
        raise ConfigurationError(f"gitlabSync {field} needs a group and a name")
    if require_branch and not branch:
        raise ConfigurationError(f"gitlabSync {field} {group}/{name} has no branch")

    return GitTarget(group=group, project_name=name, branch=str(branch))
