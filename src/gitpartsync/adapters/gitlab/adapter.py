"""
GitLab Adapter - Implements GitHostPort for GitLab.
"""

import logging
from typing import Optional
from urllib.parse import quote, urlsplit, urlunsplit

from ...core.ports.config_provider import GitLabConfig
from ...core.ports.git_host import GitHostPort, GitHostError
from .client import GitLabApiClient


class GitLabAdapter(GitHostPort):
    """
    GitLab implementation of the GitHostPort.

    Resolves branch tips through the commits API and builds token
    authenticated clone URLs for the materializer.
    """

    def __init__(
        self,
        config: GitLabConfig,
        client: Optional[GitLabApiClient] = None,
    ):
        """
        Initialize the GitLab adapter.

        Args:
            config: GitLab configuration
            client: Optional preconfigured API client
        """
        self.config = config
        self.logger = logging.getLogger("GitLabAdapter")
        self._client = client or GitLabApiClient(
            base_url=config.base_url,
            token=config.token,
            timeout=config.timeout,
        )

    @property
    def name(self) -> str:
        return "GitLab"

    def latest_commit(self, identity: str, branch: str) -> str:
        data = self._client.get_commit(identity, branch)
        commit_sha = data.get("id") if isinstance(data, dict) else None
        if not commit_sha:
            raise GitHostError(
                f"Commit response for {identity}@{branch} has no id",
                identity=identity,
            )
        return commit_sha

    def clone_url(self, identity: str) -> str:
        parts = urlsplit(self.config.base_url.rstrip("/"))
        credentials = f"{quote(self.config.username, safe='')}:{quote(self.config.token, safe='')}"
        netloc = f"{credentials}@{parts.netloc}"
        path = f"{parts.path}/{identity}.git"
        return urlunsplit((parts.scheme or "https", netloc, path, "", ""))
