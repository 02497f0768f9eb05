"""
Git Host Port - Branch tip lookups.
"""

from abc import ABC, abstractmethod
from typing import Optional

from ..exceptions import GitPartSyncError


class GitHostError(GitPartSyncError):
    """Base exception for git host errors."""

    def __init__(self, message: str, identity: Optional[str] = None, cause: Optional[BaseException] = None):
        super().__init__(message, cause=cause)
        self.identity = identity


class AuthenticationError(GitHostError):
    """The git host rejected our credentials."""


class NotFoundError(GitHostError):
    """Project or branch does not exist."""


class GitHostPort(ABC):
    """Interface for the git hosting service."""

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @abstractmethod
    def latest_commit(self, identity: str, branch: str) -> str:
        """
        Resolve a branch to the commit at its tip.

        Args:
            identity: Project path (``group/project``)
            branch: Branch name

        Returns:
            Commit SHA

        Raises:
            NotFoundError: If the project or branch does not exist
            GitHostError: On any other lookup failure
        """
        ...

    @abstractmethod
    def clone_url(self, identity: str) -> str:
        """Authenticated HTTPS clone URL for a project."""
        ...
