"""
Adapters - Concrete implementations of ports.

This module contains implementations for:
- Desired state: qontract GraphQL
- Git host: GitLab
- Object store: S3
- Materializer: git + tar + gpg
- Config: Environment variables
"""

from .graphql import GraphQLDesiredStateAdapter
from .gitlab import GitLabAdapter
from .s3 import S3ObjectStore
from .archive import GitArchiveMaterializer
from .config import EnvironmentConfigProvider

__all__ = [
    "GraphQLDesiredStateAdapter",
    "GitLabAdapter",
    "S3ObjectStore",
    "GitArchiveMaterializer",
    "EnvironmentConfigProvider",
]
