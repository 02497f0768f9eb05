"""
Ports - Abstract interfaces for external dependencies.

Ports define the contracts that adapters must implement.
This enables dependency inversion and easy testing.
"""

from .desired_state import DesiredStatePort, DesiredState, ResourceTemplate
from .git_host import GitHostPort, GitHostError, AuthenticationError, NotFoundError
from .object_store import ObjectStorePort
from .materializer import MaterializerPort
from .config_provider import (
    ConfigProviderPort,
    AppConfig,
    StorageConfig,
    GitLabConfig,
    GraphQLConfig,
    PipelineConfig,
    PrCheckConfig,
)

__all__ = [
    "DesiredStatePort",
    "DesiredState",
    "ResourceTemplate",
    "GitHostPort",
    "GitHostError",
    "AuthenticationError",
    "NotFoundError",
    "ObjectStorePort",
    "MaterializerPort",
    "ConfigProviderPort",
    "AppConfig",
    "StorageConfig",
    "GitLabConfig",
    "GraphQLConfig",
    "PipelineConfig",
    "PrCheckConfig",
]
