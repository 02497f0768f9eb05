"""
GraphQL Adapter - Desired state from the qontract GraphQL server.
"""

from .adapter import GraphQLDesiredStateAdapter, parse_desired_state
from .client import GraphQLClient

__all__ = ["GraphQLDesiredStateAdapter", "GraphQLClient", "parse_desired_state"]
