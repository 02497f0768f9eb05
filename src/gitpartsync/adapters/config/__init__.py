"""
Configuration Adapters - Load configuration from various sources.
"""

from .environment import EnvironmentConfigProvider, parse_duration

__all__ = ["EnvironmentConfigProvider", "parse_duration"]
