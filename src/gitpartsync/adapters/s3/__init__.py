"""
S3 Adapter - The sync bucket on Amazon S3.
"""

from .adapter import S3ObjectStore

__all__ = ["S3ObjectStore"]
