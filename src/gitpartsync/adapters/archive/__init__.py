"""
Archive Adapter - Encrypted archives built with git and gpg.
"""

from .materializer import GitArchiveMaterializer

__all__ = ["GitArchiveMaterializer"]
