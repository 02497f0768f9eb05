"""
Exceptions - Centralized exception hierarchy.

Every failure that crosses a port boundary is translated into one of these,
so the application layer never has to know about requests, botocore or
subprocess errors.
"""

from typing import Optional


class GitPartSyncError(Exception):
    """Base class for all gitpartsync errors."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __str__(self) -> str:
        if self.cause is not None:
            return f"{self.message} (caused by: {self.cause})"
        return self.message


# -----------------------------------------------------------------------------
# Configuration
# -----------------------------------------------------------------------------

class ConfigurationError(GitPartSyncError):
    """Missing or invalid setting, or an unusable desired-state document."""


class DuplicateDestinationError(ConfigurationError):
    """Two sync targets declare the same destination identity."""

    def __init__(self, identity: str, count: int):
        super().__init__(
            f"Destination {identity} is declared by {count} sync targets"
        )
        self.identity = identity
        self.count = count


# -----------------------------------------------------------------------------
# Cycle-aborting errors
# -----------------------------------------------------------------------------

class FetchError(GitPartSyncError):
    """Desired state could not be retrieved."""


class ResolutionError(GitPartSyncError):
    """A source branch could not be resolved to a commit."""

    def __init__(
        self,
        message: str,
        identity: str = "",
        branch: str = "",
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message, cause=cause)
        self.identity = identity
        self.branch = branch


class ListError(GitPartSyncError):
    """The bucket could not be listed."""


class CycleCancelledError(GitPartSyncError):
    """The cycle was cancelled or ran past its deadline."""


# -----------------------------------------------------------------------------
# Key codec
# -----------------------------------------------------------------------------

class MalformedKeyError(GitPartSyncError):
    """An object key does not decode to a sync fingerprint."""

    def __init__(self, key: str, reason: str, cause: Optional[BaseException] = None):
        super().__init__(f"Malformed key {key!r}: {reason}", cause=cause)
        self.key = key
        self.reason = reason


# -----------------------------------------------------------------------------
# Per-item errors
# -----------------------------------------------------------------------------

class MaterializeError(GitPartSyncError):
    """Building an encrypted archive failed."""


class CloneError(MaterializeError):
    """git clone or checkout failed."""


class ArchiveError(MaterializeError):
    """Packing the working tree failed."""


class EncryptError(MaterializeError):
    """gpg encryption failed."""


class StorageError(GitPartSyncError):
    """An object storage write failed."""

    def __init__(self, message: str, key: str = "", cause: Optional[BaseException] = None):
        super().__init__(message, cause=cause)
        self.key = key


class UploadError(StorageError):
    """put_object failed."""


class DeleteError(StorageError):
    """delete_object failed."""
