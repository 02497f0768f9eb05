"""
Object Store Port - The sync bucket.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Union

from ..domain.entities import ObjectInfo


class ObjectStorePort(ABC):
    """
    Interface for the bucket holding encrypted archives.

    Implementations must bound every call with a timeout. ``put_object`` is
    all-or-nothing: the key is visible only once the full body is written.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @abstractmethod
    def list_objects(self) -> list[ObjectInfo]:
        """
        List every object in the bucket.

        Raises:
            ListError: If the bucket cannot be listed
        """
        ...

    @abstractmethod
    def put_object(self, key: str, body: Union[bytes, Path]) -> None:
        """
        Write an object.

        Raises:
            UploadError: If the write fails
        """
        ...

    @abstractmethod
    def delete_object(self, key: str) -> None:
        """
        Delete an object. Deleting a missing key succeeds.

        Raises:
            DeleteError: If the delete fails
        """
        ...
