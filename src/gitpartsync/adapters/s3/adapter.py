"""
S3 Adapter - Implements ObjectStorePort on an S3 bucket.

All calls go through a botocore Config with short connect/read timeouts and
a bounded number of retries, so a slow endpoint cannot stall a cycle.
"""

import logging
from pathlib import Path
from typing import Any, Optional, Union

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from ...core.domain.entities import ObjectInfo
from ...core.exceptions import DeleteError, ListError, UploadError
from ...core.ports.config_provider import StorageConfig
from ...core.ports.object_store import ObjectStorePort


class S3ObjectStore(ObjectStorePort):
    """S3 implementation of the ObjectStorePort."""

    MISSING_KEY_CODES = {"NoSuchKey", "404", "NotFound"}

    def __init__(self, config: StorageConfig, client: Optional[Any] = None):
        """
        Initialize the S3 store.

        Args:
            config: Storage configuration
            client: Optional preconfigured boto3 S3 client
        """
        self.config = config
        self.bucket = config.bucket
        self.logger = logging.getLogger("S3ObjectStore")
        self._client = client or boto3.client(
            "s3",
            region_name=config.region,
            aws_access_key_id=config.access_key_id,
            aws_secret_access_key=config.secret_access_key,
            config=BotoConfig(
                connect_timeout=config.connect_timeout,
                read_timeout=config.read_timeout,
                retries={"max_attempts": config.max_attempts, "mode": "standard"},
            ),
        )

    @property
    def name(self) -> str:
        return f"s3://{self.bucket}"

    def list_objects(self) -> list[ObjectInfo]:
        objects = []
        try:
            paginator = self._client.get_paginator("list_objects_v2")
            for page in paginator.paginate(Bucket=self.bucket):
                for obj in page.get("Contents", []):
                    objects.append(ObjectInfo(
                        key=obj["Key"],
                        size=int(obj.get("Size", 0)),
                        etag=(obj.get("ETag") or "").strip('"') or None,
                    ))
        except (BotoCoreError, ClientError) as e:
            raise ListError(f"Failed to list {self.name}: {e}", cause=e) from e

        self.logger.debug(f"Listed {len(objects)} object(s) in {self.name}")
        return objects

    def put_object(self, key: str, body: Union[bytes, Path]) -> None:
        try:
            if isinstance(body, Path):
                with body.open("rb") as fh:
                    self._client.put_object(Bucket=self.bucket, Key=key, Body=fh)
            else:
                self._client.put_object(Bucket=self.bucket, Key=key, Body=body)
        except (BotoCoreError, ClientError, OSError) as e:
            raise UploadError(f"Failed to upload {key}: {e}", key=key, cause=e) from e

    def delete_object(self, key: str) -> None:
        try:
            self._client.delete_object(Bucket=self.bucket, Key=key)
        except ClientError as e:
            code = str(e.response.get("Error", {}).get("Code", ""))
            if code in self.MISSING_KEY_CODES:
                self.logger.debug(f"{key} already gone")
                return
            raise DeleteError(f"Failed to delete {key}: {e}", key=key, cause=e) from e
        except BotoCoreError as e:
            raise DeleteError(f"Failed to delete {key}: {e}", key=key, cause=e) from e
