"""
Bucket Snapshot Reader - Decode the bucket listing into sync records.
"""

import logging

from ...core.domain.entities import BucketSnapshot
from ...core.domain.keys import decode_key
from ...core.exceptions import ListError, MalformedKeyError
from ...core.ports.object_store import ObjectStorePort


class BucketSnapshotReader:
    """
    Lists the bucket and indexes every decodable key by destination identity.

    Keys that fail to decode are kept aside in ``snapshot.malformed`` and
    logged; they never match a target and are never scheduled for deletion,
    since an undecodable object may not belong to us.
    """

    def __init__(self, store: ObjectStorePort):
        self.store = store
        self.logger = logging.getLogger("BucketSnapshotReader")

    def snapshot(self) -> BucketSnapshot:
        """
        Take a decoded snapshot of the bucket.

        Raises:
            ListError: If the bucket cannot be listed
        """
        try:
            objects = self.store.list_objects()
        except ListError:
            raise
        except Exception as e:
            raise ListError(f"Failed to list bucket: {e}", cause=e) from e

        snapshot = BucketSnapshot()
        for obj in objects:
            try:
                record = decode_key(obj.key)
            except MalformedKeyError as e:
                self.logger.warning(f"Ignoring undecodable object: {e}")
                snapshot.malformed.append(obj.key)
                continue

            if record.identity in snapshot.records:
                self.logger.warning(
                    f"Duplicate object for {record.identity}: {record.key}"
                )
                snapshot.duplicates.append(record)
            else:
                snapshot.records[record.identity] = record

        self.logger.info(
            f"Bucket holds {len(snapshot.records)} destination(s), "
            f"{len(snapshot.duplicates)} duplicate(s), "
            f"{len(snapshot.malformed)} malformed key(s)"
        )
        return snapshot
