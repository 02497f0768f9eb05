"""
Key Codec - Fingerprint keys for archives in the sync bucket.

An object key is the only persistent state: it carries the destination
identity, branch and commit of the archive stored under it, so listing the
bucket is also an inventory of what has been materialized.

    base64(JSON{"group", "project_name", "commit_sha", "branch"}) + ".tar.gpg"

The standard (not URL-safe) base64 alphabet is used.
"""

import base64
import binascii
import json

from ..exceptions import MalformedKeyError
from .entities import GitTarget, StoredObjectRecord


ARCHIVE_EXTENSION = "tar.gpg"

_FIELDS = ("group", "project_name", "commit_sha", "branch")


def encode_key(target: GitTarget, commit_sha: str, extension: str = ARCHIVE_EXTENSION) -> str:
    """
    Build the object key for an archive of ``target`` at ``commit_sha``.

    Args:
        target: Destination identity (group, project name, branch)
        commit_sha: Commit the archived content was taken from
        extension: Extension chain appended after the first ``.``

    Returns:
        The object key
    """
    payload = json.dumps(
        {
            "group": target.group,
            "project_name": target.project_name,
            "commit_sha": commit_sha,
            "branch": target.branch,
        },
        separators=(",", ":"),
        ensure_ascii=False,
    )
    encoded = base64.b64encode(payload.encode("utf-8")).decode("ascii")
    return f"{encoded}.{extension.lstrip('.')}"


def decode_key(key: str) -> StoredObjectRecord:
    """
    Decode an object key back into the record it describes.

    Everything from the first ``.`` on is treated as the extension chain,
    whatever its exact value.

    Raises:
        MalformedKeyError: If the key has no extension, is not valid base64,
            or does not hold the expected JSON record
    """
    encoded, dot, _ = key.partition(".")
    if not dot:
        raise MalformedKeyError(key, "no archive extension")

    try:
        raw = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as e:
        raise MalformedKeyError(key, "not valid base64", cause=e) from e

    try:
        data = json.loads(raw.decode("utf-8"))
    except ValueError as e:
        raise MalformedKeyError(key, "payload is not JSON", cause=e) from e

    if not isinstance(data, dict):
        raise MalformedKeyError(key, "payload is not an object")

    for name in _FIELDS:
        value = data.get(name, "" if name == "branch" else None)
        if not isinstance(value, str):
            raise MalformedKeyError(key, f"field {name!r} missing or not a string")
        if name != "branch" and not value:
            raise MalformedKeyError(key, f"field {name!r} is empty")

    return StoredObjectRecord(
        key=key,
        group=data["group"],
        project_name=data["project_name"],
        commit_sha=data["commit_sha"],
        branch=data.get("branch", ""),
    )
