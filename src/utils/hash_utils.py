"""Hash utilities for the line grouping pipeline.

This module provides stable hashing for configuration snapshots and for
grouping results, so two runs can be compared without diffing reports.
"""

import hashlib
import json
from collections.abc import Iterable


def stable_schema_hash(schema_obj: dict) -> str:
    """Generate a stable hash for schema or settings objects.

    Args:
        schema_obj: Dictionary to hash

    Returns:
        SHA256 hash of the normalized object

    """
    # Sort keys and use compact JSON for determinism
    normalized = json.dumps(schema_obj, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(normalized.encode("utf-8")).hexdigest()


def stable_group_id(members: Iterable[str], n: int = 10) -> str:
    """Generate a stable group ID from the member records.

    Args:
        members: Member record strings
        n: Length of the group ID (default 10)

    Returns:
        Stable group ID as hex string, independent of member order

    """
    payload_str = json.dumps(sorted(map(str, members)), separators=(",", ":"))
    hash_obj = hashlib.sha1(payload_str.encode())
    return hash_obj.hexdigest()[:n]


def partition_fingerprint(groups: Iterable[Iterable[str]]) -> str:
    """Hash a whole partition independently of group and member order.

    Two grouping runs produce the same fingerprint exactly when they put the
    same records together, whatever group identifiers they allocated.
    """
    group_ids = sorted(stable_group_id(group, n=40) for group in groups)
    return hashlib.sha256("\n".join(group_ids).encode("utf-8")).hexdigest()
