"""Hashing utility functions for block data."""

import hashlib
import json
from typing import Any, Mapping


def calculate_data_md5(data: Any) -> str:
    """
    Calculate the MD5 hash of JSON-serializable data.

    Keys are sorted so equal mappings hash equally regardless of order.

    Args:
        data: Data to hash

    Returns:
        MD5 hash as hexadecimal string
    """
    payload = json.dumps(data, sort_keys=True, separators=(",", ":"), ensure_ascii=False, default=str)
    return hashlib.md5(payload.encode("utf-8")).hexdigest()


def get_block_instance_id(data: Mapping[str, Any]) -> str:
    """Stable id of a schema-field block instance: its own id, else a hash of its data."""
    block_id = data.get("id")
    if block_id:
        return str(block_id)
    return "block_" + calculate_data_md5(dict(data))
