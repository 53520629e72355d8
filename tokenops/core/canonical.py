"""
Canonical serialization for hashing, signing and storage.

Transaction bodies are signed over these bytes, and state documents are
written with them, so identical content always yields identical output.
"""

import json
from enum import Enum
from typing import Any


def canonicalize(obj: Any) -> Any:
    """
    Normalize a nested document before it is serialized.

    Mappings come back with sorted keys, tuples become lists, enum members
    collapse to their value and raw bytes are written as lowercase hex.
    """
    if isinstance(obj, Enum):
        return canonicalize(obj.value)
    if isinstance(obj, (bytes, bytearray)):
        return bytes(obj).hex()
    if isinstance(obj, dict):
        return {key: canonicalize(obj[key]) for key in sorted(obj)}
    if isinstance(obj, (list, tuple)):
        return [canonicalize(item) for item in obj]
    return obj


def canonical_json_str(obj: Any) -> str:
    """Compact, key-sorted JSON text; non-ASCII characters are kept as-is."""
    return json.dumps(canonicalize(obj), sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def canonical_json_bytes(obj: Any) -> bytes:
    """UTF-8 encoding of canonical_json_str, the exact bytes that get hashed or signed."""
    return canonical_json_str(obj).encode("utf-8")
