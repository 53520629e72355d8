"""
Identifier shapes and generation.
"""

import re
import secrets

# shard.realm.num
ENTITY_ID_PATTERN = re.compile(r"^\d+\.\d+\.\d+$")


def is_entity_id(value: str) -> bool:
    """Return True if value has the canonical ledger entity-id shape."""
    return bool(ENTITY_ID_PATTERN.match(value or ""))


def new_key_ref_id() -> str:
    """Fresh opaque key reference id (kr_ + 16 hex chars)."""
    return f"kr_{secrets.token_hex(8)}"


def new_trace_id() -> str:
    """Short correlation id for one command invocation."""
    return secrets.token_hex(6)
