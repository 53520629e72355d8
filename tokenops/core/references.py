"""
Parsing of raw entity references.

A raw reference is one of:
- IdWithSecret: exactly one ':' with a non-empty suffix ("0.0.123:302e...")
- BareId: canonical entity id shape ("0.0.123")
- Alias: anything else ("alice")
"""

from dataclasses import dataclass
from typing import Union

from .ids import is_entity_id


@dataclass(frozen=True)
class Alias:
    name: str


@dataclass(frozen=True)
class IdWithSecret:
    entity_id: str
    secret: str

    def __repr__(self) -> str:
        return f"IdWithSecret(entity_id={self.entity_id!r}, secret=<redacted>)"


@dataclass(frozen=True)
class BareId:
    entity_id: str


ParsedReference = Union[Alias, IdWithSecret, BareId]


def parse_reference(raw: str) -> ParsedReference:
    """
    Classify a raw reference string.

    Precedence: IdWithSecret, then BareId, then Alias.
    """
    raw = raw.strip()
    if raw.count(":") == 1:
        entity_id, secret = raw.split(":")
        if secret:
            return IdWithSecret(entity_id=entity_id, secret=secret)
    if is_entity_id(raw):
        return BareId(entity_id=raw)
    return Alias(name=raw)
