"""
Core primitives for token operations.

- models: immutable domain records
- references: raw reference parsing (alias / id:secret / bare id)
- canonical: deterministic serialization
- clock: injectable time sources
- ids: entity id shape and key ref generation
- errors: exception taxonomy
"""

from .models import (
    SUPPORTED_NETWORKS,
    AliasRecord,
    Association,
    CustomFee,
    EntityType,
    KeyHandle,
    OperatorRecord,
    ResolutionSource,
    ResolvedAccount,
    ResolvedToken,
    SupplyType,
    TokenData,
    TokenKeys,
    TransactionResult,
)
from .references import Alias, BareId, IdWithSecret, ParsedReference, parse_reference
from .canonical import canonicalize, canonical_json_bytes, canonical_json_str
from .clock import FixedClock, SystemClock
from .ids import is_entity_id, new_key_ref_id
from .errors import (
    AliasNotFound,
    BuildError,
    ConfigurationError,
    DuplicateAlias,
    InvalidKeyMaterial,
    InvalidParameters,
    InvalidReference,
    LedgerError,
    MalformedSuccess,
    MissingCredentials,
    OperationFailed,
    ResolutionFailure,
    SignerError,
    StateStoreError,
    TokenNotFound,
    TokenOpsError,
)

__all__ = [
    "SUPPORTED_NETWORKS",
    "AliasRecord",
    "Association",
    "CustomFee",
    "EntityType",
    "KeyHandle",
    "OperatorRecord",
    "ResolutionSource",
    "ResolvedAccount",
    "ResolvedToken",
    "SupplyType",
    "TokenData",
    "TokenKeys",
    "TransactionResult",
    "Alias",
    "BareId",
    "IdWithSecret",
    "ParsedReference",
    "parse_reference",
    "canonicalize",
    "canonical_json_bytes",
    "canonical_json_str",
    "FixedClock",
    "SystemClock",
    "is_entity_id",
    "new_key_ref_id",
    "AliasNotFound",
    "BuildError",
    "ConfigurationError",
    "DuplicateAlias",
    "InvalidKeyMaterial",
    "InvalidParameters",
    "InvalidReference",
    "LedgerError",
    "MalformedSuccess",
    "MissingCredentials",
    "OperationFailed",
    "ResolutionFailure",
    "SignerError",
    "StateStoreError",
    "TokenNotFound",
    "TokenOpsError",
]
