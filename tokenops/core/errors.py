"""
Exception types for token operations.

Every fatal condition of a command maps to exactly one of these classes.
Handlers turn them into a failure result; nothing here exits the process.
"""

from typing import Any, Dict, Optional


class TokenOpsError(Exception):
    """Base class for all token operation errors."""
    pass


class ConfigurationError(TokenOpsError):
    """Raised when settings are invalid or incomplete."""
    pass


class ResolutionFailure(TokenOpsError):
    """Raised when a reference cannot be turned into a canonical identifier."""
    pass


class AliasNotFound(ResolutionFailure):
    """Raised when an explicitly supplied alias is not registered."""

    def __init__(self, alias: str, entity_type: str, network: str) -> None:
        self.alias = alias
        self.entity_type = entity_type
        self.network = network
        super().__init__(f'Alias "{alias}" not found for {entity_type} on {network}')


class MissingCredentials(ResolutionFailure):
    """Raised when no signer can be found (no default operator, unknown key)."""
    pass


class InvalidKeyMaterial(ResolutionFailure):
    """Raised when a secret cannot be parsed into a key for the target scheme."""
    pass


class InvalidReference(ResolutionFailure):
    """Raised when a reference is malformed or unusable for its role."""
    pass


class DuplicateAlias(TokenOpsError):
    """Raised when an alias already exists for (alias, entity type, network)."""

    def __init__(self, alias: str, entity_type: str, network: str) -> None:
        self.alias = alias
        self.entity_type = entity_type
        self.network = network
        super().__init__(f'Alias "{alias}" already exists for {entity_type} on {network}')


class BuildError(TokenOpsError):
    """Raised when the transaction builder rejects parameters."""
    pass


class SignerError(TokenOpsError):
    """Raised when the selected signer cannot sign."""
    pass


class OperationFailed(TokenOpsError):
    """Raised when the ledger rejects a transaction."""

    def __init__(self, operation: str, receipt: Optional[Dict[str, Any]] = None) -> None:
        self.operation = operation
        self.receipt = receipt or {}
        super().__init__(f"{operation} failed")


class MalformedSuccess(TokenOpsError):
    """Raised when a create reports success but carries no entity id."""

    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(f"{operation} reported success but returned no entity id")


class TokenNotFound(TokenOpsError):
    """Raised when a token is not present in the entity state store."""

    def __init__(self, token_id: str) -> None:
        self.token_id = token_id
        super().__init__(f"Token {token_id} not found")


class InvalidParameters(TokenOpsError):
    """Raised when command parameters fail validation."""
    pass


class StateStoreError(TokenOpsError):
    """Raised when state persistence fails."""
    pass


class LedgerError(TokenOpsError):
    """Raised when the local ledger log cannot be read, written or verified."""
    pass
