"""
Token commands, validation models and the token state store.
"""

from .schema import (
    TokenAssociateCommand,
    TokenCreateCommand,
    TokenFileDefinition,
    TokenTransferCommand,
    validate_params,
)
from .state import TOKEN_NAMESPACE, TokenStateStore
from .file_loader import load_token_definition

__all__ = [
    "TokenAssociateCommand",
    "TokenCreateCommand",
    "TokenFileDefinition",
    "TokenTransferCommand",
    "validate_params",
    "TOKEN_NAMESPACE",
    "TokenStateStore",
    "load_token_definition",
]
