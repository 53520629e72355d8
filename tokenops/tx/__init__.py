"""
Transaction building, signing strategies and orchestration.
"""

from .service import (
    TOKEN_ASSOCIATE,
    TOKEN_CREATE,
    TOKEN_TRANSFER,
    TokenAssociateParams,
    TokenCreateParams,
    TokenTransferParams,
    Transaction,
    TransactionService,
)
from .orchestrator import (
    DirectKeySigner,
    KeyRefSigner,
    OperationKind,
    OperatorSigner,
    Signer,
    TransactionOrchestrator,
    signer_for,
)

__all__ = [
    "TOKEN_ASSOCIATE",
    "TOKEN_CREATE",
    "TOKEN_TRANSFER",
    "TokenAssociateParams",
    "TokenCreateParams",
    "TokenTransferParams",
    "Transaction",
    "TransactionService",
    "DirectKeySigner",
    "KeyRefSigner",
    "OperationKind",
    "OperatorSigner",
    "Signer",
    "TransactionOrchestrator",
    "signer_for",
]
