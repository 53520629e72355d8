"""
Transaction orchestrator.

Drives one operation through Build -> Sign-select -> Submit -> Normalize.
There is no retry and no fallback between signing strategies: the signer the
caller resolved is the signer that is used.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Union

from ..core.errors import BuildError, MalformedSuccess, OperationFailed, SignerError
from ..core.models import ResolutionSource, ResolvedAccount, TransactionResult
from ..keys.signer import SigningKey
from .service import (
    TokenAssociateParams,
    TokenCreateParams,
    TokenTransferParams,
    Transaction,
    TransactionService,
)

logger = logging.getLogger(__name__)


class OperationKind(str, Enum):
    CREATE = "create"
    ASSOCIATE = "associate"
    TRANSFER = "transfer"

    @property
    def label(self) -> str:
        return _LABELS[self]

    @property
    def is_create(self) -> bool:
        return self is OperationKind.CREATE


_LABELS = {
    OperationKind.CREATE: "Token creation",
    OperationKind.ASSOCIATE: "Token association",
    OperationKind.TRANSFER: "Token transfer",
}

_PARAM_TYPES = {
    OperationKind.CREATE: TokenCreateParams,
    OperationKind.ASSOCIATE: TokenAssociateParams,
    OperationKind.TRANSFER: TokenTransferParams,
}


@dataclass(frozen=True)
class DirectKeySigner:
    """Sign with a key the caller holds (never stored in the credential store)."""
    signing_key: SigningKey


@dataclass(frozen=True)
class KeyRefSigner:
    """Sign with a key held by the credential store."""
    key_ref_id: str


@dataclass(frozen=True)
class OperatorSigner:
    """Sign as the network's default operator."""
    pass


Signer = Union[DirectKeySigner, KeyRefSigner, OperatorSigner]


def signer_for(account: ResolvedAccount) -> Signer:
    """
    Signing strategy for a resolved account.

    Raises:
        SignerError: If the account carries nothing to sign with
    """
    if account.source == ResolutionSource.OPERATOR:
        return OperatorSigner()
    if account.signing_key_ref:
        return KeyRefSigner(account.signing_key_ref)
    raise SignerError(f"Account {account.account_id} has no signing key")


class TransactionOrchestrator:
    """
    Executes operations against a TransactionService.

    Usage:
        orchestrator = TransactionOrchestrator(service)
        result = orchestrator.execute(OperationKind.CREATE, params, KeyRefSigner("kr_..."))
    """

    def __init__(self, service: TransactionService) -> None:
        self.service = service

    def build(self, kind: OperationKind, params: Any) -> Transaction:
        """
        Raises:
            BuildError: If params do not fit kind or the builder rejects them
        """
        expected = _PARAM_TYPES[kind]
        if not isinstance(params, expected):
            raise BuildError(f"{kind.label} expects {expected.__name__}, got {type(params).__name__}")

        if kind == OperationKind.CREATE:
            return self.service.build_create(params)
        if kind == OperationKind.ASSOCIATE:
            return self.service.build_associate(params)
        return self.service.build_transfer(params)

    def submit(self, tx: Transaction, signer: Signer) -> TransactionResult:
        if isinstance(signer, DirectKeySigner):
            return self.service.sign_and_execute_with_key(tx, signer.signing_key)
        if isinstance(signer, KeyRefSigner):
            return self.service.sign_and_execute_with(tx, signer.key_ref_id)
        if isinstance(signer, OperatorSigner):
            return self.service.sign_and_execute(tx)
        raise SignerError(f"Unsupported signer: {type(signer).__name__}")

    def normalize(self, kind: OperationKind, result: TransactionResult) -> TransactionResult:
        """
        Raises:
            OperationFailed: If the ledger rejected the transaction
            MalformedSuccess: If a create succeeded without an entity id
        """
        if not result.success:
            logger.debug(f"[TX] {kind.label} rejected: receipt={result.receipt}")
            raise OperationFailed(kind.label, result.receipt)
        if kind.is_create and not result.entity_id:
            raise MalformedSuccess(kind.label)
        return result

    def execute(self, kind: OperationKind, params: Any, signer: Signer) -> TransactionResult:
        """
        Build, sign, submit and normalize one transaction.

        Args:
            kind: Operation kind
            params: TokenCreateParams, TokenAssociateParams or TokenTransferParams
            signer: Signing strategy

        Returns:
            Successful TransactionResult

        Raises:
            BuildError: Build rejected, nothing submitted
            SignerError: Signer cannot sign
            OperationFailed: Ledger rejected the transaction
            MalformedSuccess: Create succeeded without entity id
        """
        tx = self.build(kind, params)
        logger.debug(f"[TX] Built {tx.kind} for {tx.account_id} signer={type(signer).__name__}")
        result = self.submit(tx, signer)
        result = self.normalize(kind, result)
        logger.info(f"[TX] {kind.label} succeeded: {result.transaction_id}")
        return result
