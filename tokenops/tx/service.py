"""
Transaction service interface.

A TransactionService builds transactions from resolved parameters and signs
and submits them through one of three entry points:
- sign_and_execute(tx): sign as the network's default operator
- sign_and_execute_with_key(tx, signing_key): sign with a key held by the caller
- sign_and_execute_with(tx, key_ref_id): sign with a credential store key
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Tuple

from ..core.canonical import canonical_json_bytes
from ..core.models import CustomFee, SupplyType, TransactionResult
from ..keys.signer import SigningKey

TOKEN_CREATE = "TokenCreate"
TOKEN_ASSOCIATE = "TokenAssociate"
TOKEN_TRANSFER = "TokenTransfer"


@dataclass(frozen=True)
class TokenCreateParams:
    """Token creation parameters with all references already resolved."""
    name: str
    symbol: str
    treasury_id: str
    admin_key: str
    decimals: int = 0
    initial_supply: int = 0
    supply_type: SupplyType = SupplyType.INFINITE
    max_supply: int = 0
    supply_key: str = ""
    wipe_key: str = ""
    kyc_key: str = ""
    freeze_key: str = ""
    pause_key: str = ""
    fee_schedule_key: str = ""
    custom_fees: Tuple[CustomFee, ...] = ()
    memo: str = ""


@dataclass(frozen=True)
class TokenAssociateParams:
    token_id: str
    account_id: str


@dataclass(frozen=True)
class TokenTransferParams:
    token_id: str
    from_account_id: str
    to_account_id: str
    amount: int


@dataclass(frozen=True)
class Transaction:
    """
    Built, unsigned transaction.

    Fields:
        kind: TokenCreate, TokenAssociate or TokenTransfer
        account_id: Account whose signature authorizes the body
        body: Canonical-JSON-serializable transaction body
    """
    kind: str
    account_id: str
    body: Dict[str, Any] = field(default_factory=dict)

    def signing_bytes(self) -> bytes:
        return canonical_json_bytes({"kind": self.kind, "accountId": self.account_id, "body": self.body})


class TransactionService(ABC):
    """Builds, signs and submits ledger transactions."""

    @abstractmethod
    def build_create(self, params: TokenCreateParams) -> Transaction:
        """
        Raises:
            BuildError: If params are rejected
        """
        pass

    @abstractmethod
    def build_associate(self, params: TokenAssociateParams) -> Transaction:
        pass

    @abstractmethod
    def build_transfer(self, params: TokenTransferParams) -> Transaction:
        pass

    @abstractmethod
    def sign_and_execute(self, tx: Transaction) -> TransactionResult:
        """
        Sign as the default operator and submit.

        Raises:
            SignerError: If no default operator is configured
        """
        pass

    @abstractmethod
    def sign_and_execute_with_key(self, tx: Transaction, signing_key: SigningKey) -> TransactionResult:
        pass

    @abstractmethod
    def sign_and_execute_with(self, tx: Transaction, key_ref_id: str) -> TransactionResult:
        """
        Sign with a credential store key and submit.

        Raises:
            SignerError: If key_ref_id is unknown
        """
        pass
