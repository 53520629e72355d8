"""
Local ledger transaction service.

Stands in for a ledger network: transactions are signed, checked against the
state replayed from the network's hash-chained log, and appended when they
succeed. Rejected transactions return a receipt with a failure status and
leave the log untouched.

Receipt statuses:
- SUCCESS
- INVALID_SIGNATURE
- INVALID_TOKEN_ID
- TOKEN_ALREADY_ASSOCIATED_TO_ACCOUNT
- TOKEN_NOT_ASSOCIATED_TO_ACCOUNT
- INSUFFICIENT_TOKEN_BALANCE
"""

import logging
import os
from typing import Any, Dict, Optional, Tuple

from ..core.clock import SystemClock
from ..core.errors import BuildError, InvalidKeyMaterial, SignerError
from ..core.ids import is_entity_id
from ..core.models import SupplyType, TransactionResult
from ..keys.kcs import KeyCredentialStore
from ..keys.signer import SigningKey, VerifyingKey
from ..tx.service import (
    TOKEN_ASSOCIATE,
    TOKEN_CREATE,
    TOKEN_TRANSFER,
    TokenAssociateParams,
    TokenCreateParams,
    TokenTransferParams,
    Transaction,
    TransactionService,
)
from .log import ChainVerification, LedgerEvent, LedgerLog
from .reducer import (
    TOKEN_ASSOCIATED,
    TOKEN_CREATED,
    TOKEN_TRANSFERRED,
    LedgerState,
    replay,
)

logger = logging.getLogger(__name__)

SUCCESS = "SUCCESS"
INVALID_SIGNATURE = "INVALID_SIGNATURE"
INVALID_TOKEN_ID = "INVALID_TOKEN_ID"
TOKEN_ALREADY_ASSOCIATED = "TOKEN_ALREADY_ASSOCIATED_TO_ACCOUNT"
TOKEN_NOT_ASSOCIATED = "TOKEN_NOT_ASSOCIATED_TO_ACCOUNT"
INSUFFICIENT_TOKEN_BALANCE = "INSUFFICIENT_TOKEN_BALANCE"

FIRST_TOKEN_NUM = 1001


def _require_id(value: str, what: str) -> None:
    if not is_entity_id(value):
        raise BuildError(f"Invalid {what}: {value!r}")


class LocalLedgerService(TransactionService):
    """
    TransactionService backed by a local append-only log.

    Usage:
        ledger = LocalLedgerService(kcs, "testnet", "/home/u/.tokenops/ledger/testnet.log")
        tx = ledger.build_associate(TokenAssociateParams("0.0.1001", "0.0.2002"))
        result = ledger.sign_and_execute_with(tx, "kr_...")
    """

    def __init__(self, kcs: KeyCredentialStore, network: str, log_path: str, clock: Any = None) -> None:
        self.kcs = kcs
        self.network = network
        self.log = LedgerLog(log_path)
        self.clock = clock or SystemClock()

    @classmethod
    def for_network(cls, kcs: KeyCredentialStore, network: str, ledger_dir: str, clock: Any = None) -> "LocalLedgerService":
        return cls(kcs, network, os.path.join(ledger_dir, f"{network}.log"), clock=clock)

    # Builders

    def build_create(self, params: TokenCreateParams) -> Transaction:
        _require_id(params.treasury_id, "treasury account id")
        if not params.name or not params.symbol:
            raise BuildError("Token name and symbol are required")
        if params.decimals < 0 or params.initial_supply < 0:
            raise BuildError("Decimals and initial supply must not be negative")
        if params.supply_type == SupplyType.FINITE and params.max_supply < params.initial_supply:
            raise BuildError(
                f"Max supply ({params.max_supply}) cannot be less than initial supply ({params.initial_supply})"
            )
        if not params.admin_key:
            raise BuildError("Admin key is required")
        fees = []
        for fee in params.custom_fees:
            if fee.collector_id:
                _require_id(fee.collector_id, "fee collector id")
            fees.append(fee.to_dict())

        body = {
            "name": params.name,
            "symbol": params.symbol,
            "decimals": params.decimals,
            "initialSupply": params.initial_supply,
            "supplyType": params.supply_type.value,
            "maxSupply": params.max_supply if params.supply_type == SupplyType.FINITE else 0,
            "treasuryId": params.treasury_id,
            "adminKey": params.admin_key,
            "supplyKey": params.supply_key,
            "wipeKey": params.wipe_key,
            "kycKey": params.kyc_key,
            "freezeKey": params.freeze_key,
            "pauseKey": params.pause_key,
            "feeScheduleKey": params.fee_schedule_key,
            "customFees": fees,
            "memo": params.memo,
        }
        return Transaction(kind=TOKEN_CREATE, account_id=params.treasury_id, body=body)

    def build_associate(self, params: TokenAssociateParams) -> Transaction:
        _require_id(params.token_id, "token id")
        _require_id(params.account_id, "account id")
        return Transaction(
            kind=TOKEN_ASSOCIATE,
            account_id=params.account_id,
            body={"tokenId": params.token_id, "accountId": params.account_id},
        )

    def build_transfer(self, params: TokenTransferParams) -> Transaction:
        _require_id(params.token_id, "token id")
        _require_id(params.from_account_id, "source account id")
        _require_id(params.to_account_id, "destination account id")
        if params.amount <= 0:
            raise BuildError(f"Transfer amount must be positive, got {params.amount}")
        return Transaction(
            kind=TOKEN_TRANSFER,
            account_id=params.from_account_id,
            body={
                "tokenId": params.token_id,
                "from": params.from_account_id,
                "to": params.to_account_id,
                "amount": params.amount,
            },
        )

    # Signing entry points

    def sign_and_execute(self, tx: Transaction) -> TransactionResult:
        operator = self.kcs.get_default_operator(self.network)
        if operator is None:
            raise SignerError(f"No default operator configured for {self.network}")
        signature = self.kcs.sign(operator.key_ref_id, tx.signing_bytes())
        return self.submit(tx, self.kcs.get_public_key(operator.key_ref_id) or "", signature, operator.account_id)

    def sign_and_execute_with_key(self, tx: Transaction, signing_key: SigningKey) -> TransactionResult:
        signature = signing_key.sign(tx.signing_bytes())
        return self.submit(tx, signing_key.public_key_hex(), signature, tx.account_id)

    def sign_and_execute_with(self, tx: Transaction, key_ref_id: str) -> TransactionResult:
        signature = self.kcs.sign(key_ref_id, tx.signing_bytes())
        return self.submit(tx, self.kcs.get_public_key(key_ref_id) or "", signature, tx.account_id)

    # Submission

    def state(self) -> LedgerState:
        return replay(self.log.read())

    def verify_chain(self) -> ChainVerification:
        return self.log.verify()

    def _timestamp(self) -> Tuple[int, int]:
        now = self.clock.now()
        return int(now.timestamp()), now.microsecond * 1000

    def _check_signature(self, tx: Transaction, public_key: str, signature: bytes) -> bool:
        try:
            verifying_key = VerifyingKey.from_public_hex(public_key)
        except InvalidKeyMaterial:
            return False
        return verifying_key.verify(tx.signing_bytes(), signature)

    def _validate(self, tx: Transaction, state: LedgerState) -> Tuple[str, Optional[str]]:
        """Receipt status and the entity the event applies to."""
        body = tx.body
        if tx.kind == TOKEN_CREATE:
            return SUCCESS, f"0.0.{FIRST_TOKEN_NUM + state.version}"

        token_id = body["tokenId"]
        if state.get_token(token_id) is None:
            return INVALID_TOKEN_ID, token_id

        if tx.kind == TOKEN_ASSOCIATE:
            if state.is_associated(token_id, body["accountId"]):
                return TOKEN_ALREADY_ASSOCIATED, token_id
            return SUCCESS, token_id

        if not state.is_associated(token_id, body["from"]) or not state.is_associated(token_id, body["to"]):
            return TOKEN_NOT_ASSOCIATED, token_id
        if state.balance(token_id, body["from"]) < int(body["amount"]):
            return INSUFFICIENT_TOKEN_BALANCE, token_id
        return SUCCESS, token_id

    def submit(self, tx: Transaction, public_key: str, signature: bytes, payer_id: str) -> TransactionResult:
        """
        Check and record a signed transaction.

        Returns:
            TransactionResult; success=False carries the failure status in the receipt
        """
        seconds, nanos = self._timestamp()
        transaction_id = f"{payer_id}@{seconds}.{nanos:09d}"

        if not self._check_signature(tx, public_key, signature):
            logger.warning(f"[LEDGER] {tx.kind} {transaction_id} rejected: {INVALID_SIGNATURE}")
            return TransactionResult(success=False, transaction_id=transaction_id, receipt={"status": INVALID_SIGNATURE})

        status, entity_id = self._validate(tx, self.state())
        if status != SUCCESS:
            logger.info(f"[LEDGER] {tx.kind} {transaction_id} rejected: {status}")
            return TransactionResult(success=False, transaction_id=transaction_id, receipt={"status": status})

        event_type = {
            TOKEN_CREATE: TOKEN_CREATED,
            TOKEN_ASSOCIATE: TOKEN_ASSOCIATED,
            TOKEN_TRANSFER: TOKEN_TRANSFERRED,
        }[tx.kind]
        stored = self.log.append(
            LedgerEvent(
                type=event_type,
                aggregate_id=entity_id or "",
                ts=seconds * 1_000_000_000 + nanos,
                payload=dict(tx.body),
                meta={
                    "transactionId": transaction_id,
                    "payer": payer_id,
                    "publicKey": public_key,
                    "signature": signature.hex(),
                },
            )
        )
        logger.debug(f"[LEDGER] {tx.kind} {transaction_id} appended at seq={stored.seq}")

        receipt: Dict[str, Any] = {"status": SUCCESS, "seq": stored.seq}
        if tx.kind == TOKEN_CREATE:
            receipt["tokenId"] = entity_id
        return TransactionResult(
            success=True,
            transaction_id=transaction_id,
            entity_id=entity_id if tx.kind == TOKEN_CREATE else None,
            receipt=receipt,
        )
