"""
Shared builders for tests: wired services and a recording ledger fake.
"""

from pathlib import Path
from typing import Any, List, Optional, Tuple

from tokenops.config import Settings
from tokenops.core.clock import FixedClock
from tokenops.core.errors import BuildError
from tokenops.core.models import TransactionResult
from tokenops.keys.secrets import MemorySecretStorage
from tokenops.services import CoreServices, build_services
from tokenops.state.memory_store import MemoryStateStore
from tokenops.tx.service import (
    TOKEN_ASSOCIATE,
    TOKEN_CREATE,
    TOKEN_TRANSFER,
    Transaction,
    TransactionService,
)

OPERATOR_ID = "0.0.2"
OPERATOR_KEY = "0123456789abcdef" * 4
ALICE_ID = "0.0.2002"
ALICE_KEY = "a11ce"
BOB_ID = "0.0.3003"
BOB_KEY = "b0b"


class RecordingLedger(TransactionService):
    """
    TransactionService fake.

    Returns queued results in order (default: success, creates get 0.0.999)
    and records every build and submit.
    """

    def __init__(self, results: Optional[List[TransactionResult]] = None, build_error: Optional[str] = None):
        self.results = list(results or [])
        self.build_error = build_error
        self.builds: List[Transaction] = []
        self.submits: List[Tuple[str, Transaction, Any]] = []

    @property
    def invocations(self) -> int:
        return len(self.builds) + len(self.submits)

    def _build(self, kind: str, account_id: str, body: dict) -> Transaction:
        if self.build_error:
            raise BuildError(self.build_error)
        tx = Transaction(kind=kind, account_id=account_id, body=body)
        self.builds.append(tx)
        return tx

    def build_create(self, params):
        return self._build(TOKEN_CREATE, params.treasury_id, {"name": params.name, "maxSupply": params.max_supply})

    def build_associate(self, params):
        return self._build(TOKEN_ASSOCIATE, params.account_id, {"tokenId": params.token_id})

    def build_transfer(self, params):
        return self._build(
            TOKEN_TRANSFER,
            params.from_account_id,
            {"tokenId": params.token_id, "to": params.to_account_id, "amount": params.amount},
        )

    def _next(self, tx: Transaction) -> TransactionResult:
        if self.results:
            return self.results.pop(0)
        entity_id = "0.0.999" if tx.kind == TOKEN_CREATE else None
        return TransactionResult(
            success=True,
            transaction_id=f"tx-{len(self.submits) - 1}",
            entity_id=entity_id,
            receipt={"status": "SUCCESS"},
        )

    def sign_and_execute(self, tx):
        self.submits.append(("operator", tx, None))
        return self._next(tx)

    def sign_and_execute_with_key(self, tx, signing_key):
        self.submits.append(("key", tx, signing_key.public_key_hex()))
        return self._next(tx)

    def sign_and_execute_with(self, tx, key_ref_id):
        self.submits.append(("key_ref", tx, key_ref_id))
        return self._next(tx)


def make_services(
    home: str,
    ledger: Optional[TransactionService] = None,
    operator: bool = True,
    network: str = "testnet",
) -> CoreServices:
    """In-memory services; the local ledger (when used) writes under home."""
    settings = Settings(home=Path(home), network=network, token_input_dir=Path(home) / "input")
    if operator:
        operator_source = lambda net: (OPERATOR_ID, OPERATOR_KEY)
    else:
        operator_source = lambda net: None
    return build_services(
        settings,
        state=MemoryStateStore(),
        ledger=ledger,
        clock=FixedClock(),
        secrets=MemorySecretStorage(),
        operator_source=operator_source,
    )
