"""
Key/Credential Store.

Owns imported signing keys and the default operator of each network.
Callers only ever see KeyHandles (keyRefId + public key); private material
stays inside this module and the SecretStorage backend.
"""

import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..config import operator_from_env
from ..core.clock import SystemClock
from ..core.errors import InvalidReference, MissingCredentials, SignerError
from ..core.ids import is_entity_id, new_key_ref_id
from ..core.models import KeyHandle, OperatorRecord
from ..state.store import StateStore
from .secrets import SecretStorage
from .signer import ECDSA, SigningKey, VerifyingKey

logger = logging.getLogger(__name__)

CREDENTIALS_NAMESPACE = "kms-credentials"
OPERATORS_NAMESPACE = "kms-operators"

OperatorSource = Callable[[str], Optional[Tuple[str, str]]]


class KeyCredentialStore:
    """
    Credential store backed by a StateStore (records) and SecretStorage.

    Usage:
        kcs = KeyCredentialStore(state, StateSecretStorage(state))
        handle = kcs.import_secret("302e...")
        signature = kcs.sign(handle.key_ref_id, body_bytes)
    """

    def __init__(
        self,
        state: StateStore,
        secrets: SecretStorage,
        algorithm: str = ECDSA,
        clock: Any = None,
        operator_source: OperatorSource = operator_from_env,
    ) -> None:
        self.state = state
        self.secrets = secrets
        self.algorithm = algorithm
        self.clock = clock or SystemClock()
        self.operator_source = operator_source

    def load_signing_key(self, secret: str) -> SigningKey:
        """
        Parse secret without storing it.

        Raises:
            InvalidKeyMaterial: If secret is not a valid key
        """
        return SigningKey.from_secret(secret, self.algorithm)

    def import_secret(self, secret: str, labels: Optional[List[str]] = None) -> KeyHandle:
        """
        Import a private key and return a fresh handle for it.

        The public key is derived deterministically, so importing the same
        secret twice yields two handles with the same public key.

        Raises:
            InvalidKeyMaterial: If secret is not a valid key
        """
        signing_key = self.load_signing_key(secret)
        key_ref_id = new_key_ref_id()
        public_key = signing_key.public_key_hex()
        created_at = self.clock.now_iso()

        self.secrets.write(key_ref_id, signing_key.algorithm, signing_key.secret_hex(), created_at)
        self.state.set(
            CREDENTIALS_NAMESPACE,
            key_ref_id,
            {
                "keyRefId": key_ref_id,
                "type": "localPrivateKey",
                "publicKey": public_key,
                "keyAlgorithm": signing_key.algorithm,
                "labels": list(labels or []),
                "createdAt": created_at,
            },
        )
        logger.debug(f"[KCS] Imported key keyRefId={key_ref_id} publicKey={public_key}")
        return KeyHandle(key_ref_id=key_ref_id, public_key=public_key)

    def get_public_key(self, key_ref_id: str) -> Optional[str]:
        record = self.state.get(CREDENTIALS_NAMESPACE, key_ref_id)
        return record["publicKey"] if record else None

    def find_by_public_key(self, public_key: str) -> Optional[str]:
        """First keyRefId whose public key matches, or None."""
        wanted = public_key.lower()
        if wanted.startswith("0x"):
            wanted = wanted[2:]
        for record in self.state.list(CREDENTIALS_NAMESPACE):
            if record.get("publicKey", "").lower() == wanted:
                return record["keyRefId"]
        return None

    def list_keys(self) -> List[Dict[str, Any]]:
        return self.state.list(CREDENTIALS_NAMESPACE)

    def remove_key(self, key_ref_id: str) -> None:
        self.state.delete(CREDENTIALS_NAMESPACE, key_ref_id)
        self.secrets.remove(key_ref_id)
        logger.debug(f"[KCS] Removed keyRefId={key_ref_id}")

    def _signing_key(self, key_ref_id: str) -> SigningKey:
        if not self.state.has(CREDENTIALS_NAMESPACE, key_ref_id):
            raise SignerError(f"Unknown keyRefId: {key_ref_id}")
        secret = self.secrets.read(key_ref_id)
        if not secret:
            raise SignerError(f"No private key stored for keyRefId: {key_ref_id}")
        return SigningKey.from_secret(secret["privateKey"], secret["keyAlgorithm"])

    def sign(self, key_ref_id: str, payload: bytes) -> bytes:
        """
        Sign payload with the key behind key_ref_id.

        Raises:
            SignerError: If key_ref_id is unknown or has no private key
        """
        return self._signing_key(key_ref_id).sign(payload)

    def verifying_key(self, key_ref_id: str) -> VerifyingKey:
        public_key = self.get_public_key(key_ref_id)
        if public_key is None:
            raise SignerError(f"Unknown keyRefId: {key_ref_id}")
        return VerifyingKey.from_public_hex(public_key)

    def set_default_operator(self, network: str, account_id: str, key_ref_id: str) -> OperatorRecord:
        """
        Store the default operator for network.

        Raises:
            InvalidReference: If account_id is not a canonical id
            MissingCredentials: If key_ref_id is unknown
        """
        if not is_entity_id(account_id):
            raise InvalidReference(f"Invalid account id: {account_id}")
        if self.get_public_key(key_ref_id) is None:
            raise MissingCredentials(f"Unknown keyRefId: {key_ref_id}")
        self.state.set(OPERATORS_NAMESPACE, network, {"accountId": account_id, "keyRefId": key_ref_id})
        logger.debug(f"[KCS] Operator set for {network}: {account_id}")
        return OperatorRecord(account_id=account_id, key_ref_id=key_ref_id)

    def get_default_operator(self, network: str) -> Optional[OperatorRecord]:
        """
        Default operator for network.

        Falls back to <NETWORK>_OPERATOR_ID/KEY from the environment, importing
        the key and storing the operator on first use.
        """
        record = self.state.get(OPERATORS_NAMESPACE, network)
        if record:
            return OperatorRecord(account_id=record["accountId"], key_ref_id=record["keyRefId"])

        from_env = self.operator_source(network)
        if not from_env:
            return None
        account_id, secret = from_env
        if not is_entity_id(account_id):
            raise InvalidReference(f"Invalid operator account id for {network}: {account_id}")
        handle = self.import_secret(secret, labels=["env-default"])
        logger.info(f"[KCS] Operator for {network} loaded from environment: {account_id}")
        return self.set_default_operator(network, account_id, handle.key_ref_id)

    def clear_default_operator(self, network: str) -> None:
        self.state.delete(OPERATORS_NAMESPACE, network)
