"""
Secret storage backends for the credential store.

The credential store hands private material to one of these and reads it
back only to build a SigningKey. Nothing else touches the secrets.
"""

from abc import ABC, abstractmethod
from typing import Dict, Optional

from ..state.store import StateStore

SECRETS_NAMESPACE = "kms-secrets"


class SecretStorage(ABC):

    @abstractmethod
    def write(self, key_ref_id: str, algorithm: str, secret_hex: str, created_at: str) -> None:
        ...

    @abstractmethod
    def read(self, key_ref_id: str) -> Optional[Dict[str, str]]:
        """
        Returns:
            {"keyAlgorithm": ..., "privateKey": ...} or None
        """
        ...

    @abstractmethod
    def remove(self, key_ref_id: str) -> None:
        ...


class MemorySecretStorage(SecretStorage):
    """Secrets kept for the lifetime of the process only."""

    def __init__(self) -> None:
        self._secrets: Dict[str, Dict[str, str]] = {}

    def write(self, key_ref_id: str, algorithm: str, secret_hex: str, created_at: str) -> None:
        self._secrets[key_ref_id] = {
            "keyAlgorithm": algorithm,
            "privateKey": secret_hex,
            "createdAt": created_at,
        }

    def read(self, key_ref_id: str) -> Optional[Dict[str, str]]:
        return self._secrets.get(key_ref_id)

    def remove(self, key_ref_id: str) -> None:
        self._secrets.pop(key_ref_id, None)


class StateSecretStorage(SecretStorage):
    """Secrets kept in the kms-secrets namespace of a state store."""

    def __init__(self, state: StateStore) -> None:
        self.state = state

    def write(self, key_ref_id: str, algorithm: str, secret_hex: str, created_at: str) -> None:
        self.state.set(
            SECRETS_NAMESPACE,
            key_ref_id,
            {"keyAlgorithm": algorithm, "privateKey": secret_hex, "createdAt": created_at},
        )

    def read(self, key_ref_id: str) -> Optional[Dict[str, str]]:
        return self.state.get(SECRETS_NAMESPACE, key_ref_id)

    def remove(self, key_ref_id: str) -> None:
        self.state.delete(SECRETS_NAMESPACE, key_ref_id)
