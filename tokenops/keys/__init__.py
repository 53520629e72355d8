"""
Signing keys and the Key/Credential Store.

- SigningKey / VerifyingKey: secp256k1 and Ed25519 wrappers
- KeyCredentialStore: imported keys, signing by keyRefId, default operators
- SecretStorage backends: where private material lives
"""

from .signer import ECDSA, ED25519, SigningKey, VerifyingKey
from .secrets import MemorySecretStorage, SecretStorage, StateSecretStorage
from .kcs import KeyCredentialStore

__all__ = [
    "ECDSA",
    "ED25519",
    "SigningKey",
    "VerifyingKey",
    "SecretStorage",
    "MemorySecretStorage",
    "StateSecretStorage",
    "KeyCredentialStore",
]
