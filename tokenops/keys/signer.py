"""
Signing keys for ledger transactions.

Supported schemes:
- ecdsa: secp256k1, secrets are big-endian scalars (hex, at most 32 bytes)
- ed25519: secrets are 32-byte seeds (hex)

Either scheme also accepts a DER-encoded PKCS#8 private key as hex.
Public keys are exchanged as hex: compressed SEC1 point (33 bytes) for
ecdsa, raw 32 bytes for ed25519.
"""

from typing import Union

from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)

from ..core.errors import InvalidKeyMaterial

ECDSA = "ecdsa"
ED25519 = "ed25519"

SECP256K1_ORDER = int(
    "FFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141", 16
)

PrivateKey = Union[ec.EllipticCurvePrivateKey, Ed25519PrivateKey]
PublicKey = Union[ec.EllipticCurvePublicKey, Ed25519PublicKey]


def _hex_bytes(value: str) -> bytes:
    text = value.strip()
    if text.lower().startswith("0x"):
        text = text[2:]
    if not text:
        raise InvalidKeyMaterial("Key material is empty")
    if len(text) % 2:
        text = "0" + text
    try:
        return bytes.fromhex(text)
    except ValueError as ex:
        raise InvalidKeyMaterial("Key material is not valid hex") from ex


def _algorithm_of(private_key: PrivateKey) -> str:
    if isinstance(private_key, Ed25519PrivateKey):
        return ED25519
    if isinstance(private_key, ec.EllipticCurvePrivateKey) and isinstance(
        private_key.curve, ec.SECP256K1
    ):
        return ECDSA
    raise InvalidKeyMaterial("Unsupported key type (expected secp256k1 or Ed25519)")


class SigningKey:
    """
    Private key wrapper.

    Provides:
    - Parsing from secret hex (raw or DER)
    - Signing of raw payload bytes
    - Public key derivation

    The private material never appears in repr() or str().
    """

    def __init__(self, private_key: PrivateKey):
        self.algorithm = _algorithm_of(private_key)
        self._private_key = private_key

    @classmethod
    def from_secret(cls, secret: str, algorithm: str = ECDSA) -> "SigningKey":
        """
        Parse a secret into a signing key.

        Args:
            secret: Hex private key, raw or DER-encoded PKCS#8
            algorithm: Scheme used for raw secrets

        Returns:
            SigningKey instance

        Raises:
            InvalidKeyMaterial: If secret is not a valid key for the scheme
        """
        data = _hex_bytes(secret)

        if len(data) > 32:
            try:
                private_key = serialization.load_der_private_key(data, password=None)
            except (ValueError, TypeError, UnsupportedAlgorithm) as ex:
                raise InvalidKeyMaterial("Key material is not a valid DER private key") from ex
            return cls(private_key)  # type: ignore[arg-type]

        if algorithm == ED25519:
            if len(data) != 32:
                raise InvalidKeyMaterial("Ed25519 private key must be 32 bytes")
            return cls(Ed25519PrivateKey.from_private_bytes(data))

        scalar = int.from_bytes(data, "big")
        if not 1 <= scalar < SECP256K1_ORDER:
            raise InvalidKeyMaterial("ECDSA private key is out of range for secp256k1")
        return cls(ec.derive_private_key(scalar, ec.SECP256K1()))

    @property
    def public_key(self) -> PublicKey:
        return self._private_key.public_key()

    def public_key_hex(self) -> str:
        """Public key as hex (compressed point for ecdsa, raw for ed25519)."""
        if self.algorithm == ED25519:
            raw = self.public_key.public_bytes(
                encoding=serialization.Encoding.Raw,
                format=serialization.PublicFormat.Raw,
            )
        else:
            raw = self.public_key.public_bytes(
                encoding=serialization.Encoding.X962,
                format=serialization.PublicFormat.CompressedPoint,
            )
        return raw.hex()

    def secret_hex(self) -> str:
        """Raw private key hex, for handing to a secret storage backend only."""
        if self.algorithm == ED25519:
            raw = self._private_key.private_bytes(
                encoding=serialization.Encoding.Raw,
                format=serialization.PrivateFormat.Raw,
                encryption_algorithm=serialization.NoEncryption(),
            )
            return raw.hex()
        value = self._private_key.private_numbers().private_value  # type: ignore[union-attr]
        return value.to_bytes(32, "big").hex()

    def sign(self, payload: bytes) -> bytes:
        """
        Sign payload bytes.

        Returns:
            Signature bytes (DER for ecdsa, 64 bytes for ed25519)
        """
        if self.algorithm == ED25519:
            return self._private_key.sign(payload)  # type: ignore[call-arg]
        return self._private_key.sign(payload, ec.ECDSA(hashes.SHA256()))  # type: ignore[call-arg]

    def verifying_key(self) -> "VerifyingKey":
        return VerifyingKey(self.public_key)

    def __repr__(self) -> str:
        return f"SigningKey(algorithm={self.algorithm!r}, public_key={self.public_key_hex()!r})"


class VerifyingKey:
    """
    Public key only.

    Used by the ledger to check transaction signatures.
    """

    def __init__(self, public_key: PublicKey):
        self.public_key = public_key

    @classmethod
    def from_public_hex(cls, public_hex: str) -> "VerifyingKey":
        """
        Load a public key from hex; the scheme is inferred from its length.

        Raises:
            InvalidKeyMaterial: If the hex is not a valid public key
        """
        data = _hex_bytes(public_hex)
        try:
            if len(data) == 32:
                return cls(Ed25519PublicKey.from_public_bytes(data))
            return cls(ec.EllipticCurvePublicKey.from_encoded_point(ec.SECP256K1(), data))
        except ValueError as ex:
            raise InvalidKeyMaterial("Public key is not a valid secp256k1 or Ed25519 key") from ex

    def verify(self, payload: bytes, signature: bytes) -> bool:
        """
        Verify signature on payload.

        Returns:
            True if signature is valid, False otherwise
        """
        try:
            if isinstance(self.public_key, Ed25519PublicKey):
                self.public_key.verify(signature, payload)
            else:
                self.public_key.verify(signature, payload, ec.ECDSA(hashes.SHA256()))
            return True
        except InvalidSignature:
            return False
