"""
Sigil key derivation.

A secret is hashed with SHA-256 and the 32-byte digest is used as the Ed25519
seed, so the same secret always yields the same keypair. This lets a token be
verified with either the original secret or the derived public key alone.
"""

import base64
import hashlib
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Union

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)
from jwcrypto import jwk

from sigil.errors import MissingSecretError

if TYPE_CHECKING:
    from sigil.cache import KeypairCache

logger = logging.getLogger(__name__)

PUBLIC_KEY_SIZE = 32
PRIVATE_KEY_SIZE = 64
SEED_SIZE = 32

Secret = Union[str, bytes]


@dataclass(frozen=True)
class KeyPair:
    """
    Ed25519 keypair derived from a secret.

    Attributes:
        public_key: Raw 32-byte public key.
        private_key: Raw 64-byte private key (seed followed by public key).
    """

    public_key: bytes
    private_key: bytes

    @property
    def seed(self) -> bytes:
        return self.private_key[:SEED_SIZE]

    @property
    def signing_key(self) -> Ed25519PrivateKey:
        return Ed25519PrivateKey.from_private_bytes(self.seed)

    @property
    def verify_key(self) -> Ed25519PublicKey:
        return Ed25519PublicKey.from_public_bytes(self.public_key)

    def public_key_b64(self) -> str:
        """Returns the raw public key as standard base64."""
        return base64.b64encode(self.public_key).decode("ascii")

    def export_public_jwk(self) -> str:
        """Returns the public key as a JWK JSON string (OKP, crv=Ed25519)."""
        return jwk.JWK.from_pyca(self.verify_key).export_public()

    def export_private_jwk(self) -> str:
        """Returns the full keypair as a JWK JSON string. Keep it secret."""
        return jwk.JWK.from_pyca(self.signing_key).export_private()

    def __repr__(self) -> str:
        return f"KeyPair(public_key={self.public_key_b64()!r})"


def _secret_bytes(secret: Secret) -> bytes:
    if isinstance(secret, str):
        return secret.encode("utf-8")
    return bytes(secret)


def secret_fingerprint(secret: Secret) -> str:
    """Hex digest used to index a secret without holding on to it."""
    return hashlib.sha256(b"sigil-cache:" + _secret_bytes(secret)).hexdigest()


def make_keypair(secret: Secret, cache: Optional["KeypairCache"] = None) -> KeyPair:
    """
    Derive the Ed25519 keypair for ``secret``.

    Args:
        secret: Passphrase as ``str`` (UTF-8 encoded) or ``bytes``.
        cache: Optional KeypairCache to reuse previous derivations.

    Returns:
        The deterministic KeyPair for this secret.

    Raises:
        MissingSecretError: If secret is empty or None.
    """
    if not secret:
        raise MissingSecretError()
    if cache is not None:
        return cache.get_or_derive(secret, make_keypair)

    seed = hashlib.sha256(_secret_bytes(secret)).digest()
    private = Ed25519PrivateKey.from_private_bytes(seed)
    public_raw = private.public_key().public_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PublicFormat.Raw,
    )
    logger.debug("Derived keypair for public key %s", base64.b64encode(public_raw).decode())
    return KeyPair(public_key=public_raw, private_key=seed + public_raw)


PublicKeyLike = Union[bytes, bytearray, memoryview, Ed25519PublicKey, jwk.JWK, KeyPair]


def load_public_key(key: PublicKeyLike) -> Ed25519PublicKey:
    """
    Load an Ed25519 public key from any of the accepted forms.

    Raises:
        ValueError: If the key is not a valid Ed25519 public key.
        TypeError: If the key is none of the accepted forms.
    """
    if isinstance(key, Ed25519PublicKey):
        return key
    if isinstance(key, KeyPair):
        return key.verify_key
    if isinstance(key, jwk.JWK):
        if key.get("kty") != "OKP" or key.get("crv") != "Ed25519":
            raise ValueError("Key must be an Ed25519 key (OKP with crv=Ed25519)")
        return key.get_op_key("verify")
    if not isinstance(key, (bytes, bytearray, memoryview)):
        raise TypeError(f"Unsupported public key type: {type(key).__name__}")
    raw = bytes(key)
    if len(raw) != PUBLIC_KEY_SIZE:
        raise ValueError(f"Ed25519 public key must be {PUBLIC_KEY_SIZE} bytes, got {len(raw)}")
    return Ed25519PublicKey.from_public_bytes(raw)


def load_public_key_from_base64(b64: str) -> Ed25519PublicKey:
    """From base64 raw 32 bytes. Raises ValueError if not 32 bytes."""
    try:
        raw = base64.b64decode(b64, validate=True)
    except ValueError as e:
        raise ValueError(f"Invalid base64 public key: {e}") from e
    return load_public_key(raw)
