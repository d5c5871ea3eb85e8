"""
Sigil Signer - Produces signed tokens using Ed25519 keys derived from a secret.

Token layout::

    ~ <86-char unpadded base64 signature> <canonical payload>

The signature covers the UTF-8 bytes of the canonical payload, not the
original Python data.
"""

import base64
import logging
from typing import Any

from sigil.errors import MissingDataError, MissingSecretError
from sigil.keys import KeyPair, Secret, make_keypair
from sigil.shapes import serialize

logger = logging.getLogger(__name__)

TOKEN_MARKER = "~"
# base64 of a 64-byte Ed25519 signature with the "==" padding stripped
SIGNATURE_CHARS = 86
MIN_TOKEN_LENGTH = len(TOKEN_MARKER) + SIGNATURE_CHARS + 1


def encode_signature(signature: bytes) -> str:
    return base64.b64encode(signature).decode("ascii").rstrip("=")


class Signer:
    """
    Signs data into tokens with the keypair derived from a secret.

    The keypair is derived once, at construction. Instances are callable, so
    a Signer can be passed anywhere a ``data -> token`` function is expected.

    Example:
        >>> sign_fn = Signer("my secret")
        >>> token = sign_fn({"user": "42", "role": "admin"})
        >>> token == sign_fn.sign({"role": "admin", "user": "42"})
        True
    """

    def __init__(self, secret: Secret, cache=None):
        """
        Initialize the Signer.

        Args:
            secret: Passphrase the signing key is derived from.
            cache: Optional KeypairCache to reuse derivations.

        Raises:
            MissingSecretError: If secret is empty or None.
        """
        if not secret:
            raise MissingSecretError()
        self._keypair = make_keypair(secret, cache=cache)
        self._signing_key = self._keypair.signing_key

    @property
    def keypair(self) -> KeyPair:
        return self._keypair

    @property
    def public_key(self) -> bytes:
        """Raw 32-byte public key matching this signer."""
        return self._keypair.public_key

    def sign(self, data: Any) -> str:
        """
        Serialize and sign ``data``, returning the token string.

        Args:
            data: A string, list or dict of primitive values.

        Raises:
            MissingDataError: If data is empty/None or serializes to nothing.
            TypeError: If data is not one of the supported shapes.
        """
        if not data:
            raise MissingDataError()
        payload = serialize(data)
        if not payload:
            raise MissingDataError({"reason": "data serialized to an empty payload"})

        signature = self._signing_key.sign(payload.encode("utf-8"))
        logger.debug("Signed payload of %d chars", len(payload))
        return f"{TOKEN_MARKER}{encode_signature(signature)}{payload}"

    __call__ = sign


def signer(secret: Secret, cache=None) -> Signer:
    """Return a reusable signing function bound to ``secret``."""
    return Signer(secret, cache=cache)


def sign(data: Any, secret: Secret, cache=None) -> str:
    """Sign ``data`` with ``secret``. Same as ``signer(secret)(data)``."""
    return signer(secret, cache=cache)(data)
