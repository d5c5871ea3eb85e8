"""
Sigil Verifier - Decodes tokens and checks their Ed25519 signatures.

Tokens are untrusted input: ``decode`` and ``verify`` never raise on a bad
token, they return a Result with ``ok=False`` and the error attached.
"""

import base64
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PublicKey

from sigil.errors import (
    InvalidKeyError,
    InvalidSignatureError,
    MalformedTokenError,
    MissingVerificationKeyError,
    SigilError,
)
from sigil.keys import PublicKeyLike, load_public_key, make_keypair
from sigil.shapes import deserialize
from sigil.signer import MIN_TOKEN_LENGTH, SIGNATURE_CHARS, TOKEN_MARKER, encode_signature

logger = logging.getLogger(__name__)

_PAYLOAD_START = len(TOKEN_MARKER) + SIGNATURE_CHARS
_URLSAFE_TO_STANDARD = str.maketrans("-_", "+/")


@dataclass(frozen=True)
class Result:
    """
    Outcome of decoding or verifying a token.

    Attributes:
        ok: Whether the token passed.
        data: Deserialized payload (on success).
        error: The SigilError describing the failure (on failure).
        payload: Raw payload string (decode only).
        signature: Raw 64-byte signature (decode only).
    """

    ok: bool
    data: Any = None
    error: Optional[SigilError] = None
    payload: Optional[str] = None
    signature: Optional[bytes] = None

    @property
    def err(self) -> Optional[SigilError]:
        return self.error

    def __bool__(self) -> bool:
        return self.ok

    def to_dict(self) -> Dict[str, Any]:
        if not self.ok:
            return {"ok": False, "error": self.error.to_dict() if self.error else None}
        result: Dict[str, Any] = {"ok": True, "data": self.data}
        if self.payload is not None:
            result["payload"] = self.payload
        if self.signature is not None:
            result["signature"] = base64.b64encode(self.signature).decode("ascii")
        return result


def _failure(error: SigilError) -> Result:
    logger.debug("Token rejected: %s", error.message)
    return Result(ok=False, error=error)


def decode(token: Any) -> Result:
    """
    Split a token into signature and payload without checking the signature.

    Returns:
        Result with ``payload``, ``data`` and ``signature`` on success, or
        ``ok=False`` with a MalformedTokenError.
    """
    if not isinstance(token, str):
        return _failure(MalformedTokenError("not a string", {"type": type(token).__name__}))
    if not token.startswith(TOKEN_MARKER):
        return _failure(MalformedTokenError(f"missing '{TOKEN_MARKER}' marker"))
    if len(token) < MIN_TOKEN_LENGTH:
        return _failure(
            MalformedTokenError(
                "too short", {"length": len(token), "min_length": MIN_TOKEN_LENGTH}
            )
        )

    encoded = token[len(TOKEN_MARKER):_PAYLOAD_START].translate(_URLSAFE_TO_STANDARD)
    try:
        signature = base64.b64decode(encoded + "==", validate=True)
    except ValueError as e:
        # binascii.Error for bad digits, plain ValueError for non-ASCII text
        return _failure(MalformedTokenError("signature is not base64", {"cause": str(e)}))
    # the last character carries 4 unused bits, which must be zero
    if encode_signature(signature) != encoded:
        return _failure(MalformedTokenError("signature has non-canonical base64 padding bits"))

    payload = token[_PAYLOAD_START:]
    return Result(ok=True, data=deserialize(payload), payload=payload, signature=signature)


class Verifier:
    """
    Verifies tokens against a single public key.

    The key may be given directly (raw 32 bytes, an Ed25519PublicKey, a
    jwcrypto JWK or a KeyPair) or as the secret it was derived from.

    Example:
        >>> check = Verifier("my secret")
        >>> result = check(token)
        >>> if result.ok:
        ...     print(result.data)
    """

    def __init__(self, key_or_secret: Union[str, PublicKeyLike], cache=None):
        """
        Initialize the Verifier.

        Args:
            key_or_secret: Public key in any accepted form, or a ``str`` secret.
            cache: Optional KeypairCache used when a secret is given.

        Raises:
            MissingVerificationKeyError: If key_or_secret is empty or None.
            InvalidKeyError: If the key is not a valid Ed25519 public key.
        """
        if key_or_secret is None or (
            isinstance(key_or_secret, (str, bytes, bytearray, memoryview))
            and len(key_or_secret) == 0
        ):
            raise MissingVerificationKeyError()

        if isinstance(key_or_secret, str):
            self._public_key = make_keypair(key_or_secret, cache=cache).verify_key
        else:
            try:
                self._public_key = load_public_key(key_or_secret)
            except (ValueError, TypeError) as e:
                raise InvalidKeyError(str(e), {"type": type(key_or_secret).__name__}) from e

    @property
    def public_key(self) -> Ed25519PublicKey:
        return self._public_key

    def verify(self, token: Any) -> Result:
        """
        Check ``token`` and return its data when the signature is valid.

        Never raises on bad tokens.
        """
        decoded = decode(token)
        if not decoded.ok:
            return Result(ok=False, error=decoded.error)

        try:
            self._public_key.verify(decoded.signature, decoded.payload.encode("utf-8"))
        except InvalidSignature:
            return _failure(InvalidSignatureError({"payload_length": len(decoded.payload)}))
        return Result(ok=True, data=decoded.data)

    __call__ = verify


def verifier(key_or_secret: Union[str, PublicKeyLike], cache=None) -> Verifier:
    """Return a reusable verification function bound to one key."""
    return Verifier(key_or_secret, cache=cache)


def verify(token: Any, key_or_secret: Union[str, PublicKeyLike], cache=None) -> Result:
    """
    Verify ``token``. Same as ``verifier(key_or_secret)(token)``, except that
    an unusable key comes back as a failed Result instead of raising.

    Raises:
        MissingVerificationKeyError: If key_or_secret is empty or None.
    """
    try:
        check = verifier(key_or_secret, cache=cache)
    except InvalidKeyError as e:
        return _failure(e)
    return check(token)
