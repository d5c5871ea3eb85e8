"""
Sigil - Compact, stateless, signed tokens.

Data (a string, list or dict) is canonically serialized, signed with an
Ed25519 key derived from a secret, and packed into one printable string that
can travel in a URL and be verified later without server-side storage.

    >>> import sigil
    >>> token = sigil.sign({"user": "42"}, "my secret")
    >>> sigil.verify(token, "my secret").data
    {'user': '42'}
"""

__version__ = "1.0.0"

from .errors import (
    SigilError,
    MissingSecretError,
    MissingVerificationKeyError,
    MissingDataError,
    MalformedTokenError,
    InvalidSignatureError,
    InvalidKeyError,
)
from .shapes import serialize, deserialize, Scalar, Sequence, Mapping
from .keys import KeyPair, make_keypair
from .cache import KeypairCache
from .signer import Signer, signer, sign
from .verifier import Verifier, Result, verifier, verify, decode

__all__ = [
    "__version__",
    # Tokens
    "sign",
    "signer",
    "verify",
    "verifier",
    "decode",
    "Signer",
    "Verifier",
    "Result",
    # Keys
    "make_keypair",
    "KeyPair",
    "KeypairCache",
    # Payload encoding
    "serialize",
    "deserialize",
    "Scalar",
    "Sequence",
    "Mapping",
    # Errors
    "SigilError",
    "MissingSecretError",
    "MissingVerificationKeyError",
    "MissingDataError",
    "MalformedTokenError",
    "InvalidSignatureError",
    "InvalidKeyError",
]
