"""
Sigil Error Taxonomy.

Misuse errors (missing secret, key or data) are raised immediately.
Token errors (malformed token, bad signature) are never raised across the
verify boundary; instances are carried in ``Result.error`` instead.
"""

from typing import Any, Dict, Optional


class SigilError(Exception):
    """
    Base exception for all Sigil errors.

    Attributes:
        code: Error code following the sigil:<area>/<reason> pattern
        message: Human-readable error message
        details: Optional additional error context
    """

    code = "sigil:error"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to ``{code, message, details}`` dict."""
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class MissingSecretError(SigilError, ValueError):
    """Raised when a signer or keypair is requested without a secret."""

    code = "sigil:secret/missing"

    def __init__(self, details: Optional[Dict[str, Any]] = None):
        super().__init__("Missing secret", details)


class MissingVerificationKeyError(SigilError, ValueError):
    """Raised when a verifier is requested without a key or secret."""

    code = "sigil:key/missing"

    def __init__(self, details: Optional[Dict[str, Any]] = None):
        super().__init__("Missing verification key", details)


class MissingDataError(SigilError, ValueError):
    """Raised when there is nothing to sign."""

    code = "sigil:data/missing"

    def __init__(self, details: Optional[Dict[str, Any]] = None):
        super().__init__("Missing data", details)


class MalformedTokenError(SigilError):
    """Token failed the structural checks (type, marker, length, encoding)."""

    code = "sigil:token/malformed"

    def __init__(self, reason: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(f"Malformed token: {reason}", details)
        self.reason = reason


class InvalidSignatureError(SigilError):
    """Token is well formed but its signature does not match the payload."""

    code = "sigil:signature/invalid"

    def __init__(self, details: Optional[Dict[str, Any]] = None):
        super().__init__("Invalid signature", details)


class InvalidKeyError(SigilError, ValueError):
    """A verification key was given but is not a usable Ed25519 public key."""

    code = "sigil:key/invalid"

    def __init__(self, reason: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(f"Invalid verification key: {reason}", details)
        self.reason = reason
