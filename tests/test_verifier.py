"""
Unit tests for token decoding and verification.
"""

import string

import pytest
from jwcrypto import jwk

from sigil import (
    InvalidKeyError,
    InvalidSignatureError,
    MalformedTokenError,
    MissingVerificationKeyError,
    Result,
    Verifier,
    decode,
    make_keypair,
    sign,
    verifier,
    verify,
)


def _flip(char: str) -> str:
    return "A" if char != "A" else "B"


_B64_ALPHABET = string.ascii_uppercase + string.ascii_lowercase + string.digits + "+/"


class TestDecode:
    """Tests for decode()."""

    def test_decode_valid_token(self, signer):
        token = signer.sign({"b": "2", "a": "1"})
        result = decode(token)

        assert result.ok is True
        assert result.payload == "a=1&b=2"
        assert result.data == {"a": "1", "b": "2"}
        assert len(result.signature) == 64

    def test_decode_does_not_check_signature(self, signer):
        token = signer.sign("hello")
        assert decode(token[:-1] + "x").ok is True

    def test_not_a_token(self):
        result = decode("notatoken")
        assert result.ok is False
        assert isinstance(result.error, MalformedTokenError)

    def test_signature_without_payload(self):
        """Marker plus 86 signature chars but no payload is too short."""
        result = decode("~" + "x" * 86)
        assert result.ok is False
        assert isinstance(result.error, MalformedTokenError)
        assert result.error.details["min_length"] == 88

    @pytest.mark.parametrize("token", [None, 42, b"~abc", ["~"]])
    def test_not_a_string(self, token):
        result = decode(token)
        assert result.ok is False
        assert isinstance(result.error, MalformedTokenError)

    def test_wrong_marker(self, signer):
        token = signer.sign("hello")
        assert decode("!" + token[1:]).ok is False

    def test_empty_string(self):
        assert decode("").ok is False

    def test_non_base64_signature(self):
        result = decode("~" + "!" * 86 + "payload")
        assert result.ok is False
        assert "base64" in result.error.message

    def test_non_ascii_signature(self):
        """Non-ASCII characters in the signature segment are malformed, not an exception."""
        result = decode("~" + "é" * 86 + "payload")
        assert result.ok is False
        assert isinstance(result.error, MalformedTokenError)

    def test_non_canonical_last_signature_char(self, signer):
        """The unused low bits of the final signature character must be zero."""
        token = signer.sign("hello")
        last = _B64_ALPHABET.index(token[86])
        assert last % 16 == 0
        variant = token[:86] + _B64_ALPHABET[last + 1] + token[87:]

        result = decode(variant)
        assert result.ok is False
        assert isinstance(result.error, MalformedTokenError)

    def test_err_alias(self):
        result = decode("notatoken")
        assert result.err is result.error


class TestVerify:
    """Tests for verify() and Verifier."""

    def test_hello_scenario(self, secret, other_secret):
        token = sign("hello", secret)

        result = verify(token, secret)
        assert result.ok is True
        assert result.data == "hello"

        assert verify(token, other_secret).ok is False

    @pytest.mark.parametrize(
        "data",
        [
            "hello world",
            ["a", "b", "c"],
            {"user": "42", "role": "admin"},
            {"scope": ["read", "list"], "target": "users_table"},
        ],
    )
    def test_round_trip(self, secret, data):
        assert verify(sign(data, secret), secret).data == data

    def test_numbers_round_trip_as_strings(self, secret):
        assert verify(sign({"n": 5}, secret), secret).data == {"n": "5"}

    def test_cross_key_rejection(self, secret, other_secret, sample_payload):
        result = verify(sign(sample_payload, secret), other_secret)
        assert result.ok is False
        assert isinstance(result.error, InvalidSignatureError)

    def test_public_key_only(self, secret, sample_payload):
        token = sign(sample_payload, secret)
        assert verify(token, make_keypair(secret).public_key).ok is True

    def test_verify_with_jwk(self, secret, keypair):
        key = jwk.JWK.from_json(keypair.export_public_jwk())
        assert verify(sign("hello", secret), key).ok is True

    def test_verify_with_keypair(self, secret, keypair):
        assert verify(sign("hello", secret), keypair).ok is True

    def test_verify_with_pyca_key(self, secret, keypair):
        assert verify(sign("hello", secret), keypair.verify_key).ok is True

    def test_tampered_payload(self, secret):
        """Changing any payload character invalidates the token."""
        token = sign("hello", secret)
        for i in range(87, len(token)):
            tampered = token[:i] + _flip(token[i]) + token[i + 1:]
            result = verify(tampered, secret)
            assert result.ok is False
            assert isinstance(result.error, InvalidSignatureError)

    def test_tampered_signature(self, secret):
        token = sign("hello", secret)
        tampered = "~" + _flip(token[1]) + token[2:]
        assert verify(tampered, secret).ok is False

    def test_appended_payload(self, secret):
        assert verify(sign("hello", secret) + "x", secret).ok is False

    def test_malformed_token_is_result_not_exception(self, secret):
        result = verify("notatoken", secret)
        assert result.ok is False
        assert isinstance(result.error, MalformedTokenError)

    @pytest.mark.parametrize("token", [None, 123, "", "~", "~" + "x" * 86, "~" + "é" * 86 + "x"])
    def test_never_raises(self, secret, token):
        assert verify(token, secret).ok is False

    def test_non_ascii_signature_returns_result(self, secret):
        token = sign("hello", secret)
        result = verify("~é" + token[2:], secret)
        assert result.ok is False
        assert isinstance(result.error, MalformedTokenError)

    @pytest.mark.parametrize("key", [b"x" * 31, 32, object()])
    def test_unusable_key_returns_result(self, secret, key):
        """verify() reports a bad public key in the Result instead of raising."""
        result = verify(sign("hello", secret), key)
        assert result.ok is False
        assert isinstance(result.error, InvalidKeyError)
        assert result.to_dict()["error"]["code"] == "sigil:key/invalid"

    def test_missing_key_still_raises(self, secret):
        with pytest.raises(MissingVerificationKeyError):
            verify(sign("hello", secret), b"")

    def test_urlsafe_signature_accepted(self, secret):
        token = sign("hello", secret)
        urlsafe = "~" + token[1:87].translate(str.maketrans("+/", "-_")) + token[87:]
        assert verify(urlsafe, secret).ok is True

    def test_result_truthiness(self, secret):
        token = sign("hello", secret)
        assert verify(token, secret)
        assert not verify(token, "wrong")


class TestVerifierInitialization:
    """Tests for Verifier construction."""

    @pytest.mark.parametrize("missing", ["", None, b""])
    def test_missing_key(self, missing):
        with pytest.raises(MissingVerificationKeyError):
            Verifier(missing)

    def test_missing_key_is_value_error(self):
        with pytest.raises(ValueError, match="verification key"):
            verifier("")

    def test_wrong_length_public_key(self):
        with pytest.raises(ValueError, match="32 bytes"):
            Verifier(b"x" * 31)

    def test_wrong_length_is_invalid_key_error(self):
        with pytest.raises(InvalidKeyError):
            Verifier(b"x" * 31)

    @pytest.mark.parametrize("key", [32, 1.5, ["k"]])
    def test_unsupported_key_type(self, key):
        """Non-bytes keys are rejected rather than coerced."""
        with pytest.raises(InvalidKeyError, match="Unsupported public key type"):
            Verifier(key)

    def test_secret_and_public_key_agree(self, secret, keypair):
        token = sign("hello", secret)
        assert Verifier(secret)(token) == Verifier(keypair.public_key)(token)

    def test_reusable(self, secret):
        check = verifier(secret)
        assert check(sign("a", secret)).data == "a"
        assert check(sign("b", secret)).data == "b"

    def test_cached_secret(self, secret, keypair_cache):
        Verifier(secret, cache=keypair_cache)
        assert secret in keypair_cache


class TestResult:
    """Tests for the Result envelope."""

    def test_success_to_dict(self, secret):
        assert verify(sign("hello", secret), secret).to_dict() == {"ok": True, "data": "hello"}

    def test_failure_to_dict(self, secret):
        result = verify(sign("hello", secret), "wrong").to_dict()
        assert result["ok"] is False
        assert result["error"]["code"] == "sigil:signature/invalid"

    def test_decode_to_dict_includes_signature(self, signer):
        result = decode(signer.sign("hello")).to_dict()
        assert result["payload"] == "hello"
        assert len(result["signature"]) == 88

    def test_frozen(self):
        result = Result(ok=True, data="x")
        with pytest.raises(AttributeError):
            result.ok = False
