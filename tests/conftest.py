"""
Shared pytest fixtures for Sigil tests.
"""

import pytest

from sigil import KeyPair, KeypairCache, Signer, make_keypair


@pytest.fixture
def secret() -> str:
    return "secret1"


@pytest.fixture
def other_secret() -> str:
    return "secret2"


@pytest.fixture
def keypair(secret: str) -> KeyPair:
    """Keypair derived from the default test secret."""
    return make_keypair(secret)


@pytest.fixture
def signer(secret: str) -> Signer:
    """Create a Signer bound to the default test secret."""
    return Signer(secret)


@pytest.fixture
def keypair_cache() -> KeypairCache:
    return KeypairCache(max_size=4)


@pytest.fixture
def sample_payload() -> dict:
    """Sample mapping payload for signing tests."""
    return {
        "action": "read database",
        "target": "users_table",
        "scope": ["read", "list"],
    }
