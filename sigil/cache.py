"""
Sigil keypair cache.

Deriving a keypair costs a hash plus an Ed25519 key expansion. Callers that
sign or verify repeatedly with the same secret can keep derived keypairs in a
KeypairCache. Entries are immutable KeyPair objects, safe to share between
threads once built.
"""

import logging
import threading
from collections import OrderedDict
from typing import Callable, Dict, Optional

from sigil import config
from sigil.keys import KeyPair, Secret, secret_fingerprint

logger = logging.getLogger(__name__)


class KeypairCache:
    """
    Thread-safe in-memory LRU cache of derived keypairs.

    Entries are indexed by a fingerprint of the secret, never by the
    secret itself.

    Example:
        >>> cache = KeypairCache(max_size=64)
        >>> sign_fn = signer("my secret", cache=cache)
    """

    def __init__(self, max_size: Optional[int] = None):
        """
        Initialize the cache.

        Args:
            max_size: Maximum number of entries before LRU eviction
                      (default: SIGIL_KEYPAIR_CACHE_SIZE).
        """
        if max_size is None:
            max_size = config.KEYPAIR_CACHE_SIZE
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        self._entries: "OrderedDict[str, KeyPair]" = OrderedDict()
        self._max_size = max_size
        self._lock = threading.Lock()
        self._stats = {"hits": 0, "misses": 0, "evictions": 0}

    def get(self, secret: Secret) -> Optional[KeyPair]:
        """Return the cached keypair for ``secret``, or None."""
        fingerprint = secret_fingerprint(secret)
        with self._lock:
            keypair = self._entries.get(fingerprint)
            if keypair is None:
                self._stats["misses"] += 1
                return None
            self._entries.move_to_end(fingerprint)
            self._stats["hits"] += 1
            return keypair

    def put(self, secret: Secret, keypair: KeyPair) -> None:
        fingerprint = secret_fingerprint(secret)
        with self._lock:
            if fingerprint in self._entries:
                self._entries.move_to_end(fingerprint)
            else:
                while len(self._entries) >= self._max_size:
                    self._entries.popitem(last=False)
                    self._stats["evictions"] += 1
            self._entries[fingerprint] = keypair

    def get_or_derive(self, secret: Secret, derive: Callable[[Secret], KeyPair]) -> KeyPair:
        """
        Return the cached keypair, deriving and storing it on a miss.

        Derivation runs outside the lock; two threads missing on the same
        secret at once both derive, and both get equal keypairs.
        """
        keypair = self.get(secret)
        if keypair is not None:
            return keypair
        keypair = derive(secret)
        self.put(secret, keypair)
        logger.debug("Cached keypair (%d/%d entries)", len(self), self._max_size)
        return keypair

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    @property
    def stats(self) -> Dict[str, int]:
        with self._lock:
            return dict(self._stats, size=len(self._entries))

    def __contains__(self, secret: Secret) -> bool:
        with self._lock:
            return secret_fingerprint(secret) in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
