# sigil/config.py
"""
Centralized configuration for Sigil.

Values are read from environment variables with sensible defaults, so the
CLI and long-running callers can be configured without code changes.

Environment Variables:
    SIGIL_SECRET: Default secret for the CLI sign/verify/keygen commands
    SIGIL_PUBLIC_KEY: Default base64 public key for the CLI verify command
    SIGIL_KEYPAIR_CACHE_SIZE: Default KeypairCache capacity (default: 128)
"""

import os
from typing import Final, Optional

SECRET: Final[Optional[str]] = os.getenv("SIGIL_SECRET") or None

PUBLIC_KEY: Final[Optional[str]] = os.getenv("SIGIL_PUBLIC_KEY") or None

KEYPAIR_CACHE_SIZE: Final[int] = int(os.getenv("SIGIL_KEYPAIR_CACHE_SIZE", "128"))


def _mask(value: Optional[str]) -> str:
    if not value:
        return "(unset)"
    return "*" * 8


def print_config() -> None:
    """Print current configuration with secrets masked."""
    print("Sigil Configuration:")
    print(f"  SIGIL_SECRET:             {_mask(SECRET)}")
    print(f"  SIGIL_PUBLIC_KEY:         {PUBLIC_KEY or '(unset)'}")
    print(f"  SIGIL_KEYPAIR_CACHE_SIZE: {KEYPAIR_CACHE_SIZE}")


if __name__ == "__main__":
    print_config()
