"""
Sigil Command Line Interface.

Provides commands for deriving keys, signing data, and verifying or decoding tokens.
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

from sigil import config
from sigil.errors import SigilError
from sigil.keys import load_public_key_from_base64, make_keypair
from sigil.signer import sign
from sigil.verifier import decode, verify


def setup_logging(verbose: bool = False) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def _print_data(data, as_json: bool) -> None:
    if as_json or not isinstance(data, str):
        print(json.dumps(data, indent=2 if as_json else None, ensure_ascii=False))
    else:
        print(data)


def cmd_keygen(args: argparse.Namespace) -> int:
    """Print the public key derived from a secret."""
    secret = args.secret or config.SECRET
    if not secret:
        print("Error: Missing secret. Set SIGIL_SECRET or use --secret", file=sys.stderr)
        return 1

    keypair = make_keypair(secret)
    if args.jwk:
        print(keypair.export_public_jwk())
    else:
        print(keypair.public_key_b64())
    return 0


def cmd_sign(args: argparse.Namespace) -> int:
    """Sign a string, or a JSON array/object with --json."""
    secret = args.secret or config.SECRET
    if not secret:
        print("Error: Missing secret. Set SIGIL_SECRET or use --secret", file=sys.stderr)
        return 1

    if args.json:
        try:
            data = json.loads(args.data)
        except json.JSONDecodeError as e:
            print(f"Error: Invalid JSON data: {e}", file=sys.stderr)
            return 1
    else:
        data = args.data

    try:
        token = sign(data, secret)
    except (SigilError, TypeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(token)
    return 0


def cmd_verify(args: argparse.Namespace) -> int:
    """Verify a token with a secret or a base64 public key."""
    public_key = args.public_key or (None if args.secret else config.PUBLIC_KEY)
    secret = args.secret or config.SECRET

    try:
        if public_key:
            key = load_public_key_from_base64(public_key)
        elif secret:
            key = secret
        else:
            print(
                "Error: Missing verification key. Use --secret or --public-key",
                file=sys.stderr,
            )
            return 1
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    result = verify(args.token, key)
    if args.json:
        print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    elif result.ok:
        print("VALID")
        _print_data(result.data, as_json=False)
    else:
        print(f"INVALID: {result.error.message}")
    return 0 if result.ok else 1


def cmd_decode(args: argparse.Namespace) -> int:
    """Decode a token without checking its signature."""
    result = decode(args.token)
    if args.json:
        print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    elif result.ok:
        print("Warning: signature not verified", file=sys.stderr)
        _print_data(result.data, as_json=False)
    else:
        print(f"Error: {result.error.message}", file=sys.stderr)
    return 0 if result.ok else 1


def cmd_config(args: argparse.Namespace) -> int:
    config.print_config()
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sigil", description="Sigil - compact signed tokens"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose output")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # keygen command
    p_keygen = subparsers.add_parser("keygen", help="Print the public key for a secret")
    p_keygen.add_argument("--secret", help="Secret (default: $SIGIL_SECRET)")
    p_keygen.add_argument("--jwk", action="store_true", help="Output as a public JWK")

    # sign command
    p_sign = subparsers.add_parser("sign", help="Sign a string or JSON data")
    p_sign.add_argument("data", help="The data to sign")
    p_sign.add_argument("--json", action="store_true", help="Parse data as JSON")
    p_sign.add_argument("--secret", help="Secret (default: $SIGIL_SECRET)")

    # verify command
    p_verify = subparsers.add_parser("verify", help="Verify a token")
    p_verify.add_argument("token", help="The token to verify")
    key_group = p_verify.add_mutually_exclusive_group()
    key_group.add_argument("--secret", help="Secret (default: $SIGIL_SECRET)")
    key_group.add_argument(
        "--public-key", help="Base64 public key (default: $SIGIL_PUBLIC_KEY)"
    )
    p_verify.add_argument("--json", action="store_true", help="Output as JSON")

    # decode command
    p_decode = subparsers.add_parser("decode", help="Decode a token without verifying it")
    p_decode.add_argument("token", help="The token to decode")
    p_decode.add_argument("--json", action="store_true", help="Output as JSON")

    subparsers.add_parser("config", help="Show effective configuration")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose)

    if args.command == "keygen":
        return cmd_keygen(args)
    elif args.command == "sign":
        return cmd_sign(args)
    elif args.command == "verify":
        return cmd_verify(args)
    elif args.command == "decode":
        return cmd_decode(args)
    elif args.command == "config":
        return cmd_config(args)
    else:
        parser.print_help()
        return 0


if __name__ == "__main__":
    sys.exit(main())
