# src/unseal_stage/scripts/tokens.py
"""Mint development bearer tokens for local testing of the API.

In production tokens come from the identity provider; this helper signs a
token with the local ``SECRET_KEY`` so the API can be exercised by hand.
"""

from __future__ import annotations

import argparse

from unseal_stage.core.security import create_access_token


def build_parser() -> argparse.ArgumentParser:
    """Return the command-line parser for the token helper."""
    parser = argparse.ArgumentParser(description="Mint an Unseal API bearer token")
    parser.add_argument("user_id", help="User id to place in the token subject")
    parser.add_argument(
        "--header",
        action="store_true",
        help="Print a ready-to-use Authorization header instead of the bare token",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """Print a token for the requested user."""
    args = build_parser().parse_args(argv)
    token = create_access_token(args.user_id)
    output = f"Authorization: Bearer {token}" if args.header else token
    print(output)


if __name__ == "__main__":
    main()
