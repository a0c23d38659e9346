#!/usr/bin/env python3
"""Generate API keys and the configuration records that reference them."""

import argparse
from typing import Any

import yaml

from app.core.security import generate_api_key, hash_credential


def build_parser() -> argparse.ArgumentParser:
    """Command line interface."""
    parser = argparse.ArgumentParser(description="Generate API keys for the Data Assets API")
    parser.add_argument(
        "-n",
        "--number",
        type=int,
        default=1,
        help="Number of keys to generate (default: 1)",
    )
    parser.add_argument(
        "--owner",
        default="API client",
        help="Owner written into the generated records (default: 'API client')",
    )
    parser.add_argument(
        "--yaml",
        action="store_true",
        help="Print an auth.api_keys YAML block; raw keys appear only as comments",
    )
    parser.add_argument(
        "--hash",
        dest="hash_key",
        metavar="API_KEY",
        help="Print the SHA-256 digest of an existing key and exit",
    )
    return parser


def new_key_records(count: int, owner: str) -> list[tuple[str, dict[str, Any]]]:
    """
    Create raw keys paired with the records to put in configuration.

    Args:
        count: Number of keys
        owner: Owner for every record

    Returns:
        ``(raw_key, record)`` pairs; records carry only the digest
    """
    pairs = []
    for index in range(1, count + 1):
        raw_key = generate_api_key()
        record = {
            "key_id": f"key-{index}",
            "owner": owner,
            "key_hash": hash_credential(raw_key),
            "enabled": True,
        }
        pairs.append((raw_key, record))
    return pairs


def main(argv: list[str] | None = None) -> None:
    """Entry point."""
    args = build_parser().parse_args(argv)

    if args.hash_key is not None:
        print(hash_credential(args.hash_key.strip()))
        return

    pairs = new_key_records(args.number, args.owner)

    if not args.yaml:
        for raw_key, record in pairs:
            print(f"{raw_key} {record['key_hash']}")
        return

    print("# Merge under `auth:` in config/main.yaml and hand each raw key to its owner.")
    for raw_key, record in pairs:
        print(f"# {record['key_id']}: {raw_key}")
    records = [record for _, record in pairs]
    print(yaml.safe_dump({"api_keys": records}, sort_keys=False), end="")


if __name__ == "__main__":
    main()
