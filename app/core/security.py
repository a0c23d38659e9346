"""Credential digests and random identifiers."""

import hashlib
import secrets
from typing import Final
from uuid import uuid4

API_KEY_PREFIX: Final = "das_"
API_KEY_RANDOM_BYTES: Final = 16


def generate_api_key() -> str:
    """Return a new raw API key: ``das_`` followed by 32 hex characters."""
    return API_KEY_PREFIX + secrets.token_hex(API_KEY_RANDOM_BYTES)


def hash_credential(raw: str) -> str:
    """
    Digest a credential for storage and lookup.

    Args:
        raw: Credential exactly as it should be compared (callers trim first)

    Returns:
        SHA-256 of the UTF-8 bytes as 64 lowercase hex characters
    """
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()


def generate_correlation_id() -> str:
    """Return a new correlation ID (32 lowercase hex characters)."""
    return uuid4().hex
