# evidence_bridge/evidence/hashing.py
"""
Content hashing for evidence integrity.

Hash literals are "sha256:" + lowercase hex of SHA-256 over UTF-8 bytes.
"""

import hashlib
import hmac
import re
from typing import Union

HASH_PREFIX = "sha256:"

HASH_LITERAL_RE = re.compile(r"^sha256:[a-f0-9]{64}$")

# Root sentinel for the first link of a hash chain
GENESIS_HASH = HASH_PREFIX + "0" * 64


def compute_sha256(data: Union[bytes, str]) -> str:
    """
    Compute a prefixed SHA-256 hash literal.

    Args:
        data: Raw bytes or string to hash (strings are UTF-8 encoded)

    Returns:
        "sha256:<64 lowercase hex chars>"
    """
    if isinstance(data, str):
        data = data.encode("utf-8")
    return HASH_PREFIX + hashlib.sha256(data).hexdigest()


def verify_sha256(data: Union[bytes, str], expected_hash: str) -> bool:
    """
    Verify that data matches an expected hash literal.

    Args:
        data: Raw bytes or string to verify
        expected_hash: "sha256:<hex>" literal

    Returns:
        True if hash matches, False otherwise
    """
    actual = compute_sha256(data)
    return hmac.compare_digest(actual, expected_hash.lower())


def is_hash_literal(value: object) -> bool:
    """True if value is a well-formed "sha256:<hex>" literal."""
    return isinstance(value, str) and HASH_LITERAL_RE.match(value) is not None
