"""Content hashing utilities for deduplication."""

import hashlib


def sha256(text: str) -> str:
    """
    Generate SHA-256 hash of text content.

    Args:
        text: Text to hash

    Returns:
        Hexadecimal string representation of SHA-256 hash
    """
    if not isinstance(text, str):
        raise TypeError("Input must be a string")

    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def content_hash(text: str, length: int = 16) -> str:
    """
    Short content fingerprint used to group chunks with identical text.

    Matching is exact: no normalization is applied before hashing, so two
    chunks only collide when their content is byte-for-byte the same.

    Args:
        text: Chunk content
        length: Number of hex characters to keep

    Returns:
        Leading `length` hex characters of the SHA-256 digest
    """
    return sha256(text)[:length]
