"""Hashing and HMAC primitives used by the request signer."""

from __future__ import annotations

import hashlib
import hmac


def _to_bytes(data: bytes | str) -> bytes:
    if isinstance(data, str):
        return data.encode("utf-8")
    return data


def sha256_hex(data: bytes | str) -> str:
    """Return the lowercase hex SHA-256 digest of the content."""
    return hashlib.sha256(_to_bytes(data)).hexdigest()


def hmac_sha256(key: bytes, message: bytes | str) -> bytes:
    """Create a raw HMAC-SHA256 digest."""
    return hmac.new(key, _to_bytes(message), hashlib.sha256).digest()


def hmac_sha256_hex(key: bytes, message: bytes | str) -> str:
    """Create a hex-encoded HMAC-SHA256 signature."""
    return hmac.new(key, _to_bytes(message), hashlib.sha256).hexdigest()

