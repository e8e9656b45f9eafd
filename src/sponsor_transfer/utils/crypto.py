"""Cryptographic helpers — hashing and Ed25519 signature checks."""

from __future__ import annotations

import hashlib

from ecdsa import BadSignatureError, Ed25519, VerifyingKey
from ecdsa.errors import MalformedPointError
from ecdsa.numbertheory import SquareRootError


def sha256(data: bytes) -> bytes:
    """Single SHA-256 hash."""
    return hashlib.sha256(data).digest()


def verify_ed25519(public_key: bytes, message: bytes, signature: bytes) -> bool:
    """Verify an Ed25519 *signature* over *message* by *public_key*."""
    try:
        vk = VerifyingKey.from_string(public_key, curve=Ed25519)
        return bool(vk.verify(signature, message))
    except (BadSignatureError, MalformedPointError, SquareRootError, ValueError):
        return False
