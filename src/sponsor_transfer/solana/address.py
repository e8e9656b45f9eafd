"""Addresses — Base58 public keys and program-derived addresses.

- :class:`Address` wraps exactly 32 raw bytes and renders as Base58
- Text shape check (Base58 alphabet, 32-44 characters) before any decode
- Program-derived address search (seeds + bump, must fall off the Ed25519 curve)
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Self

from ecdsa import Ed25519, VerifyingKey
from ecdsa.errors import MalformedPointError
from ecdsa.numbertheory import SquareRootError

from sponsor_transfer.errors.transfer_errors import InvalidAddressFormat, MalformedEncoding
from sponsor_transfer.solana.codec import base58_decode, base58_encode
from sponsor_transfer.utils.crypto import sha256

ADDRESS_LENGTH = 32

_ADDRESS_RE = re.compile(r"^[1-9A-HJ-NP-Za-km-z]{32,44}$")

_PDA_MARKER = b"ProgramDerivedAddress"
_MAX_SEED_LENGTH = 32
_MAX_SEEDS = 16


@dataclass(frozen=True, order=True)
class Address:
    """A 32-byte Solana public key."""

    raw: bytes

    def __post_init__(self) -> None:
        if len(self.raw) != ADDRESS_LENGTH:
            msg = f"Address must be {ADDRESS_LENGTH} bytes, got {len(self.raw)}"
            raise InvalidAddressFormat(msg)

    @classmethod
    def from_string(cls, value: str) -> Self:
        """Parse a Base58 address, rejecting anything off-shape.

        Raises:
            InvalidAddressFormat: If the text fails the shape check or does
                not decode to exactly 32 bytes.
        """
        if not isinstance(value, str):
            msg = f"Address must be a string, got {type(value).__name__}"
            raise InvalidAddressFormat(msg)
        text = value.strip()
        if not _ADDRESS_RE.match(text):
            msg = f"Invalid Solana address format: {value!r}"
            raise InvalidAddressFormat(msg)
        try:
            raw = base58_decode(text)
        except MalformedEncoding as exc:
            raise InvalidAddressFormat(str(exc)) from exc
        if len(raw) != ADDRESS_LENGTH:
            msg = f"Address {text} decodes to {len(raw)} bytes"
            raise InvalidAddressFormat(msg)
        return cls(raw)

    def __str__(self) -> str:
        return base58_encode(self.raw)

    def __repr__(self) -> str:
        return f"Address({self})"

    def __bytes__(self) -> bytes:
        return self.raw

    @property
    def is_on_curve(self) -> bool:
        """Whether the bytes decode to an Ed25519 point (i.e. can sign)."""
        return is_on_curve(self.raw)


def is_on_curve(data: bytes) -> bool:
    """Check whether 32 bytes are a valid compressed Ed25519 point."""
    try:
        VerifyingKey.from_string(data, curve=Ed25519)
    except (MalformedPointError, SquareRootError):
        return False
    return True


# ---------------------------------------------------------------------------
# Program-derived addresses
# ---------------------------------------------------------------------------


def create_program_address(seeds: list[bytes], program_id: Address) -> Address:
    """Hash *seeds* under *program_id* into an address.

    Raises:
        ValueError: If a seed is too long, there are too many seeds, or the
            result lands on the Ed25519 curve.
    """
    if len(seeds) > _MAX_SEEDS:
        msg = f"Too many seeds: {len(seeds)}"
        raise ValueError(msg)
    for seed in seeds:
        if len(seed) > _MAX_SEED_LENGTH:
            msg = f"Seed longer than {_MAX_SEED_LENGTH} bytes"
            raise ValueError(msg)
    digest = sha256(b"".join(seeds) + program_id.raw + _PDA_MARKER)
    if is_on_curve(digest):
        msg = "Derived address is on the Ed25519 curve"
        raise ValueError(msg)
    return Address(digest)


def find_program_address(seeds: list[bytes], program_id: Address) -> tuple[Address, int]:
    """Search bumps 255..0 for the first off-curve program address.

    Returns:
        Tuple of (address, bump seed).
    """
    for bump in range(255, -1, -1):
        try:
            return create_program_address([*seeds, bytes([bump])], program_id), bump
        except ValueError:
            continue
    msg = "Unable to find a viable program address bump seed"
    raise ValueError(msg)
