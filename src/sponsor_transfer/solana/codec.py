"""Byte codec — hex wire encoding, Base58, compact-u16.

Signatures and serialized messages cross network hops as lowercase hex,
optionally carrying a ``0x`` marker. Addresses and transaction ids are
Base58 (Bitcoin alphabet, no checksum). Solana length prefixes use the
compact-u16 ("shortvec") encoding.
"""

from __future__ import annotations

import string
from io import BytesIO

from sponsor_transfer.errors.transfer_errors import MalformedEncoding

HEX_PREFIX = "0x"

_HEX_DIGITS = frozenset(string.hexdigits)

# ---------------------------------------------------------------------------
# Hex
# ---------------------------------------------------------------------------


def encode_hex(data: bytes, *, prefix: bool = False) -> str:
    """Encode bytes as lowercase, even-length hex."""
    encoded = bytes(data).hex()
    return HEX_PREFIX + encoded if prefix else encoded


def decode_hex(value: str) -> bytes:
    """Decode a hex string, stripping an optional ``0x`` marker.

    Raises:
        MalformedEncoding: On odd length or non-hex characters.
    """
    if not isinstance(value, str):
        msg = f"Expected hex string, got {type(value).__name__}"
        raise MalformedEncoding(msg)
    body = value[2:] if value[:2] in ("0x", "0X") else value
    if len(body) % 2 != 0:
        msg = f"Hex string has odd length: {len(body)}"
        raise MalformedEncoding(msg)
    if not _HEX_DIGITS.issuperset(body):
        msg = "Hex string contains non-hex characters"
        raise MalformedEncoding(msg)
    return bytes.fromhex(body)


# ---------------------------------------------------------------------------
# Base58 (no checksum)
# ---------------------------------------------------------------------------

B58_ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
_B58_INDEX = {char: i for i, char in enumerate(B58_ALPHABET)}


def base58_encode(payload: bytes) -> str:
    """Encode raw bytes to Base58."""
    n = int.from_bytes(payload, "big")
    result: list[str] = []
    while n > 0:
        n, remainder = divmod(n, 58)
        result.append(B58_ALPHABET[remainder])
    # Leading zero bytes map to leading '1' characters
    for byte in payload:
        if byte == 0:
            result.append(B58_ALPHABET[0])
        else:
            break
    return "".join(reversed(result))


def base58_decode(s: str) -> bytes:
    """Decode a Base58 string to raw bytes.

    Raises:
        MalformedEncoding: If *s* contains a character outside the alphabet.
    """
    n = 0
    for char in s:
        digit = _B58_INDEX.get(char)
        if digit is None:
            msg = f"Invalid Base58 character: {char!r}"
            raise MalformedEncoding(msg)
        n = n * 58 + digit
    result = n.to_bytes((n.bit_length() + 7) // 8, "big") if n > 0 else b""
    pad_count = len(s) - len(s.lstrip("1"))
    return b"\x00" * pad_count + result


# ---------------------------------------------------------------------------
# compact-u16
# ---------------------------------------------------------------------------


def encode_compact_u16(n: int) -> bytes:
    """Encode a length as Solana compact-u16 (7 bits per byte, LSB first)."""
    if not 0 <= n <= 0xFFFF:
        msg = f"compact-u16 out of range: {n}"
        raise ValueError(msg)
    out = bytearray()
    while True:
        byte = n & 0x7F
        n >>= 7
        if n == 0:
            out.append(byte)
            return bytes(out)
        out.append(byte | 0x80)


def read_compact_u16(stream: BytesIO) -> int:
    """Read a compact-u16 value from a byte stream."""
    value = 0
    for i in range(3):
        raw = stream.read(1)
        if len(raw) == 0:
            msg = "Unexpected end of stream reading compact-u16"
            raise MalformedEncoding(msg)
        byte = raw[0]
        value |= (byte & 0x7F) << (7 * i)
        if byte & 0x80 == 0:
            return value
    msg = "compact-u16 longer than 3 bytes"
    raise MalformedEncoding(msg)


def read_exact(stream: BytesIO, size: int, what: str) -> bytes:
    """Read exactly *size* bytes or raise :class:`MalformedEncoding`."""
    data = stream.read(size)
    if len(data) != size:
        msg = f"Unexpected end of stream reading {what}"
        raise MalformedEncoding(msg)
    return data
