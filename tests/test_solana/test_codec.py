"""Tests for the byte codec — solana/codec.py."""

from __future__ import annotations

from io import BytesIO

import pytest

from sponsor_transfer.errors.transfer_errors import MalformedEncoding
from sponsor_transfer.solana.codec import (
    base58_decode,
    base58_encode,
    decode_hex,
    encode_compact_u16,
    encode_hex,
    read_compact_u16,
)

# ---------------------------------------------------------------------------
# Hex
# ---------------------------------------------------------------------------


class TestHex:
    @pytest.mark.parametrize(
        "data",
        [b"", b"\x00", b"\xff\x00\x10", bytes(range(256)), b"\x00" * 64],
    )
    def test_roundtrip(self, data: bytes):
        assert decode_hex(encode_hex(data)) == data
        assert decode_hex(encode_hex(data, prefix=True)) == data

    def test_encode_is_lowercase_even_length(self):
        encoded = encode_hex(b"\xab\xcd\x0e")
        assert encoded == "abcd0e"
        assert len(encoded) % 2 == 0

    def test_prefix(self):
        assert encode_hex(b"\x01", prefix=True) == "0x01"
        assert decode_hex("0xdeadbeef") == b"\xde\xad\xbe\xef"

    def test_odd_length_rejected(self):
        with pytest.raises(MalformedEncoding, match="odd length"):
            decode_hex("abc")

    def test_odd_length_after_prefix_rejected(self):
        with pytest.raises(MalformedEncoding):
            decode_hex("0x123")

    def test_non_hex_rejected(self):
        with pytest.raises(MalformedEncoding, match="non-hex"):
            decode_hex("zz")

    def test_whitespace_rejected(self):
        with pytest.raises(MalformedEncoding):
            decode_hex("ab cd")

    def test_non_string_rejected(self):
        with pytest.raises(MalformedEncoding):
            decode_hex(b"abcd")  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# Base58
# ---------------------------------------------------------------------------


class TestBase58:
    def test_zero_bytes_are_ones(self):
        assert base58_encode(b"\x00" * 32) == "1" * 32
        assert base58_decode("1" * 32) == b"\x00" * 32

    def test_known_vector(self):
        assert base58_encode(b"hello world") == "StV1DL6CwTryKyV"
        assert base58_decode("StV1DL6CwTryKyV") == b"hello world"

    def test_leading_zero_preserved(self):
        data = b"\x00\x00\x01\x02"
        assert base58_decode(base58_encode(data)) == data

    def test_invalid_character(self):
        with pytest.raises(MalformedEncoding, match="Invalid Base58"):
            base58_decode("0OIl")


# ---------------------------------------------------------------------------
# compact-u16
# ---------------------------------------------------------------------------


class TestCompactU16:
    @pytest.mark.parametrize(
        ("value", "encoded"),
        [
            (0, b"\x00"),
            (0x7F, b"\x7f"),
            (0x80, b"\x80\x01"),
            (0x3FFF, b"\xff\x7f"),
            (0x4000, b"\x80\x80\x01"),
            (0xFFFF, b"\xff\xff\x03"),
        ],
    )
    def test_encoding(self, value: int, encoded: bytes):
        assert encode_compact_u16(value) == encoded
        assert read_compact_u16(BytesIO(encoded)) == value

    def test_out_of_range(self):
        with pytest.raises(ValueError, match="out of range"):
            encode_compact_u16(0x10000)

    def test_truncated(self):
        with pytest.raises(MalformedEncoding, match="end of stream"):
            read_compact_u16(BytesIO(b"\x80"))
