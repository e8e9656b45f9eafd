"""Tests for addresses and derivation — solana/address.py, solana/instructions.py."""

from __future__ import annotations

import pytest

from sponsor_transfer.errors.transfer_errors import InvalidAddressFormat
from sponsor_transfer.solana.address import (
    Address,
    create_program_address,
    find_program_address,
    is_on_curve,
)
from sponsor_transfer.solana.instructions import (
    ASSOCIATED_TOKEN_PROGRAM_ID,
    SYSTEM_PROGRAM_ID,
    TOKEN_PROGRAM_ID,
    get_associated_token_address,
)


class TestAddressParsing:
    def test_roundtrip(self):
        text = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"
        addr = Address.from_string(text)
        assert str(addr) == text
        assert len(bytes(addr)) == 32

    def test_system_program_is_all_zero(self):
        assert SYSTEM_PROGRAM_ID.raw == b"\x00" * 32

    def test_strips_whitespace(self):
        assert Address.from_string("  " + str(TOKEN_PROGRAM_ID) + "\n") == TOKEN_PROGRAM_ID

    @pytest.mark.parametrize(
        "value",
        [
            "",
            "short",
            "0OIl" * 10,  # characters outside the alphabet
            "1" * 45,  # too long
            "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5D!",
        ],
    )
    def test_shape_check(self, value: str):
        with pytest.raises(InvalidAddressFormat):
            Address.from_string(value)

    def test_wrong_decoded_length(self):
        # 44 base58 digits overflow 32 bytes
        with pytest.raises(InvalidAddressFormat, match="decodes to"):
            Address.from_string("z" * 44)

    def test_raw_length_enforced(self):
        with pytest.raises(InvalidAddressFormat):
            Address(b"\x01" * 31)

    def test_non_string(self):
        with pytest.raises(InvalidAddressFormat):
            Address.from_string(123)  # type: ignore[arg-type]

    def test_hashable_and_ordered(self):
        a = Address(b"\x01" * 32)
        b = Address(b"\x02" * 32)
        assert len({a, b, Address(b"\x01" * 32)}) == 2
        assert a < b


class TestProgramAddresses:
    def test_wallet_keys_are_on_curve(self, sender):
        assert is_on_curve(sender.address.raw)
        assert sender.address.is_on_curve

    def test_find_program_address_is_off_curve(self):
        addr, bump = find_program_address([b"seed"], TOKEN_PROGRAM_ID)
        assert 0 <= bump <= 255
        assert not is_on_curve(addr.raw)
        assert create_program_address([b"seed", bytes([bump])], TOKEN_PROGRAM_ID) == addr

    def test_seed_too_long(self):
        with pytest.raises(ValueError, match="Seed longer"):
            create_program_address([b"x" * 33], TOKEN_PROGRAM_ID)

    def test_too_many_seeds(self):
        with pytest.raises(ValueError, match="Too many seeds"):
            create_program_address([b"x"] * 17, TOKEN_PROGRAM_ID)


class TestAssociatedTokenAddress:
    def test_deterministic(self, sender, usdc_mint):
        first = get_associated_token_address(sender.address, usdc_mint)
        second = get_associated_token_address(sender.address, usdc_mint)
        assert first == second
        assert not first.is_on_curve

    def test_distinct_per_owner(self, sender, recipient, usdc_mint):
        assert get_associated_token_address(
            sender.address, usdc_mint
        ) != get_associated_token_address(recipient.address, usdc_mint)

    def test_matches_pda_seeds(self, sender, usdc_mint):
        expected, _ = find_program_address(
            [sender.address.raw, TOKEN_PROGRAM_ID.raw, usdc_mint.raw],
            ASSOCIATED_TOKEN_PROGRAM_ID,
        )
        assert get_associated_token_address(sender.address, usdc_mint) == expected

    def test_known_vector(self):
        # Reference pair published with the SPL token client library.
        owner = Address.from_string("B8UwBUUnKwCyKuGMbFKWaG7exYdDk2ozZrPg72NyVbfj")
        mint = Address.from_string("7o36UsWR1JQLpZ9PE2gn9L4SQ69CNNiWAXd4Jt7rqz9Z")
        ata = get_associated_token_address(owner, mint)
        assert str(ata) == "DShWnroshVbeUp28oopA3Pu7oFPDBtC1DBmPECXXAQ9n"
