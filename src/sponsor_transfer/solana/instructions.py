"""Instructions — account metas, SPL token transfer, associated account creation.

Instructions are immutable values; a :class:`~sponsor_transfer.solana.transaction.Transaction`
composes them in the order supplied and never mutates them.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass, field

from sponsor_transfer.solana.address import Address, find_program_address

# ---------------------------------------------------------------------------
# Program ids
# ---------------------------------------------------------------------------

SYSTEM_PROGRAM_ID = Address.from_string("11111111111111111111111111111111")
TOKEN_PROGRAM_ID = Address.from_string("TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA")
ASSOCIATED_TOKEN_PROGRAM_ID = Address.from_string("ATokenGPvbdGVxr1b2hvZbsiqW5xWH25efTNsLJA8knL")

# SPL Token instruction discriminator for Transfer
TOKEN_TRANSFER = 3

_U64_MAX = 0xFFFFFFFFFFFFFFFF


@dataclass(frozen=True)
class AccountMeta:
    """An account referenced by an instruction.

    Attributes:
        address: The account's public key.
        is_signer: Whether the instruction requires this account's signature.
        is_writable: Whether the instruction may modify this account.
    """

    address: Address
    is_signer: bool = False
    is_writable: bool = False


@dataclass(frozen=True)
class Instruction:
    """A single program invocation.

    Attributes:
        program_id: Program to invoke.
        accounts: Ordered account metas passed to the program.
        data: Opaque instruction data.
    """

    program_id: Address
    accounts: tuple[AccountMeta, ...] = field(default_factory=tuple)
    data: bytes = b""

    @property
    def signers(self) -> list[Address]:
        """Addresses whose signature this instruction requires."""
        return [meta.address for meta in self.accounts if meta.is_signer]


# ---------------------------------------------------------------------------
# Associated token accounts
# ---------------------------------------------------------------------------


def get_associated_token_address(owner: Address, mint: Address) -> Address:
    """Derive the associated token account for (*owner*, *mint*)."""
    address, _ = find_program_address(
        [owner.raw, TOKEN_PROGRAM_ID.raw, mint.raw],
        ASSOCIATED_TOKEN_PROGRAM_ID,
    )
    return address


def create_associated_token_account(
    payer: Address,
    associated_account: Address,
    owner: Address,
    mint: Address,
) -> Instruction:
    """Create *owner*'s associated token account for *mint*, funded by *payer*.

    Only *payer* signs; the owner's authorization is not needed to receive.
    """
    return Instruction(
        program_id=ASSOCIATED_TOKEN_PROGRAM_ID,
        accounts=(
            AccountMeta(payer, is_signer=True, is_writable=True),
            AccountMeta(associated_account, is_writable=True),
            AccountMeta(owner),
            AccountMeta(mint),
            AccountMeta(SYSTEM_PROGRAM_ID),
            AccountMeta(TOKEN_PROGRAM_ID),
        ),
        data=b"",
    )


# ---------------------------------------------------------------------------
# SPL token transfer
# ---------------------------------------------------------------------------


def create_transfer_instruction(
    source: Address,
    destination: Address,
    owner: Address,
    amount: int,
) -> Instruction:
    """SPL ``Transfer`` of *amount* base units from *source* to *destination*.

    Args:
        source: Sender's token account.
        destination: Recipient's token account.
        owner: Authority over *source*; must sign.
        amount: Amount in the token's smallest unit.
    """
    if not 0 < amount <= _U64_MAX:
        msg = f"Transfer amount out of range: {amount}"
        raise ValueError(msg)
    return Instruction(
        program_id=TOKEN_PROGRAM_ID,
        accounts=(
            AccountMeta(source, is_writable=True),
            AccountMeta(destination, is_writable=True),
            AccountMeta(owner, is_signer=True),
        ),
        data=struct.pack("<BQ", TOKEN_TRANSFER, amount),
    )
