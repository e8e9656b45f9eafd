"""Transaction serialisation — legacy message compilation, signature slots.

Pure-Python Solana legacy transaction format:
- Message header / compiled instruction data classes
- Account ordering: fee payer, writable signers, readonly signers,
  writable non-signers, readonly non-signers
- Binary serialize / deserialize with compact-u16 length prefixes
- Signature slots keyed by signer address, with explicit binding checks
"""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from io import BytesIO
from typing import TYPE_CHECKING

from sponsor_transfer.errors.transfer_errors import (
    IncompleteSignatures,
    MalformedEncoding,
    SignatureBindingError,
)
from sponsor_transfer.solana.address import ADDRESS_LENGTH, Address
from sponsor_transfer.solana.codec import (
    base58_decode,
    base58_encode,
    encode_compact_u16,
    read_compact_u16,
    read_exact,
)
from sponsor_transfer.utils.crypto import verify_ed25519

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sponsor_transfer.solana.instructions import Instruction

SIGNATURE_LENGTH = 64

# Network packet limit minus headers
PACKET_DATA_SIZE = 1232

_EMPTY_SIGNATURE = b"\x00" * SIGNATURE_LENGTH

# ---------------------------------------------------------------------------
# Message header
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class MessageHeader:
    """Counts describing the signer/readonly split of ``account_keys``."""

    num_required_signatures: int
    num_readonly_signed: int
    num_readonly_unsigned: int

    def serialize(self) -> bytes:
        return struct.pack(
            "<BBB",
            self.num_required_signatures,
            self.num_readonly_signed,
            self.num_readonly_unsigned,
        )

    @classmethod
    def deserialize(cls, stream: BytesIO) -> MessageHeader:
        raw = read_exact(stream, 3, "message header")
        return cls(*struct.unpack("<BBB", raw))


# ---------------------------------------------------------------------------
# Compiled instruction
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CompiledInstruction:
    """An instruction with accounts replaced by indices into ``account_keys``."""

    program_id_index: int
    account_indices: tuple[int, ...]
    data: bytes

    def serialize(self) -> bytes:
        result = struct.pack("<B", self.program_id_index)
        result += encode_compact_u16(len(self.account_indices))
        result += bytes(self.account_indices)
        result += encode_compact_u16(len(self.data))
        result += self.data
        return result

    @classmethod
    def deserialize(cls, stream: BytesIO) -> CompiledInstruction:
        program_id_index = read_exact(stream, 1, "program id index")[0]
        n_accounts = read_compact_u16(stream)
        account_indices = tuple(read_exact(stream, n_accounts, "account indices"))
        data_len = read_compact_u16(stream)
        data = read_exact(stream, data_len, "instruction data")
        return cls(
            program_id_index=program_id_index,
            account_indices=account_indices,
            data=data,
        )


# ---------------------------------------------------------------------------
# Message
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Message:
    """The signed portion of a transaction.

    Attributes:
        header: Signer/readonly counts.
        account_keys: Every account referenced, fee payer first.
        recent_blockhash: Base58 freshness token.
        instructions: Compiled instructions in caller order.
    """

    header: MessageHeader
    account_keys: tuple[Address, ...]
    recent_blockhash: str
    instructions: tuple[CompiledInstruction, ...]

    @classmethod
    def compile(
        cls,
        fee_payer: Address,
        recent_blockhash: str,
        instructions: Sequence[Instruction],
    ) -> Message:
        """Compile instructions into a message paid for by *fee_payer*."""
        _decode_blockhash(recent_blockhash)

        # address -> [is_signer, is_writable], first-seen order
        flags: dict[Address, list[bool]] = {fee_payer: [True, True]}
        for ix in instructions:
            for meta in ix.accounts:
                entry = flags.setdefault(meta.address, [False, False])
                entry[0] = entry[0] or meta.is_signer
                entry[1] = entry[1] or meta.is_writable
            flags.setdefault(ix.program_id, [False, False])

        others = [addr for addr in flags if addr != fee_payer]
        others.sort(key=lambda addr: (not flags[addr][0], not flags[addr][1], str(addr)))
        keys = (fee_payer, *others)

        signed = [addr for addr in keys if flags[addr][0]]
        header = MessageHeader(
            num_required_signatures=len(signed),
            num_readonly_signed=sum(1 for addr in signed if not flags[addr][1]),
            num_readonly_unsigned=sum(
                1 for addr in keys if not flags[addr][0] and not flags[addr][1]
            ),
        )

        index = {addr: i for i, addr in enumerate(keys)}
        compiled = tuple(
            CompiledInstruction(
                program_id_index=index[ix.program_id],
                account_indices=tuple(index[meta.address] for meta in ix.accounts),
                data=ix.data,
            )
            for ix in instructions
        )
        return cls(
            header=header,
            account_keys=keys,
            recent_blockhash=recent_blockhash,
            instructions=compiled,
        )

    @property
    def fee_payer(self) -> Address:
        return self.account_keys[0]

    @property
    def signer_keys(self) -> tuple[Address, ...]:
        """Addresses owning a signature slot, in slot order."""
        return self.account_keys[: self.header.num_required_signatures]

    def is_writable(self, index: int) -> bool:
        """Whether the account at *index* is writable under this header."""
        h = self.header
        if index < h.num_required_signatures:
            return index < h.num_required_signatures - h.num_readonly_signed
        return index < len(self.account_keys) - h.num_readonly_unsigned

    def serialize(self) -> bytes:
        """Serialize the message to the bytes every signer signs."""
        result = self.header.serialize()
        result += encode_compact_u16(len(self.account_keys))
        for key in self.account_keys:
            result += key.raw
        result += _decode_blockhash(self.recent_blockhash)
        result += encode_compact_u16(len(self.instructions))
        for ix in self.instructions:
            result += ix.serialize()
        return result

    @classmethod
    def deserialize(cls, stream: BytesIO) -> Message:
        header = MessageHeader.deserialize(stream)
        n_keys = read_compact_u16(stream)
        keys = tuple(
            Address(read_exact(stream, ADDRESS_LENGTH, "account key")) for _ in range(n_keys)
        )
        blockhash = base58_encode(read_exact(stream, 32, "recent blockhash"))
        n_ix = read_compact_u16(stream)
        instructions = tuple(CompiledInstruction.deserialize(stream) for _ in range(n_ix))
        if header.num_required_signatures > len(keys):
            msg = "Header requires more signatures than there are account keys"
            raise MalformedEncoding(msg)
        for ix in instructions:
            if ix.program_id_index >= len(keys) or any(i >= len(keys) for i in ix.account_indices):
                msg = "Instruction references an account index out of range"
                raise MalformedEncoding(msg)
        return cls(
            header=header,
            account_keys=keys,
            recent_blockhash=blockhash,
            instructions=instructions,
        )

    @classmethod
    def from_bytes(cls, data: bytes) -> Message:
        return cls.deserialize(BytesIO(data))


def _decode_blockhash(blockhash: str) -> bytes:
    raw = base58_decode(blockhash)
    if len(raw) != 32:
        msg = f"Recent blockhash must decode to 32 bytes, got {len(raw)}"
        raise MalformedEncoding(msg)
    return raw


# ---------------------------------------------------------------------------
# Transaction
# ---------------------------------------------------------------------------


@dataclass
class Transaction:
    """A message plus one signature slot per required signer.

    Slots are addressed by signer address, never by position, so a
    signature can only land in the slot belonging to the key that made it.

    Attributes:
        message: The compiled message.
        signatures: Slot contents in ``message.signer_keys`` order; ``None``
            for an empty slot.
    """

    message: Message
    signatures: list[bytes | None] = field(default_factory=list)

    def __post_init__(self) -> None:
        n_slots = self.message.header.num_required_signatures
        if not self.signatures:
            self.signatures = [None] * n_slots
        elif len(self.signatures) != n_slots:
            msg = f"Expected {n_slots} signature slots, got {len(self.signatures)}"
            raise SignatureBindingError(msg)

    # -- Accessors --

    @property
    def fee_payer(self) -> Address:
        return self.message.fee_payer

    @property
    def signers(self) -> tuple[Address, ...]:
        """Every distinct address that must sign (fee payer first)."""
        return self.message.signer_keys

    @property
    def recent_blockhash(self) -> str:
        return self.message.recent_blockhash

    def message_bytes(self) -> bytes:
        """Serialized message: exactly what each signer signs."""
        return self.message.serialize()

    def signature_for(self, address: Address) -> bytes | None:
        """Return the signature attached for *address*, if any."""
        return self.signatures[self._slot(address)]

    def missing_signers(self) -> list[Address]:
        """Required signers whose slot is still empty."""
        return [
            addr for addr, sig in zip(self.signers, self.signatures, strict=True) if sig is None
        ]

    @property
    def is_fully_signed(self) -> bool:
        return all(sig is not None for sig in self.signatures)

    @property
    def transaction_id(self) -> str | None:
        """Base58 of the fee payer's signature, which the ledger uses as the id."""
        first = self.signatures[0] if self.signatures else None
        return base58_encode(first) if first is not None else None

    # -- Signing --

    def add_signature(self, address: Address, signature: bytes, *, verify: bool = True) -> None:
        """Attach *signature* to the slot reserved for *address*.

        Args:
            address: The signer the signature claims to come from.
            signature: 64 raw signature bytes, attached unmodified.
            verify: Check the Ed25519 signature against the message first.

        Raises:
            SignatureBindingError: If *address* has no slot, the slot is
                already filled, the length is wrong, or verification fails.
        """
        slot = self._slot(address)
        if len(signature) != SIGNATURE_LENGTH:
            msg = f"Signature for {address} must be {SIGNATURE_LENGTH} bytes, got {len(signature)}"
            raise SignatureBindingError(msg)
        if self.signatures[slot] is not None:
            msg = f"Signature slot for {address} is already filled"
            raise SignatureBindingError(msg)
        if verify and not verify_ed25519(address.raw, self.message_bytes(), signature):
            msg = f"Signature does not verify for {address}"
            raise SignatureBindingError(msg)
        self.signatures[slot] = bytes(signature)

    def _slot(self, address: Address) -> int:
        try:
            return self.signers.index(address)
        except ValueError:
            msg = f"{address} is not a required signer of this transaction"
            raise SignatureBindingError(msg) from None

    # -- Wire format --

    def serialize(self, *, require_all_signatures: bool = True) -> bytes:
        """Serialize to the binary wire format.

        Raises:
            IncompleteSignatures: If a slot is empty and
                *require_all_signatures* is set.
        """
        missing = self.missing_signers()
        if missing and require_all_signatures:
            raise IncompleteSignatures([str(addr) for addr in missing])
        result = encode_compact_u16(len(self.signatures))
        for sig in self.signatures:
            result += sig if sig is not None else _EMPTY_SIGNATURE
        result += self.message_bytes()
        return result

    @classmethod
    def deserialize(cls, stream: BytesIO) -> Transaction:
        n_sigs = read_compact_u16(stream)
        raw_sigs = [read_exact(stream, SIGNATURE_LENGTH, "signature") for _ in range(n_sigs)]
        message = Message.deserialize(stream)
        if n_sigs != message.header.num_required_signatures:
            msg = (
                f"Transaction carries {n_sigs} signatures but its message requires "
                f"{message.header.num_required_signatures}"
            )
            raise MalformedEncoding(msg)
        signatures = [None if sig == _EMPTY_SIGNATURE else sig for sig in raw_sigs]
        return cls(message=message, signatures=signatures)

    @classmethod
    def from_bytes(cls, data: bytes) -> Transaction:
        return cls.deserialize(BytesIO(data))

    @property
    def size(self) -> int:
        """Wire size in bytes (empty slots counted as zero-filled)."""
        return len(self.serialize(require_all_signatures=False))


# ---------------------------------------------------------------------------
# Builder
# ---------------------------------------------------------------------------


def build(
    fee_payer: Address,
    recent_blockhash: str,
    instructions: Sequence[Instruction],
) -> Transaction:
    """Assemble an unsigned transaction.

    Instruction order is kept exactly as supplied; identical inputs give a
    byte-identical message.

    Raises:
        ValueError: If *instructions* is empty, *fee_payer* is not an Address,
            or the transaction exceeds the packet size.
    """
    if not isinstance(fee_payer, Address):
        msg = f"fee_payer must be an Address, got {type(fee_payer).__name__}"
        raise ValueError(msg)
    if not instructions:
        msg = "A transaction needs at least one instruction"
        raise ValueError(msg)
    tx = Transaction(message=Message.compile(fee_payer, recent_blockhash, instructions))
    if tx.size > PACKET_DATA_SIZE:
        msg = f"Transaction too large: {tx.size} > {PACKET_DATA_SIZE} bytes"
        raise ValueError(msg)
    return tx
