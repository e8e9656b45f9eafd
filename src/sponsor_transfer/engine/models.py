"""Engine data models — transfer requests, attempt states, outcomes."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from decimal import ROUND_DOWN, Decimal, InvalidOperation
from typing import TYPE_CHECKING, Self

from sponsor_transfer.errors.transfer_errors import InvalidTransferAmount, TransferError
from sponsor_transfer.solana.address import Address
from sponsor_transfer.solana.codec import base58_encode

if TYPE_CHECKING:
    from sponsor_transfer.solana.transaction import Transaction

LAMPORTS_DECIMALS = 9

# ---------------------------------------------------------------------------
# Amount scaling
# ---------------------------------------------------------------------------


def to_base_units(amount: Decimal | str | int, decimals: int) -> int:
    """Convert a whole-token amount to integer base units, rounding down.

    Raises:
        InvalidTransferAmount: If the amount is not a positive number or
            rounds down to zero base units.
    """
    try:
        value = Decimal(str(amount))
    except InvalidOperation as exc:
        raise InvalidTransferAmount(f"Not a decimal amount: {amount!r}") from exc
    if not value.is_finite() or value <= 0:
        msg = f"Transfer amount must be positive, got {amount}"
        raise InvalidTransferAmount(msg)
    units = int((value * (Decimal(10) ** decimals)).to_integral_value(rounding=ROUND_DOWN))
    if units <= 0:
        msg = f"Amount {amount} is below the token's smallest unit"
        raise InvalidTransferAmount(msg)
    return units


def from_base_units(units: int, decimals: int) -> Decimal:
    """Convert integer base units to a whole-token Decimal (exact)."""
    return Decimal(units).scaleb(-decimals)


# ---------------------------------------------------------------------------
# Transfer request
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TransferRequest:
    """One unit of work: move *amount* of *mint* from sender to recipient.

    Attributes:
        sender: Token owner who authorizes the transfer.
        recipient: Wallet receiving the tokens.
        sponsor: Fee payer.
        mint: Token mint.
        amount: Whole-token decimal amount.
    """

    sender: Address
    recipient: Address
    sponsor: Address
    mint: Address
    amount: Decimal

    def __post_init__(self) -> None:
        if self.sender == self.sponsor:
            msg = "Sender and sponsor must be different addresses"
            raise TransferError(msg, status_code=400, code="invalid-transfer-request")

    @classmethod
    def from_strings(
        cls,
        *,
        sender: str,
        recipient: str,
        sponsor: str,
        mint: str,
        amount: Decimal | str,
    ) -> Self:
        """Parse text addresses; any off-shape address fails before network use."""
        try:
            value = Decimal(str(amount))
        except InvalidOperation as exc:
            raise InvalidTransferAmount(f"Not a decimal amount: {amount!r}") from exc
        return cls(
            sender=Address.from_string(sender),
            recipient=Address.from_string(recipient),
            sponsor=Address.from_string(sponsor),
            mint=Address.from_string(mint),
            amount=value,
        )


# ---------------------------------------------------------------------------
# Attempt states
# ---------------------------------------------------------------------------


class TransferState(enum.StrEnum):
    """Lifecycle of a single signing/submission attempt.

    Lifecycle: BUILT → SENDER_SIGNED → SPONSOR_SIGNED → MERGED → SUBMITTED
               → CONFIRMED, or FAILED from any non-terminal state.
    """

    BUILT = "BUILT"
    SENDER_SIGNED = "SENDER_SIGNED"
    SPONSOR_SIGNED = "SPONSOR_SIGNED"
    MERGED = "MERGED"
    SUBMITTED = "SUBMITTED"
    CONFIRMED = "CONFIRMED"
    FAILED = "FAILED"

    @property
    def is_terminal(self) -> bool:
        return self in (TransferState.CONFIRMED, TransferState.FAILED)


# ---------------------------------------------------------------------------
# Balances and outcome
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class WalletBalance:
    """Token and native balance of one participant."""

    address: Address
    token: Decimal
    native: Decimal


@dataclass(frozen=True)
class ParticipantBalances:
    """Balances of sender, recipient and sponsor, fetched together."""

    sender: WalletBalance
    recipient: WalletBalance
    sponsor: WalletBalance


@dataclass(frozen=True)
class TransferOutcome:
    """Terminal success of a sponsored transfer.

    Attributes:
        transaction_id: Ledger id (Base58 fee payer signature).
        signatures: Base58 signature per signer address.
        states: State history of the transfer attempt.
        setup_transaction_id: Id of the account-creation transaction, if one ran.
        amount: Whole-token amount moved.
        base_units: Amount in base units as embedded in the instruction.
    """

    transaction_id: str
    signatures: dict[str, str]
    states: tuple[TransferState, ...]
    amount: Decimal
    base_units: int
    setup_transaction_id: str | None = None
    balances: ParticipantBalances | None = field(default=None, compare=False)

    @classmethod
    def from_transaction(
        cls,
        transaction: Transaction,
        *,
        transaction_id: str,
        states: tuple[TransferState, ...],
        amount: Decimal,
        base_units: int,
        setup_transaction_id: str | None = None,
        balances: ParticipantBalances | None = None,
    ) -> TransferOutcome:
        signatures = {
            str(addr): base58_encode(sig)
            for addr, sig in zip(transaction.signers, transaction.signatures, strict=True)
            if sig is not None
        }
        return cls(
            transaction_id=transaction_id,
            signatures=signatures,
            states=states,
            amount=amount,
            base_units=base_units,
            setup_transaction_id=setup_transaction_id,
            balances=balances,
        )
