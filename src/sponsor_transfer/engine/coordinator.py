"""Dual-signer coordinator — collect sender and sponsor signatures, merge them.

A :class:`TransferAttempt` is an explicit state machine; which signatures
are attached is always derivable from its state:

    BUILT          no signatures
    SENDER_SIGNED  sender slot filled
    SPONSOR_SIGNED sponsor signature obtained, not yet attached
    MERGED         every required slot filled and verified
    SUBMITTED      handed to the ledger
    CONFIRMED      ledger reached the requested commitment
    FAILED         terminal, from any non-terminal state

Each attempt is single pass: no state is revisited and a failed attempt is
never resumed, because its blockhash may lapse.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from sponsor_transfer.engine.models import TransferState
from sponsor_transfer.errors.transfer_errors import (
    IncompleteSignatures,
    InvalidStateTransition,
    MetaKeepError,
    SenderSigningFailed,
    SignerTimeout,
    SponsorSigningFailed,
    TransferError,
    UserDeclined,
)
from sponsor_transfer.solana.codec import decode_hex

if TYPE_CHECKING:
    from sponsor_transfer.chain.metakeep.models import SignTransactionResponse
    from sponsor_transfer.engine.ports import TransactionSigner
    from sponsor_transfer.metrics.collector import TransferMetrics
    from sponsor_transfer.solana.address import Address
    from sponsor_transfer.solana.transaction import Transaction

logger = logging.getLogger(__name__)

_TRANSITIONS: dict[TransferState, frozenset[TransferState]] = {
    TransferState.BUILT: frozenset({TransferState.SENDER_SIGNED, TransferState.SPONSOR_SIGNED}),
    TransferState.SENDER_SIGNED: frozenset({TransferState.SPONSOR_SIGNED}),
    TransferState.SPONSOR_SIGNED: frozenset({TransferState.MERGED}),
    TransferState.MERGED: frozenset({TransferState.SUBMITTED}),
    TransferState.SUBMITTED: frozenset({TransferState.CONFIRMED}),
    TransferState.CONFIRMED: frozenset(),
    TransferState.FAILED: frozenset(),
}

SENDER = "sender"
SPONSOR = "sponsor"


@dataclass
class TransferAttempt:
    """One pass of a transaction through signing and submission.

    Attributes:
        transaction: The transaction being signed; only signatures change.
        sponsor: Fee payer address.
        sender: Token owner, or ``None`` for sponsor-only transactions.
        state: Current state.
        history: Every state entered, in order.
        transaction_id: Ledger id once submitted.
        error: The failure that ended the attempt, if any.
        pending_sponsor_signature: Sponsor signature held between
            SPONSOR_SIGNED and MERGED.
    """

    transaction: Transaction
    sponsor: Address
    sender: Address | None = None
    state: TransferState = TransferState.BUILT
    history: list[TransferState] = field(default_factory=lambda: [TransferState.BUILT])
    transaction_id: str | None = None
    error: TransferError | None = None
    pending_sponsor_signature: bytes | None = field(default=None, repr=False)

    @property
    def requires_sender(self) -> bool:
        return self.sender is not None and self.sender in self.transaction.signers

    def advance(self, target: TransferState) -> None:
        """Move to *target*, refusing anything but the next legal state."""
        allowed = _TRANSITIONS[self.state]
        if target not in allowed or (
            self.state == TransferState.BUILT
            and target == TransferState.SPONSOR_SIGNED
            and self.requires_sender
        ):
            raise InvalidStateTransition(self.state, target)
        logger.info("Attempt %s -> %s", self.state, target)
        self.state = target
        self.history.append(target)

    def fail(self, error: TransferError) -> None:
        """Mark the attempt FAILED, discarding any held signature."""
        if self.state.is_terminal:
            return
        logger.warning("Attempt failed in %s: %s", self.state, error.message)
        self.error = error
        self.pending_sponsor_signature = None
        self.state = TransferState.FAILED
        self.history.append(TransferState.FAILED)


class DualSignerCoordinator:
    """Obtains the sender's and the sponsor's signatures and merges them.

    Args:
        sender_signer: External signer for the token owner.
        sponsor_signer: External signer for the fee payer.
        signer_timeout: Bound, in seconds, on each signer round trip.
        verify_signatures: Verify each signature against its address
            before attaching it.
        metrics: Optional metrics sink for signer round-trip durations.
    """

    def __init__(
        self,
        sender_signer: TransactionSigner,
        sponsor_signer: TransactionSigner,
        *,
        signer_timeout: float = 120.0,
        verify_signatures: bool = True,
        metrics: TransferMetrics | None = None,
    ) -> None:
        self._sender_signer = sender_signer
        self._sponsor_signer = sponsor_signer
        self._signer_timeout = signer_timeout
        self._verify = verify_signatures
        self._metrics = metrics

    async def sign(self, attempt: TransferAttempt, *, memo: str, reason: str) -> TransferAttempt:
        """Drive *attempt* from BUILT to MERGED.

        Args:
            attempt: A freshly built attempt.
            memo: Human-readable note shown to the sender.
            reason: Sponsorship reason sent to the sponsor's signer.

        Raises:
            TransferError: Any signing failure; the attempt is FAILED first.
        """
        try:
            if attempt.requires_sender:
                await self.collect_sender_signature(attempt, memo)
            await self.collect_sponsor_signature(attempt, reason)
            self.merge(attempt)
        except TransferError as exc:
            attempt.fail(exc)
            raise
        return attempt

    async def collect_sender_signature(self, attempt: TransferAttempt, memo: str) -> None:
        """BUILT → SENDER_SIGNED: sender signs the message, slot is filled."""
        if attempt.sender is None:
            msg = "Attempt has no sender to sign"
            raise SenderSigningFailed(msg)
        message = attempt.transaction.message_bytes()
        try:
            response = await self._request(self._sender_signer, SENDER, message, memo)
        except MetaKeepError as exc:
            raise SenderSigningFailed(exc.message) from exc
        if response.sign_status.is_cancellation:
            raise UserDeclined(SENDER)
        if not response.ok:
            detail = response.message or f"status {response.status or 'missing'}"
            raise SenderSigningFailed(f"Sender signing failed: {detail}")

        signature = decode_hex(response.signature)
        attempt.transaction.add_signature(attempt.sender, signature, verify=self._verify)
        attempt.advance(TransferState.SENDER_SIGNED)

    async def collect_sponsor_signature(self, attempt: TransferAttempt, reason: str) -> None:
        """→ SPONSOR_SIGNED: sponsor signs the same unsigned message bytes."""
        message = attempt.transaction.message_bytes()
        try:
            response = await self._request(self._sponsor_signer, SPONSOR, message, reason)
        except MetaKeepError as exc:
            raise SponsorSigningFailed(exc.message) from exc
        if not response.ok:
            detail = response.message or f"status {response.status or 'missing'}"
            raise SponsorSigningFailed(f"Sponsor signing failed: {detail}")

        attempt.pending_sponsor_signature = decode_hex(response.signature)
        attempt.advance(TransferState.SPONSOR_SIGNED)

    def merge(self, attempt: TransferAttempt) -> None:
        """→ MERGED: attach the sponsor signature and check every slot is filled."""
        signature = attempt.pending_sponsor_signature
        if signature is None:
            msg = "No sponsor signature to merge"
            raise SponsorSigningFailed(msg)
        attempt.transaction.add_signature(attempt.sponsor, signature, verify=self._verify)
        attempt.pending_sponsor_signature = None
        missing = attempt.transaction.missing_signers()
        if missing:
            raise IncompleteSignatures([str(addr) for addr in missing])
        attempt.advance(TransferState.MERGED)

    async def _request(
        self,
        signer: TransactionSigner,
        party: str,
        message: bytes,
        memo: str,
    ) -> SignTransactionResponse:
        start = time.monotonic()
        try:
            return await asyncio.wait_for(signer.sign(message, memo), self._signer_timeout)
        except TimeoutError as exc:
            raise SignerTimeout(party, self._signer_timeout) from exc
        finally:
            if self._metrics is not None:
                self._metrics.observe_signer(party, time.monotonic() - start)
