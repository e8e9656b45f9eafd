"""Submission and confirmation — send wire bytes, poll to a terminal status."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING

from sponsor_transfer.config.settings import Commitment
from sponsor_transfer.errors.transfer_errors import (
    ConfirmationTimedOut,
    IncompleteSignatures,
    LedgerUnavailable,
    TransactionRejected,
)

if TYPE_CHECKING:
    from sponsor_transfer.chain.rpc.models import SignatureStatus
    from sponsor_transfer.engine.ports import LedgerClient
    from sponsor_transfer.solana.transaction import Transaction

logger = logging.getLogger(__name__)


class SubmissionService:
    """Submits fully signed transactions and waits for confirmation.

    Nothing is resubmitted: a rejection is final for the transaction, and
    a timeout means "unknown", so callers re-query rather than resend.
    """

    def __init__(
        self,
        ledger: LedgerClient,
        *,
        commitment: Commitment = Commitment.CONFIRMED,
        timeout: float = 60.0,
        poll_interval: float = 1.0,
    ) -> None:
        self._ledger = ledger
        self._commitment = commitment
        self._timeout = timeout
        self._poll_interval = poll_interval

    async def submit(self, transaction: Transaction) -> str:
        """Send *transaction* and wait for it to confirm.

        Returns:
            The ledger transaction id.

        Raises:
            IncompleteSignatures: Before any network call, if a slot is empty.
            TransactionRejected: If the ledger refuses or fails the transaction.
            ConfirmationTimedOut: If no terminal status arrives in time.
        """
        transaction_id = await self.send(transaction)
        await self.confirm(transaction_id)
        return transaction_id

    async def send(self, transaction: Transaction) -> str:
        """Serialize and submit; returns the id without waiting."""
        missing = transaction.missing_signers()
        if missing:
            raise IncompleteSignatures([str(addr) for addr in missing])
        transaction_id = await self._ledger.send_raw_transaction(transaction.serialize())
        logger.info("Submitted transaction %s", transaction_id)
        return transaction_id

    async def confirm(self, transaction_id: str) -> SignatureStatus:
        """Poll until *transaction_id* reaches the commitment or fails.

        Transient lookup errors are logged and polling continues until the
        deadline. Each poll is itself bounded by the time left.
        """
        deadline = time.monotonic() + self._timeout
        while True:
            remaining = max(deadline - time.monotonic(), 0.0)
            try:
                statuses = await asyncio.wait_for(
                    self._ledger.get_signature_statuses([transaction_id]), remaining
                )
            except TimeoutError as exc:
                logger.warning("Status poll for %s outlived the deadline", transaction_id)
                raise ConfirmationTimedOut(transaction_id, self._timeout) from exc
            except LedgerUnavailable as exc:
                logger.warning("Status poll for %s failed: %s", transaction_id, exc.message)
                statuses = []

            status = statuses[0] if statuses else None
            if status is not None:
                if status.failed:
                    logger.warning("Transaction %s failed: %s", transaction_id, status.error_reason)
                    raise TransactionRejected(status.error_reason, transaction_id=transaction_id)
                if status.satisfies(self._commitment):
                    logger.info(
                        "Transaction %s reached %s", transaction_id, status.confirmation_status
                    )
                    return status

            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise ConfirmationTimedOut(transaction_id, self._timeout)
            await asyncio.sleep(min(self._poll_interval, remaining))
