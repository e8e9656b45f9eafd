"""Sponsored transfer orchestrator — one attempt, start to finish.

Flow:
1. Convert the amount to base units and fan out balance lookups for all
   three participants; gate on the sender's token balance.
2. If the recipient has no token account, run a sponsor-only setup
   transaction through signing, submission and confirmation.
3. Build the transfer on a fresh blockhash with the sponsor as fee payer.
4. Collect sender then sponsor signatures, merge, submit, confirm.

Any failure aborts the attempt; callers restart from step 1.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sponsor_transfer.engine.accounts import AccountExistenceResolver
from sponsor_transfer.engine.balances import BalanceAggregator
from sponsor_transfer.engine.coordinator import DualSignerCoordinator, TransferAttempt
from sponsor_transfer.engine.models import (
    TransferOutcome,
    TransferRequest,
    TransferState,
    from_base_units,
    to_base_units,
)
from sponsor_transfer.engine.submission import SubmissionService
from sponsor_transfer.errors.transfer_errors import InsufficientBalance, TransferError
from sponsor_transfer.metrics.collector import OUTCOME_CONFIRMED, TransferMetrics
from sponsor_transfer.solana.instructions import (
    create_transfer_instruction,
    get_associated_token_address,
)
from sponsor_transfer.solana.transaction import build

if TYPE_CHECKING:
    from sponsor_transfer.config.settings import AppConfig
    from sponsor_transfer.engine.ports import LedgerClient, TransactionSigner
    from sponsor_transfer.solana.transaction import Transaction

logger = logging.getLogger(__name__)


class SponsoredTransferOrchestrator:
    """Runs sponsored transfers against a ledger with two external signers.

    Holds no per-attempt state; concurrent calls proceed independently and
    the ledger arbitrates duplicates.

    Usage::

        orchestrator = SponsoredTransferOrchestrator(config, rpc, sender, sponsor)
        outcome = await orchestrator.transfer(request)
    """

    def __init__(
        self,
        config: AppConfig,
        ledger: LedgerClient,
        sender_signer: TransactionSigner,
        sponsor_signer: TransactionSigner,
        *,
        metrics: TransferMetrics | None = None,
    ) -> None:
        self._config = config
        self._ledger = ledger
        self._metrics = metrics or TransferMetrics()
        self._balances = BalanceAggregator(ledger, config.token.decimals)
        self._resolver = AccountExistenceResolver(ledger)
        self._coordinator = DualSignerCoordinator(
            sender_signer,
            sponsor_signer,
            signer_timeout=config.transfer.signer_timeout,
            verify_signatures=config.transfer.verify_signatures,
            metrics=self._metrics,
        )
        self._submission = SubmissionService(
            ledger,
            commitment=config.rpc.commitment,
            timeout=config.transfer.confirmation_timeout,
            poll_interval=config.transfer.poll_interval,
        )

    @property
    def metrics(self) -> TransferMetrics:
        return self._metrics

    @property
    def balances(self) -> BalanceAggregator:
        return self._balances

    async def transfer(self, request: TransferRequest) -> TransferOutcome:
        """Execute one sponsored transfer attempt.

        Raises:
            TransferError: The subclass names the failure; nothing is retried.
        """
        with self._metrics.track_attempt():
            try:
                outcome = await self._run(request)
            except TransferError as exc:
                self._metrics.record_outcome(exc.code)
                raise
        self._metrics.record_outcome(OUTCOME_CONFIRMED)
        return outcome

    async def _run(self, request: TransferRequest) -> TransferOutcome:
        decimals = self._config.token.decimals
        base_units = to_base_units(request.amount, decimals)
        required = from_base_units(base_units, decimals)

        balances = await self._balances.participant_balances(
            request.sender, request.recipient, request.sponsor, request.mint
        )
        if balances.sender.token < required:
            raise InsufficientBalance(balances.sender.token, required)

        setup_id: str | None = None
        setup = await self._resolver.ensure_token_account(
            request.recipient, request.mint, request.sponsor
        )
        if setup is not None:
            setup_attempt = TransferAttempt(transaction=setup, sponsor=request.sponsor)
            await self._coordinator.sign(
                setup_attempt,
                memo="",
                reason=f"Create {self._config.token.symbol} token account for {request.recipient}",
            )
            setup_id = await self._submit(setup_attempt)
            self._metrics.record_setup()
            logger.info("Recipient token account created in %s", setup_id)

        transaction = await self._build_transfer(request, base_units)
        attempt = TransferAttempt(
            transaction=transaction, sponsor=request.sponsor, sender=request.sender
        )
        await self._coordinator.sign(
            attempt,
            memo=f"Transfer {request.amount} {self._config.token.symbol} to {request.recipient}",
            reason=self._config.metakeep.sponsorship_reason,
        )
        transaction_id = await self._submit(attempt)

        return TransferOutcome.from_transaction(
            attempt.transaction,
            transaction_id=transaction_id,
            states=tuple(attempt.history),
            amount=required,
            base_units=base_units,
            setup_transaction_id=setup_id,
            balances=balances,
        )

    async def _build_transfer(self, request: TransferRequest, base_units: int) -> Transaction:
        source = get_associated_token_address(request.sender, request.mint)
        destination = get_associated_token_address(request.recipient, request.mint)
        latest = await self._ledger.get_latest_blockhash()
        instruction = create_transfer_instruction(source, destination, request.sender, base_units)
        return build(request.sponsor, latest.blockhash, [instruction])

    async def _submit(self, attempt: TransferAttempt) -> str:
        """MERGED → SUBMITTED → CONFIRMED."""
        try:
            attempt.transaction_id = await self._submission.send(attempt.transaction)
            attempt.advance(TransferState.SUBMITTED)
            await self._submission.confirm(attempt.transaction_id)
            attempt.advance(TransferState.CONFIRMED)
        except TransferError as exc:
            attempt.fail(exc)
            raise
        return attempt.transaction_id
