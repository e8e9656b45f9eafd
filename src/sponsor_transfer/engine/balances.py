"""Balance aggregator — sum token accounts per owner, fan out per participant."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from sponsor_transfer.engine.models import (
    LAMPORTS_DECIMALS,
    ParticipantBalances,
    WalletBalance,
    from_base_units,
)
from sponsor_transfer.errors.transfer_errors import BalanceUnavailable, LedgerUnavailable

if TYPE_CHECKING:
    from decimal import Decimal

    from sponsor_transfer.engine.ports import LedgerClient
    from sponsor_transfer.solana.address import Address

logger = logging.getLogger(__name__)


class BalanceAggregator:
    """Reads balances for gating a transfer.

    Args:
        ledger: Ledger RPC capability.
        decimals: Decimal places of the token, used for display scaling.
    """

    def __init__(self, ledger: LedgerClient, decimals: int) -> None:
        self._ledger = ledger
        self._decimals = decimals

    async def aggregate_balance(self, owner: Address, mint: Address) -> Decimal:
        """Sum every *mint* token account of *owner*, scaled to whole tokens.

        Returns ``Decimal(0)`` when the owner holds no such accounts.

        Raises:
            BalanceUnavailable: If the ledger lookup fails.
        """
        try:
            accounts = await self._ledger.get_token_accounts_by_owner(owner, mint)
        except LedgerUnavailable as exc:
            raise BalanceUnavailable(f"Token balance lookup for {owner} failed: {exc}") from exc
        total = sum(account.amount for account in accounts)
        return from_base_units(total, self._decimals)

    async def native_balance(self, owner: Address) -> Decimal:
        """Native balance in whole SOL."""
        try:
            lamports = await self._ledger.get_balance(owner)
        except LedgerUnavailable as exc:
            raise BalanceUnavailable(f"Native balance lookup for {owner} failed: {exc}") from exc
        return from_base_units(lamports, LAMPORTS_DECIMALS)

    async def wallet_balance(self, owner: Address, mint: Address) -> WalletBalance:
        token, native = await asyncio.gather(
            self.aggregate_balance(owner, mint),
            self.native_balance(owner),
        )
        return WalletBalance(address=owner, token=token, native=native)

    async def participant_balances(
        self,
        sender: Address,
        recipient: Address,
        sponsor: Address,
        mint: Address,
    ) -> ParticipantBalances:
        """Fetch all three participants' balances concurrently.

        Raises:
            BalanceUnavailable: If any lookup fails.
        """
        sender_bal, recipient_bal, sponsor_bal = await asyncio.gather(
            self.wallet_balance(sender, mint),
            self.wallet_balance(recipient, mint),
            self.wallet_balance(sponsor, mint),
        )
        logger.debug(
            "Balances: sender=%s recipient=%s sponsor=%s",
            sender_bal.token,
            recipient_bal.token,
            sponsor_bal.token,
        )
        return ParticipantBalances(sender=sender_bal, recipient=recipient_bal, sponsor=sponsor_bal)
