"""Account existence resolver — sponsor-funded associated token accounts."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sponsor_transfer.solana.instructions import (
    create_associated_token_account,
    get_associated_token_address,
)
from sponsor_transfer.solana.transaction import Transaction, build

if TYPE_CHECKING:
    from sponsor_transfer.engine.ports import LedgerClient
    from sponsor_transfer.solana.address import Address

logger = logging.getLogger(__name__)


class AccountExistenceResolver:
    """Decides whether a recipient needs its token account created first."""

    def __init__(self, ledger: LedgerClient) -> None:
        self._ledger = ledger

    async def ensure_token_account(
        self,
        owner: Address,
        mint: Address,
        sponsor: Address,
    ) -> Transaction | None:
        """Return an unsigned setup transaction if *owner* has no token account.

        The setup transaction holds a single create-account instruction and
        is paid for and signed by *sponsor* only.

        Returns:
            ``None`` if the associated token account already exists.

        Raises:
            LedgerUnavailable: If the lookup fails. A failed lookup is never
                treated as "absent".
        """
        token_account = get_associated_token_address(owner, mint)
        info = await self._ledger.get_account_info(token_account)
        if info is not None:
            logger.debug("Token account %s exists for %s", token_account, owner)
            return None

        logger.info("Token account %s missing for %s, building setup", token_account, owner)
        latest = await self._ledger.get_latest_blockhash()
        instruction = create_associated_token_account(sponsor, token_account, owner, mint)
        return build(sponsor, latest.blockhash, [instruction])
