"""Capability interfaces the engine depends on.

The ledger and both external signers are plain request/response
capabilities, so tests swap in doubles that simulate cancellation,
timeouts and rejections independently.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from sponsor_transfer.chain.metakeep.models import SignTransactionResponse
    from sponsor_transfer.chain.rpc.models import (
        AccountInfo,
        LatestBlockhash,
        SignatureStatus,
        TokenAccountBalance,
    )
    from sponsor_transfer.solana.address import Address


class LedgerClient(Protocol):
    """The ledger RPC surface used by a transfer attempt."""

    async def get_account_info(self, address: Address) -> AccountInfo | None: ...

    async def get_latest_blockhash(self) -> LatestBlockhash: ...

    async def get_balance(self, address: Address) -> int: ...

    async def get_token_accounts_by_owner(
        self, owner: Address, mint: Address
    ) -> list[TokenAccountBalance]: ...

    async def send_raw_transaction(self, raw_tx: bytes) -> str: ...

    async def get_signature_statuses(
        self, signatures: list[str]
    ) -> list[SignatureStatus | None]: ...


class TransactionSigner(Protocol):
    """An external signer for one party.

    Receives only the unsigned message bytes (never a partially-signed
    transaction) plus a human-readable memo, and answers with a status and
    a hex signature.
    """

    async def sign(self, message: bytes, memo: str) -> SignTransactionResponse: ...
