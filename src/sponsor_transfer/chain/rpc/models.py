"""Solana RPC data models — account info, blockhash, signature status.

Data classes parsed from JSON-RPC ``result`` payloads.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from sponsor_transfer.config.settings import Commitment

# Ordering used to decide whether a status satisfies a requested commitment
_COMMITMENT_RANK = {
    Commitment.PROCESSED: 0,
    Commitment.CONFIRMED: 1,
    Commitment.FINALIZED: 2,
}


@dataclass(frozen=True)
class AccountInfo:
    """An on-ledger account (``getAccountInfo`` value)."""

    lamports: int
    owner: str
    executable: bool = False
    space: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AccountInfo:
        raw = data.get("data")
        space = data.get("space", 0)
        if not space and isinstance(raw, list) and raw:
            # [base64, "base64"]: 4 encoded chars per 3 bytes
            space = len(raw[0]) * 3 // 4 - raw[0].count("=")
        return cls(
            lamports=data.get("lamports", 0),
            owner=data.get("owner", ""),
            executable=data.get("executable", False),
            space=space,
        )


@dataclass(frozen=True)
class LatestBlockhash:
    """Freshness token plus the last block height it is valid for."""

    blockhash: str
    last_valid_block_height: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LatestBlockhash:
        return cls(
            blockhash=data["blockhash"],
            last_valid_block_height=data.get("lastValidBlockHeight", 0),
        )


@dataclass(frozen=True)
class SignatureStatus:
    """Status of a submitted transaction (``getSignatureStatuses`` entry).

    Attributes:
        slot: Slot the transaction was processed in.
        confirmations: Blocks since, or ``None`` once rooted.
        err: Ledger error object, ``None`` on success.
        confirmation_status: ``processed``, ``confirmed`` or ``finalized``.
    """

    slot: int = 0
    confirmations: int | None = None
    err: Any = None
    confirmation_status: str = ""

    @property
    def failed(self) -> bool:
        return self.err is not None

    @property
    def error_reason(self) -> str:
        return self.err if isinstance(self.err, str) else json.dumps(self.err)

    def satisfies(self, commitment: Commitment) -> bool:
        """Whether this status has reached *commitment* or better."""
        try:
            reached = Commitment(self.confirmation_status)
        except ValueError:
            return False
        return _COMMITMENT_RANK[reached] >= _COMMITMENT_RANK[commitment]

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SignatureStatus:
        return cls(
            slot=data.get("slot", 0),
            confirmations=data.get("confirmations"),
            err=data.get("err"),
            confirmation_status=data.get("confirmationStatus") or "",
        )


@dataclass(frozen=True)
class TokenAccountBalance:
    """One token-holding account and its raw balance (jsonParsed).

    Attributes:
        pubkey: Token account address.
        mint: Token mint address.
        owner: Owner wallet address.
        amount: Balance in base units.
        decimals: Decimal places reported by the mint.
    """

    pubkey: str
    mint: str
    owner: str
    amount: int
    decimals: int

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TokenAccountBalance:
        info = data["account"]["data"]["parsed"]["info"]
        token_amount = info["tokenAmount"]
        return cls(
            pubkey=data["pubkey"],
            mint=info.get("mint", ""),
            owner=info.get("owner", ""),
            amount=int(token_amount["amount"]),
            decimals=int(token_amount.get("decimals", 0)),
        )
