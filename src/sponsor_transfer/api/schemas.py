"""API request/response Pydantic schemas for the glue endpoints."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class BalanceRequest(BaseModel):
    """Body of the balance endpoints."""

    address: str | None = None


class BalanceResponse(BaseModel):
    """Formatted balance for display."""

    status: str = "SUCCESS"
    balance: str


class WalletInfo(BaseModel):
    solAddress: str = ""  # noqa: N815 - MetaKeep field name


class DeveloperWalletResponse(BaseModel):
    """Sponsor wallet as MetaKeep reports it."""

    status: str
    wallet: WalletInfo = Field(default_factory=WalletInfo)


class SignRequest(BaseModel):
    """Signing request forwarded verbatim to MetaKeep."""

    model_config = ConfigDict(extra="allow")

    transactionObject: dict[str, Any] | None = None  # noqa: N815
    reason: str | None = None


class TransferBody(BaseModel):
    """Body of the transfer endpoint; amount is in whole tokens."""

    sender: str
    recipient: str
    amount: str | None = None


class TransferResponse(BaseModel):
    """Confirmed transfer."""

    status: str = "SUCCESS"
    transaction_id: str
    setup_transaction_id: str | None = None
    amount: str
    signatures: dict[str, str]
    states: list[str]
