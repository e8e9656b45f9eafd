"""MetaKeep data models — wallet lookup and signing responses."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any


class SignStatus(enum.StrEnum):
    """Status codes returned by MetaKeep wallet and signing calls."""

    SUCCESS = "SUCCESS"
    OPERATION_CANCELLED = "OPERATION_CANCELLED"
    USER_REQUEST_DENIED = "USER_REQUEST_DENIED"
    USER_CONSENT_DENIED = "USER_CONSENT_DENIED"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def from_string(cls, value: str | None) -> SignStatus:
        """Parse a status string, returning UNKNOWN for unrecognised values."""
        try:
            return cls(value or "")
        except ValueError:
            return cls.UNKNOWN

    @property
    def is_cancellation(self) -> bool:
        """Whether the user actively backed out of the request."""
        return self in (
            SignStatus.OPERATION_CANCELLED,
            SignStatus.USER_REQUEST_DENIED,
            SignStatus.USER_CONSENT_DENIED,
        )


@dataclass(frozen=True)
class DeveloperWallet:
    """The developer wallet that sponsors fees.

    Attributes:
        status: Raw status string.
        sol_address: Base58 Solana address, empty if absent.
    """

    status: str = ""
    sol_address: str = ""

    @property
    def ok(self) -> bool:
        return self.status == SignStatus.SUCCESS and bool(self.sol_address)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DeveloperWallet:
        wallet = data.get("wallet") or {}
        return cls(status=data.get("status", ""), sol_address=wallet.get("solAddress", ""))

    def to_dict(self) -> dict[str, Any]:
        return {"status": self.status, "wallet": {"solAddress": self.sol_address}}


@dataclass(frozen=True)
class SignTransactionResponse:
    """Result of a signing request.

    Attributes:
        status: Raw status string.
        signature: Hex signature (``0x``-prefixed as MetaKeep returns it).
        message: Error detail, if any.
    """

    status: str = ""
    signature: str = ""
    message: str = ""

    @property
    def sign_status(self) -> SignStatus:
        return SignStatus.from_string(self.status)

    @property
    def ok(self) -> bool:
        return self.sign_status == SignStatus.SUCCESS and bool(self.signature)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SignTransactionResponse:
        return cls(
            status=data.get("status", ""),
            signature=data.get("signature") or "",
            message=data.get("message") or "",
        )
