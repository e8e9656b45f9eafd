"""TransferError — base exception and the full failure taxonomy.

Every failure a transfer attempt can surface is a :class:`TransferError`
subclass carrying a human message, a suggested HTTP status and a stable
machine-readable code. ``retryable`` tells the caller whether restarting
the whole attempt (from a fresh blockhash) can succeed.
"""

from __future__ import annotations

from decimal import Decimal


class TransferError(Exception):
    """Base error for all sponsored-transfer operations.

    Attributes:
        message: Human-readable error description.
        status_code: Suggested HTTP status code.
        code: Machine-readable error code string.
    """

    retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        status_code: int = 500,
        code: str = "transfer-error",
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code


# -- Input / structural ----------------------------------------------------


class InvalidAddressFormat(TransferError):
    """Address text failed the Base58 shape check."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=400, code="invalid-address-format")


class MalformedEncoding(TransferError):
    """Hex/Base58/binary input could not be decoded."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=400, code="malformed-encoding")


class InvalidTransferAmount(TransferError):
    """Amount is non-positive or rounds to zero base units."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=400, code="invalid-transfer-amount")


# -- Ledger ----------------------------------------------------------------


class LedgerUnavailable(TransferError):
    """Ledger RPC could not be reached or answered with an RPC error."""

    retryable = True

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=502, code="ledger-unavailable")


class BalanceUnavailable(TransferError):
    """Balance lookup failed (distinct from a legitimately-zero balance)."""

    retryable = True

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=502, code="balance-unavailable")


class InsufficientBalance(TransferError):
    """Sender holds less than the requested amount."""

    def __init__(self, available: Decimal, required: Decimal) -> None:
        super().__init__(
            f"Insufficient balance: {available} available, {required} required",
            status_code=422,
            code="insufficient-balance",
        )
        self.available = available
        self.required = required


# -- Signing ---------------------------------------------------------------


class UserDeclined(TransferError):
    """The user cancelled the signing request. Never retried automatically."""

    def __init__(self, party: str) -> None:
        super().__init__(
            f"{party} declined to sign the transaction",
            status_code=409,
            code="user-declined",
        )
        self.party = party


class SenderSigningFailed(TransferError):
    """Sender's signer returned a non-success status or no signature."""

    retryable = True

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=502, code="sender-signing-failed")


class SponsorSigningFailed(TransferError):
    """Sponsor's signer returned a non-success status or no signature."""

    retryable = True

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=502, code="sponsor-signing-failed")


class SignerTimeout(TransferError):
    """An external signer round trip exceeded its time bound."""

    retryable = True

    def __init__(self, party: str, timeout: float) -> None:
        super().__init__(
            f"{party} signer did not respond within {timeout:g}s",
            status_code=504,
            code="signer-timeout",
        )
        self.party = party
        self.timeout = timeout


class SignatureBindingError(TransferError):
    """A signature does not belong in the slot it was offered for."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=400, code="signature-binding")


class IncompleteSignatures(TransferError):
    """Refusal to submit while required signer slots are empty."""

    def __init__(self, missing: list[str]) -> None:
        super().__init__(
            f"Transaction is missing signatures for: {', '.join(missing)}",
            status_code=400,
            code="incomplete-signatures",
        )
        self.missing = missing


# -- Submission ------------------------------------------------------------


class TransactionRejected(TransferError):
    """The ledger rejected the transaction. Rebuild from a fresh blockhash."""

    def __init__(self, reason: str, *, transaction_id: str = "") -> None:
        super().__init__(
            f"Transaction rejected: {reason}",
            status_code=422,
            code="transaction-rejected",
        )
        self.reason = reason
        self.transaction_id = transaction_id


class ConfirmationTimedOut(TransferError):
    """No terminal status within the poll bound. Re-query, don't resubmit."""

    retryable = True

    def __init__(self, transaction_id: str, timeout: float) -> None:
        super().__init__(
            f"Transaction {transaction_id} not confirmed within {timeout:g}s",
            status_code=504,
            code="confirmation-timed-out",
        )
        self.transaction_id = transaction_id
        self.timeout = timeout


# -- Internal / collaborators ----------------------------------------------


class InvalidStateTransition(TransferError):
    """A transfer attempt tried to move between non-adjacent states."""

    def __init__(self, current: str, target: str) -> None:
        super().__init__(
            f"Invalid transfer state transition: {current} -> {target}",
            status_code=500,
            code="invalid-state-transition",
        )


class MetaKeepError(TransferError):
    """Error from the MetaKeep wallet API."""

    def __init__(self, message: str, *, status_code: int = 502) -> None:
        super().__init__(message, status_code=status_code, code="metakeep-error")
