"""Error taxonomy for sponsored transfers."""

from sponsor_transfer.errors.transfer_errors import (
    BalanceUnavailable,
    ConfirmationTimedOut,
    IncompleteSignatures,
    InsufficientBalance,
    InvalidAddressFormat,
    InvalidStateTransition,
    InvalidTransferAmount,
    LedgerUnavailable,
    MalformedEncoding,
    MetaKeepError,
    SenderSigningFailed,
    SignatureBindingError,
    SignerTimeout,
    SponsorSigningFailed,
    TransactionRejected,
    TransferError,
    UserDeclined,
)

__all__ = [
    "BalanceUnavailable",
    "ConfirmationTimedOut",
    "IncompleteSignatures",
    "InsufficientBalance",
    "InvalidAddressFormat",
    "InvalidStateTransition",
    "InvalidTransferAmount",
    "LedgerUnavailable",
    "MalformedEncoding",
    "MetaKeepError",
    "SenderSigningFailed",
    "SignatureBindingError",
    "SignerTimeout",
    "SponsorSigningFailed",
    "TransactionRejected",
    "TransferError",
    "UserDeclined",
]
