"""MetaKeep — developer (sponsor) wallet lookup and message signing."""

from sponsor_transfer.chain.metakeep.models import (
    DeveloperWallet,
    SignStatus,
    SignTransactionResponse,
)
from sponsor_transfer.chain.metakeep.service import MetaKeepService

__all__ = ["DeveloperWallet", "MetaKeepService", "SignStatus", "SignTransactionResponse"]
