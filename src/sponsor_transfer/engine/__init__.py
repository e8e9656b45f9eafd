"""Engine — the sponsored-transfer pipeline."""

from sponsor_transfer.engine.accounts import AccountExistenceResolver
from sponsor_transfer.engine.balances import BalanceAggregator
from sponsor_transfer.engine.coordinator import DualSignerCoordinator, TransferAttempt
from sponsor_transfer.engine.models import (
    ParticipantBalances,
    TransferOutcome,
    TransferRequest,
    TransferState,
    WalletBalance,
    from_base_units,
    to_base_units,
)
from sponsor_transfer.engine.orchestrator import SponsoredTransferOrchestrator
from sponsor_transfer.engine.signers import MetaKeepSponsorSigner
from sponsor_transfer.engine.submission import SubmissionService

__all__ = [
    "AccountExistenceResolver",
    "BalanceAggregator",
    "DualSignerCoordinator",
    "MetaKeepSponsorSigner",
    "ParticipantBalances",
    "SponsoredTransferOrchestrator",
    "SubmissionService",
    "TransferAttempt",
    "TransferOutcome",
    "TransferRequest",
    "TransferState",
    "WalletBalance",
    "from_base_units",
    "to_base_units",
]
