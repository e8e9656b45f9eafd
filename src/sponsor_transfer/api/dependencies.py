"""FastAPI dependency injection helpers.

Provides ``Depends()``-compatible callables for the collaborators the
lifespan stores on ``app.state``.
"""

from __future__ import annotations

from fastapi import Request

from sponsor_transfer.chain.metakeep.service import MetaKeepService  # noqa: TC001
from sponsor_transfer.chain.rpc.service import SolanaRPCService  # noqa: TC001
from sponsor_transfer.config.settings import AppConfig  # noqa: TC001
from sponsor_transfer.engine.balances import BalanceAggregator
from sponsor_transfer.engine.orchestrator import SponsoredTransferOrchestrator
from sponsor_transfer.engine.ports import TransactionSigner  # noqa: TC001
from sponsor_transfer.engine.signers import MetaKeepSponsorSigner
from sponsor_transfer.errors.transfer_errors import TransferError


def get_config(request: Request) -> AppConfig:
    """Retrieve the frozen config from ``app.state``."""
    return request.app.state.config


def get_rpc(request: Request) -> SolanaRPCService:
    """Retrieve the connected RPC service.

    Raises:
        TransferError: If the service was not initialized at startup.
    """
    rpc: SolanaRPCService | None = getattr(request.app.state, "rpc", None)
    if rpc is None:
        msg = "RPC service not initialized"
        raise TransferError(msg, status_code=503, code="service-unavailable")
    return rpc


def get_metakeep(request: Request) -> MetaKeepService:
    """Retrieve the connected MetaKeep service."""
    metakeep: MetaKeepService | None = getattr(request.app.state, "metakeep", None)
    if metakeep is None:
        msg = "MetaKeep service not initialized"
        raise TransferError(msg, status_code=503, code="service-unavailable")
    return metakeep


def get_balances(request: Request) -> BalanceAggregator:
    """Build a balance aggregator over the shared RPC service."""
    config = get_config(request)
    return BalanceAggregator(get_rpc(request), config.token.decimals)


def get_sender_signer(request: Request) -> TransactionSigner:
    """Retrieve the sender-side signer the app was created with."""
    signer: TransactionSigner | None = getattr(request.app.state, "sender_signer", None)
    if signer is None:
        msg = "No sender signer configured"
        raise TransferError(msg, status_code=503, code="sender-signer-unavailable")
    return signer


def get_orchestrator(request: Request) -> SponsoredTransferOrchestrator:
    """Build an orchestrator that signs as sponsor through MetaKeep.

    Attempts are recorded into the app-wide metrics served at ``/metrics``.
    """
    return SponsoredTransferOrchestrator(
        get_config(request),
        get_rpc(request),
        get_sender_signer(request),
        MetaKeepSponsorSigner(get_metakeep(request)),
        metrics=request.app.state.metrics,
    )
