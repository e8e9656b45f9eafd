"""Sponsored transfer endpoint.

The sponsor is the MetaKeep developer wallet; mint and default amount come
from the app config.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends

from sponsor_transfer.api.dependencies import get_config, get_metakeep, get_orchestrator
from sponsor_transfer.api.schemas import TransferBody, TransferResponse
from sponsor_transfer.chain.metakeep.service import MetaKeepService  # noqa: TC001
from sponsor_transfer.config.settings import AppConfig  # noqa: TC001
from sponsor_transfer.engine.models import TransferRequest
from sponsor_transfer.engine.orchestrator import SponsoredTransferOrchestrator  # noqa: TC001
from sponsor_transfer.errors.transfer_errors import MetaKeepError

router = APIRouter(tags=["transfers"])

logger = logging.getLogger(__name__)


@router.post("/transfer")
async def transfer(
    body: TransferBody,
    config: Annotated[AppConfig, Depends(get_config)],
    metakeep: Annotated[MetaKeepService, Depends(get_metakeep)],
    orchestrator: Annotated[SponsoredTransferOrchestrator, Depends(get_orchestrator)],
) -> TransferResponse:
    """Run one sponsored transfer and wait for confirmation."""
    wallet = await metakeep.get_developer_wallet()
    if not wallet.ok:
        msg = f"Sponsor wallet lookup returned {wallet.status or 'no status'}"
        raise MetaKeepError(msg)

    amount = body.amount if body.amount is not None else config.transfer.default_amount
    request = TransferRequest.from_strings(
        sender=body.sender,
        recipient=body.recipient,
        sponsor=wallet.sol_address,
        mint=config.token.mint,
        amount=amount,
    )
    logger.info("Transfer of %s %s to %s requested", amount, config.token.symbol, body.recipient)
    outcome = await orchestrator.transfer(request)
    return TransferResponse(
        transaction_id=outcome.transaction_id,
        setup_transaction_id=outcome.setup_transaction_id,
        amount=f"{outcome.amount.normalize():f}",
        signatures=outcome.signatures,
        states=[str(state) for state in outcome.states],
    )
