"""MetaKeep proxy endpoints.

The API key stays server-side; callers only see MetaKeep's response.
"""

from __future__ import annotations

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends

from sponsor_transfer.api.dependencies import get_metakeep
from sponsor_transfer.api.schemas import DeveloperWalletResponse, SignRequest, WalletInfo
from sponsor_transfer.chain.metakeep.service import MetaKeepService  # noqa: TC001

router = APIRouter(tags=["metakeep"])

logger = logging.getLogger(__name__)


@router.post("/developer-wallet")
async def developer_wallet(
    metakeep: Annotated[MetaKeepService, Depends(get_metakeep)],
) -> DeveloperWalletResponse:
    """Resolve the sponsor (developer) wallet."""
    wallet = await metakeep.get_developer_wallet()
    return DeveloperWalletResponse(
        status=wallet.status,
        wallet=WalletInfo(solAddress=wallet.sol_address),
    )


@router.post("/metakeep-sign")
async def metakeep_sign(
    body: SignRequest,
    metakeep: Annotated[MetaKeepService, Depends(get_metakeep)],
) -> dict[str, Any]:
    """Forward a signing request to MetaKeep as the developer wallet."""
    logger.info("Forwarding signing request (reason=%s)", body.reason)
    return await metakeep.sign_transaction(body.model_dump(exclude_none=True))
