"""Signer adapters — MetaKeep developer wallet as the fee sponsor."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from sponsor_transfer.chain.metakeep.models import SignTransactionResponse
    from sponsor_transfer.chain.metakeep.service import MetaKeepService

logger = logging.getLogger(__name__)


class MetaKeepSponsorSigner:
    """Signs serialized messages with the MetaKeep developer wallet.

    The memo passed by the coordinator is the sponsorship reason MetaKeep
    records alongside the signature.
    """

    def __init__(self, service: MetaKeepService) -> None:
        self._service = service

    async def sign(self, message: bytes, memo: str) -> SignTransactionResponse:
        logger.info("Requesting sponsor signature for %d-byte message", len(message))
        return await self._service.sign_message(message, memo)
