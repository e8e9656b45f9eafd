"""Balance endpoints — native and aggregated token balances for display."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from sponsor_transfer.api.dependencies import get_balances, get_config
from sponsor_transfer.api.schemas import BalanceRequest, BalanceResponse
from sponsor_transfer.config.settings import AppConfig  # noqa: TC001
from sponsor_transfer.engine.balances import BalanceAggregator  # noqa: TC001
from sponsor_transfer.errors.transfer_errors import TransferError
from sponsor_transfer.solana.address import Address

router = APIRouter(tags=["balances"])


def _parse_address(body: BalanceRequest) -> Address:
    if not body.address:
        msg = "Address is required"
        raise TransferError(msg, status_code=400, code="missing-address")
    return Address.from_string(body.address)


@router.post("/solana-balance")
async def solana_balance(
    body: BalanceRequest,
    balances: Annotated[BalanceAggregator, Depends(get_balances)],
) -> BalanceResponse:
    """Native SOL balance, five decimal places."""
    address = _parse_address(body)
    sol = await balances.native_balance(address)
    return BalanceResponse(balance=f"{sol:.5f}")


@router.post("/usdc-balance")
async def usdc_balance(
    body: BalanceRequest,
    balances: Annotated[BalanceAggregator, Depends(get_balances)],
    config: Annotated[AppConfig, Depends(get_config)],
) -> BalanceResponse:
    """Token balance summed across every account, two decimal places."""
    address = _parse_address(body)
    mint = Address.from_string(config.token.mint)
    total = await balances.aggregate_balance(address, mint)
    return BalanceResponse(balance=f"{total:.2f}")
