"""Glue API routes.

Combines all sub-routers under the ``/api`` prefix.
"""

from fastapi import APIRouter

from sponsor_transfer.api.routes.balances import router as balances_router
from sponsor_transfer.api.routes.metakeep import router as metakeep_router
from sponsor_transfer.api.routes.transfers import router as transfers_router

api_router = APIRouter(prefix="/api")

api_router.include_router(metakeep_router)
api_router.include_router(balances_router)
api_router.include_router(transfers_router)

__all__ = ["api_router"]
