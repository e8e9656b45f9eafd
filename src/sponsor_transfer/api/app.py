"""FastAPI application factory."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import generate_latest
from starlette.responses import Response

from sponsor_transfer import __version__
from sponsor_transfer.api.routes import api_router
from sponsor_transfer.chain.metakeep.service import MetaKeepService
from sponsor_transfer.chain.rpc.service import SolanaRPCService
from sponsor_transfer.config.settings import AppConfig
from sponsor_transfer.errors.transfer_errors import TransferError
from sponsor_transfer.metrics.collector import TransferMetrics

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from sponsor_transfer.engine.ports import TransactionSigner

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup / shutdown lifecycle hooks.

    Connects the RPC and MetaKeep clients on startup and closes them on exit.
    """
    config: AppConfig = app.state.config
    rpc = SolanaRPCService(config.rpc)
    metakeep = MetaKeepService(config.metakeep)

    try:
        await rpc.connect()
        await metakeep.connect()
        app.state.rpc = rpc
        app.state.metakeep = metakeep
        logger.info("Sponsor transfer service initialized (rpc=%s)", config.rpc.url)
        yield
    finally:
        await metakeep.close()
        await rpc.close()
        logger.info("Sponsor transfer service shut down")


def create_app(
    *,
    config: AppConfig | None = None,
    sender_signer: TransactionSigner | None = None,
) -> FastAPI:
    """Build and return the FastAPI application.

    Args:
        config: Optional AppConfig. If *None*, a default config is created
            from environment variables.
        sender_signer: Signer for the token owner's side of a transfer.
            Without one, /api/transfer answers 503.
    """
    if config is None:
        config = AppConfig()

    app = FastAPI(
        title="sponsor-transfer",
        version=__version__,
        description="Sponsored SPL token transfers with MetaKeep signing",
        lifespan=_lifespan,
    )

    app.state.config = config
    app.state.metrics = TransferMetrics()
    app.state.sender_signer = sender_signer

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -- Error handler --
    @app.exception_handler(TransferError)
    async def _transfer_error_handler(request: Request, exc: TransferError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content={"code": exc.code, "message": exc.message, "status": "ERROR"},
        )

    # -- Base routes --
    @app.get("/health", tags=["base"])
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/metrics", tags=["base"], include_in_schema=False)
    async def metrics_endpoint() -> Response:
        """Prometheus metrics endpoint."""
        return Response(
            content=generate_latest(app.state.metrics.registry),
            media_type="text/plain; version=0.0.4; charset=utf-8",
        )

    app.include_router(api_router)

    return app
