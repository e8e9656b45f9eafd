"""Application entry point for the sponsor transfer glue service."""

from __future__ import annotations

import os

import uvicorn

from sponsor_transfer.config.settings import AppConfig


def main() -> None:
    """Start the HTTP server."""
    config = AppConfig()
    reload = os.getenv("SPONSOR_RELOAD", "false").lower() in ("1", "true", "yes")
    uvicorn.run(
        "sponsor_transfer.api.app:create_app",
        factory=True,
        host=config.server.host,
        port=config.server.port,
        reload=reload,
        log_level="debug" if config.debug else "info",
    )


if __name__ == "__main__":
    main()
