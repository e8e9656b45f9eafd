"""MetaKeep HTTP client — developer wallet lookup and transaction signing.

- POST /v3/getDeveloperWallet — resolve the sponsor's address
- POST /v2/app/sign/transaction — sign a serialized message as the sponsor

The API key is server-held and only ever sent as the ``x-api-key`` header.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import httpx

from sponsor_transfer.chain.metakeep.models import DeveloperWallet, SignTransactionResponse
from sponsor_transfer.errors.transfer_errors import MetaKeepError
from sponsor_transfer.solana.codec import encode_hex

if TYPE_CHECKING:
    from sponsor_transfer.config.settings import MetaKeepConfig


class MetaKeepService:
    """Async HTTP client for the MetaKeep app API.

    Usage::

        mk = MetaKeepService(config)
        await mk.connect()
        try:
            wallet = await mk.get_developer_wallet()
        finally:
            await mk.close()
    """

    def __init__(self, config: MetaKeepConfig) -> None:
        self._config = config
        self._client: httpx.AsyncClient | None = None

    async def connect(self) -> None:
        """Create the underlying HTTP client."""
        self._client = httpx.AsyncClient(
            base_url=self._config.url.rstrip("/"),
            headers={
                "accept": "application/json",
                "content-type": "application/json",
                "x-api-key": self._config.api_key.get_secret_value(),
            },
            timeout=self._config.timeout,
        )

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    @property
    def is_connected(self) -> bool:
        """Check if the HTTP client is active."""
        return self._client is not None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def get_developer_wallet(self) -> DeveloperWallet:
        """Look up the developer wallet configured as ``wallet_id``.

        Raises:
            MetaKeepError: On HTTP errors.
        """
        data = await self._post("/v3/getDeveloperWallet", {"id": self._config.wallet_id})
        return DeveloperWallet.from_dict(data)

    async def sign_transaction(self, body: dict[str, Any]) -> dict[str, Any]:
        """Forward a raw signing request body and return MetaKeep's JSON."""
        return await self._post("/v2/app/sign/transaction", body)

    async def sign_message(self, message: bytes, reason: str) -> SignTransactionResponse:
        """Sign serialized message bytes with the developer wallet.

        Only the unsigned message is sent, hex-encoded with a ``0x`` marker.
        """
        body = {
            "transactionObject": {"serializedTransactionMessage": encode_hex(message, prefix=True)},
            "reason": reason,
        }
        return SignTransactionResponse.from_dict(await self.sign_transaction(body))

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _ensure_connected(self) -> httpx.AsyncClient:
        if self._client is None:
            msg = "MetaKeep service not connected. Call connect() first."
            raise MetaKeepError(msg, status_code=500)
        return self._client

    async def _post(self, path: str, body: dict[str, Any]) -> dict[str, Any]:
        client = self._ensure_connected()
        try:
            response = await client.post(path, json=body)
        except httpx.HTTPError as exc:
            raise MetaKeepError(f"MetaKeep request to {path} failed: {exc}") from exc

        if response.status_code != 200:
            msg = f"MetaKeep {path} failed ({response.status_code}): {response.text}"
            raise MetaKeepError(msg)
        try:
            data = response.json()
        except ValueError as exc:
            raise MetaKeepError(f"MetaKeep {path} returned invalid JSON") from exc
        if not isinstance(data, dict):
            msg = f"MetaKeep {path} returned an unexpected payload"
            raise MetaKeepError(msg)
        return data
