"""Solana JSON-RPC client — account lookups, submission, status polling.

Async HTTP client for the Solana JSON-RPC API:
- getAccountInfo / getBalance / getTokenAccountsByOwner
- getLatestBlockhash
- sendTransaction (base64 wire bytes)
- getSignatureStatuses
"""

from __future__ import annotations

import base64
import itertools
import logging
from typing import TYPE_CHECKING, Any

import httpx

from sponsor_transfer.chain.rpc.models import (
    AccountInfo,
    LatestBlockhash,
    SignatureStatus,
    TokenAccountBalance,
)
from sponsor_transfer.errors.transfer_errors import LedgerUnavailable, TransactionRejected

if TYPE_CHECKING:
    from sponsor_transfer.config.settings import RPCConfig
    from sponsor_transfer.solana.address import Address

logger = logging.getLogger(__name__)

# sendTransaction error codes that refuse the transaction itself.
# Other codes (rate limits, node unhealthy) describe the node.
REJECTION_CODES = frozenset({-32002, -32003, -32013, -32015, -32602})

_MALFORMED = (AttributeError, KeyError, TypeError, ValueError)


class SolanaRPCService:
    """Async JSON-RPC client for a Solana node.

    Usage::

        rpc = SolanaRPCService(config)
        await rpc.connect()
        try:
            info = await rpc.get_account_info(address)
        finally:
            await rpc.close()
    """

    def __init__(self, config: RPCConfig) -> None:
        """Initialize the RPC service.

        Args:
            config: RPC configuration (url, commitment, timeout).
        """
        self._config = config
        self._client: httpx.AsyncClient | None = None
        self._ids = itertools.count(1)

    async def connect(self) -> None:
        """Create the underlying HTTP client."""
        self._client = httpx.AsyncClient(
            base_url=self._config.url,
            headers={"Content-Type": "application/json"},
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

    @property
    def commitment(self) -> str:
        return self._config.commitment.value

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def get_account_info(self, address: Address) -> AccountInfo | None:
        """Fetch an account, returning ``None`` when it does not exist.

        Raises:
            LedgerUnavailable: On transport or RPC errors, or a reply that
                cannot be read (never conflated with absence).
        """
        method = "getAccountInfo"
        result = await self._call(
            method, [str(address), {"encoding": "base64", "commitment": self.commitment}]
        )
        try:
            value = result["value"]
            return AccountInfo.from_dict(value) if value is not None else None
        except _MALFORMED as exc:
            raise _unexpected_reply(method, exc) from exc

    async def get_latest_blockhash(self) -> LatestBlockhash:
        """Fetch a fresh blockhash to bind a new transaction to."""
        method = "getLatestBlockhash"
        result = await self._call(method, [{"commitment": self.commitment}])
        try:
            return LatestBlockhash.from_dict(result["value"])
        except _MALFORMED as exc:
            raise _unexpected_reply(method, exc) from exc

    async def get_balance(self, address: Address) -> int:
        """Native balance in lamports."""
        method = "getBalance"
        result = await self._call(method, [str(address), {"commitment": self.commitment}])
        try:
            return int(result["value"])
        except _MALFORMED as exc:
            raise _unexpected_reply(method, exc) from exc

    async def get_token_accounts_by_owner(
        self, owner: Address, mint: Address
    ) -> list[TokenAccountBalance]:
        """Every token account *owner* holds for *mint*."""
        method = "getTokenAccountsByOwner"
        result = await self._call(
            method,
            [
                str(owner),
                {"mint": str(mint)},
                {"encoding": "jsonParsed", "commitment": self.commitment},
            ],
        )
        try:
            return [TokenAccountBalance.from_dict(item) for item in result["value"] or []]
        except _MALFORMED as exc:
            raise _unexpected_reply(method, exc) from exc

    async def send_raw_transaction(self, raw_tx: bytes) -> str:
        """Submit fully signed wire bytes.

        Returns:
            The transaction signature (Base58) the node assigned.

        Raises:
            TransactionRejected: If the node refuses the transaction itself
                (preflight or simulation failure, bad signatures, ...).
            LedgerUnavailable: On transport errors, node-level errors such as
                rate limits or an unhealthy node, or an unreadable reply.
        """
        method = "sendTransaction"
        params = [
            base64.b64encode(raw_tx).decode("ascii"),
            {
                "encoding": "base64",
                "skipPreflight": self._config.skip_preflight,
                "preflightCommitment": self.commitment,
            },
        ]
        body = await self._post(method, params)
        error = body.get("error")
        if error is not None:
            code = error.get("code") if isinstance(error, dict) else None
            reason = error.get("message", str(error)) if isinstance(error, dict) else str(error)
            if code in REJECTION_CODES:
                raise TransactionRejected(reason)
            logger.warning("RPC %s returned error %s: %s", method, code, reason)
            raise LedgerUnavailable(f"RPC {method} error: {reason}")
        result = body.get("result")
        if not isinstance(result, str) or not result:
            raise LedgerUnavailable(f"RPC {method} returned no transaction signature")
        return result

    async def get_signature_statuses(self, signatures: list[str]) -> list[SignatureStatus | None]:
        """Look up statuses; ``None`` entries are not yet known to the node."""
        method = "getSignatureStatuses"
        result = await self._call(method, [signatures, {"searchTransactionHistory": False}])
        try:
            return [
                SignatureStatus.from_dict(item) if item is not None else None
                for item in result["value"] or []
            ]
        except _MALFORMED as exc:
            raise _unexpected_reply(method, exc) from exc

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _ensure_connected(self) -> httpx.AsyncClient:
        """Return the HTTP client, raising if not connected."""
        if self._client is None:
            msg = "RPC service not connected. Call connect() first."
            raise LedgerUnavailable(msg)
        return self._client

    async def _post(self, method: str, params: list[Any]) -> dict[str, Any]:
        """POST one JSON-RPC request and return the decoded envelope."""
        client = self._ensure_connected()
        payload = {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": params}
        try:
            response = await client.post("", json=payload)
        except httpx.HTTPError as exc:
            raise LedgerUnavailable(f"RPC {method} failed: {exc}") from exc

        if response.status_code != 200:
            msg = f"RPC {method} failed with status {response.status_code}"
            raise LedgerUnavailable(msg)
        try:
            body = response.json()
        except ValueError as exc:
            raise LedgerUnavailable(f"RPC {method} returned invalid JSON") from exc
        if not isinstance(body, dict):
            msg = f"RPC {method} returned an unexpected payload"
            raise LedgerUnavailable(msg)
        return body

    async def _call(self, method: str, params: list[Any]) -> Any:
        """Call *method*, returning ``result`` or raising on an RPC error."""
        body = await self._post(method, params)
        error = body.get("error")
        if error is not None:
            message = (
                error.get("message", "Unknown RPC error") if isinstance(error, dict) else error
            )
            logger.warning("RPC %s returned error: %s", method, message)
            raise LedgerUnavailable(f"RPC {method} error: {message}")
        if "result" not in body:
            msg = f"RPC {method} response has no result"
            raise LedgerUnavailable(msg)
        return body["result"]


def _unexpected_reply(method: str, exc: Exception) -> LedgerUnavailable:
    """Wrap a reply that does not have the documented shape."""
    logger.warning("RPC %s returned an unexpected result: %r", method, exc)
    return LedgerUnavailable(f"RPC {method} returned an unexpected result")
