"""Tests for the Solana JSON-RPC service — uses httpx mock transport."""

from __future__ import annotations

import base64
import json

import httpx
import pytest

from sponsor_transfer.chain.rpc.service import SolanaRPCService
from sponsor_transfer.config.settings import Commitment, RPCConfig
from sponsor_transfer.errors.transfer_errors import LedgerUnavailable, TransactionRejected

RPC_URL = "https://rpc.test.com"

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _rpc_config(**overrides) -> RPCConfig:
    defaults = {"url": RPC_URL, "commitment": Commitment.CONFIRMED, "timeout": 5}
    defaults.update(overrides)
    return RPCConfig(**defaults)


def _result(request: httpx.Request, result) -> httpx.Response:
    body = json.loads(request.content)
    return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": result})


async def _service(handler, **overrides) -> SolanaRPCService:
    rpc = SolanaRPCService(_rpc_config(**overrides))
    await rpc.connect()
    rpc._client = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url=RPC_URL)
    return rpc


# ---------------------------------------------------------------------------
# Connection lifecycle
# ---------------------------------------------------------------------------


class TestRPCServiceLifecycle:
    async def test_not_connected_by_default(self):
        rpc = SolanaRPCService(_rpc_config())
        assert rpc.is_connected is False

    async def test_connect_and_close(self):
        rpc = SolanaRPCService(_rpc_config())
        await rpc.connect()
        assert rpc.is_connected is True
        await rpc.close()
        assert rpc.is_connected is False

    async def test_not_connected_raises(self, sender):
        rpc = SolanaRPCService(_rpc_config())
        with pytest.raises(LedgerUnavailable, match="not connected"):
            await rpc.get_account_info(sender.address)


# ---------------------------------------------------------------------------
# Account lookups
# ---------------------------------------------------------------------------


class TestAccountInfo:
    async def test_absent_account_is_none(self, sender):
        def handler(request: httpx.Request):
            body = json.loads(request.content)
            assert body["method"] == "getAccountInfo"
            assert body["params"][0] == str(sender.address)
            assert body["params"][1]["commitment"] == "confirmed"
            return _result(request, {"context": {"slot": 1}, "value": None})

        rpc = await _service(handler)
        assert await rpc.get_account_info(sender.address) is None
        await rpc.close()

    async def test_existing_account(self, sender):
        def handler(request: httpx.Request):
            return _result(
                request,
                {
                    "context": {"slot": 1},
                    "value": {
                        "lamports": 2039280,
                        "owner": "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA",
                        "executable": False,
                        "space": 165,
                        "data": ["", "base64"],
                    },
                },
            )

        rpc = await _service(handler)
        info = await rpc.get_account_info(sender.address)
        assert info is not None
        assert info.lamports == 2039280
        assert info.space == 165
        await rpc.close()

    async def test_rpc_error_is_not_absence(self, sender):
        def handler(request: httpx.Request):
            return httpx.Response(
                200, json={"jsonrpc": "2.0", "id": 1, "error": {"code": -32005, "message": "busy"}}
            )

        rpc = await _service(handler)
        with pytest.raises(LedgerUnavailable, match="busy"):
            await rpc.get_account_info(sender.address)
        await rpc.close()

    async def test_http_error(self, sender):
        def handler(request: httpx.Request):
            return httpx.Response(503, text="unavailable")

        rpc = await _service(handler)
        with pytest.raises(LedgerUnavailable, match="503"):
            await rpc.get_account_info(sender.address)
        await rpc.close()

    async def test_transport_error(self, sender):
        def handler(request: httpx.Request):
            raise httpx.ConnectError("refused")

        rpc = await _service(handler)
        with pytest.raises(LedgerUnavailable, match="refused"):
            await rpc.get_account_info(sender.address)
        await rpc.close()

    async def test_invalid_json(self, sender):
        def handler(request: httpx.Request):
            return httpx.Response(200, text="<html>")

        rpc = await _service(handler)
        with pytest.raises(LedgerUnavailable, match="invalid JSON"):
            await rpc.get_account_info(sender.address)
        await rpc.close()


class TestBalances:
    async def test_native_balance(self, sender):
        def handler(request: httpx.Request):
            return _result(request, {"context": {"slot": 1}, "value": 1_500_000_000})

        rpc = await _service(handler)
        assert await rpc.get_balance(sender.address) == 1_500_000_000
        await rpc.close()

    async def test_token_accounts(self, sender, usdc_mint):
        def handler(request: httpx.Request):
            body = json.loads(request.content)
            assert body["params"][1] == {"mint": str(usdc_mint)}
            assert body["params"][2]["encoding"] == "jsonParsed"
            account = {
                "pubkey": "9WzDXwBbmkg8ZTbNMqUxvQRAyrZzDsGYdLVL9zYtAWWM",
                "account": {
                    "data": {
                        "parsed": {
                            "info": {
                                "mint": str(usdc_mint),
                                "owner": str(sender.address),
                                "tokenAmount": {"amount": "1250000", "decimals": 6},
                            }
                        }
                    }
                },
            }
            return _result(request, {"context": {"slot": 1}, "value": [account]})

        rpc = await _service(handler)
        accounts = await rpc.get_token_accounts_by_owner(sender.address, usdc_mint)
        assert len(accounts) == 1
        assert accounts[0].amount == 1_250_000
        assert accounts[0].decimals == 6
        assert accounts[0].owner == str(sender.address)
        await rpc.close()

    async def test_unparsed_token_account_is_unavailable(self, sender, usdc_mint):
        def handler(request: httpx.Request):
            account = {
                "pubkey": "9WzDXwBbmkg8ZTbNMqUxvQRAyrZzDsGYdLVL9zYtAWWM",
                "account": {"data": ["AAAA", "base64"], "lamports": 2039280},
            }
            return _result(request, {"context": {"slot": 1}, "value": [account]})

        rpc = await _service(handler)
        with pytest.raises(LedgerUnavailable, match="unexpected result"):
            await rpc.get_token_accounts_by_owner(sender.address, usdc_mint)
        await rpc.close()

    async def test_null_result_is_unavailable(self, sender, usdc_mint):
        def handler(request: httpx.Request):
            return _result(request, None)

        rpc = await _service(handler)
        with pytest.raises(LedgerUnavailable, match="unexpected result"):
            await rpc.get_token_accounts_by_owner(sender.address, usdc_mint)
        with pytest.raises(LedgerUnavailable, match="unexpected result"):
            await rpc.get_balance(sender.address)
        with pytest.raises(LedgerUnavailable, match="unexpected result"):
            await rpc.get_account_info(sender.address)
        await rpc.close()


class TestLatestBlockhash:
    async def test_blockhash(self, blockhash):
        def handler(request: httpx.Request):
            value = {"blockhash": blockhash, "lastValidBlockHeight": 150}
            return _result(request, {"context": {"slot": 1}, "value": value})

        rpc = await _service(handler)
        latest = await rpc.get_latest_blockhash()
        assert latest.blockhash == blockhash
        assert latest.last_valid_block_height == 150
        await rpc.close()

    async def test_result_without_value_is_unavailable(self):
        def handler(request: httpx.Request):
            return _result(request, {})

        rpc = await _service(handler)
        with pytest.raises(LedgerUnavailable, match="getLatestBlockhash"):
            await rpc.get_latest_blockhash()
        await rpc.close()


# ---------------------------------------------------------------------------
# Submission and status
# ---------------------------------------------------------------------------


class TestSendTransaction:
    async def test_sends_base64(self):
        def handler(request: httpx.Request):
            body = json.loads(request.content)
            assert body["method"] == "sendTransaction"
            assert base64.b64decode(body["params"][0]) == b"\x01\x02\x03"
            assert body["params"][1]["encoding"] == "base64"
            assert body["params"][1]["skipPreflight"] is False
            return _result(request, "5sig")

        rpc = await _service(handler)
        assert await rpc.send_raw_transaction(b"\x01\x02\x03") == "5sig"
        await rpc.close()

    async def test_rejected(self):
        def handler(request: httpx.Request):
            return httpx.Response(
                200,
                json={
                    "jsonrpc": "2.0",
                    "id": 1,
                    "error": {
                        "code": -32002,
                        "message": "Transaction simulation failed: Blockhash not found",
                    },
                },
            )

        rpc = await _service(handler)
        with pytest.raises(TransactionRejected, match="Blockhash not found"):
            await rpc.send_raw_transaction(b"\x00")
        await rpc.close()

    @pytest.mark.parametrize("code", [-32005, 429, -32007])
    async def test_node_errors_are_unavailable(self, code):
        def handler(request: httpx.Request):
            return httpx.Response(
                200,
                json={
                    "jsonrpc": "2.0",
                    "id": 1,
                    "error": {"code": code, "message": "Node is behind"},
                },
            )

        rpc = await _service(handler)
        with pytest.raises(LedgerUnavailable, match="Node is behind"):
            await rpc.send_raw_transaction(b"\x00")
        await rpc.close()

    async def test_rate_limited_status_is_unavailable(self):
        def handler(request: httpx.Request):
            return httpx.Response(429, text="Too many requests")

        rpc = await _service(handler)
        with pytest.raises(LedgerUnavailable, match="429"):
            await rpc.send_raw_transaction(b"\x00")
        await rpc.close()

    async def test_missing_signature_is_unavailable(self):
        def handler(request: httpx.Request):
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1})

        rpc = await _service(handler)
        with pytest.raises(LedgerUnavailable, match="no transaction signature"):
            await rpc.send_raw_transaction(b"\x00")
        await rpc.close()

    async def test_transport_error_is_unavailable(self):
        def handler(request: httpx.Request):
            raise httpx.ReadTimeout("slow")

        rpc = await _service(handler)
        with pytest.raises(LedgerUnavailable):
            await rpc.send_raw_transaction(b"\x00")
        await rpc.close()


class TestSignatureStatuses:
    async def test_statuses(self):
        def handler(request: httpx.Request):
            return _result(
                request,
                {
                    "context": {"slot": 10},
                    "value": [
                        {
                            "slot": 9,
                            "confirmations": 1,
                            "err": None,
                            "confirmationStatus": "confirmed",
                        },
                        None,
                    ],
                },
            )

        rpc = await _service(handler)
        statuses = await rpc.get_signature_statuses(["a", "b"])
        assert statuses[1] is None
        assert statuses[0] is not None
        assert statuses[0].satisfies(Commitment.CONFIRMED)
        assert not statuses[0].satisfies(Commitment.FINALIZED)
        assert not statuses[0].failed
        await rpc.close()

    async def test_failed_status(self):
        def handler(request: httpx.Request):
            status = {"slot": 9, "err": {"InstructionError": [0, {"Custom": 1}]}}
            return _result(request, {"context": {"slot": 10}, "value": [status]})

        rpc = await _service(handler)
        (status,) = await rpc.get_signature_statuses(["a"])
        assert status.failed
        assert "InstructionError" in status.error_reason
        await rpc.close()

    async def test_malformed_entry_is_unavailable(self):
        def handler(request: httpx.Request):
            return _result(request, {"context": {"slot": 10}, "value": ["confirmed"]})

        rpc = await _service(handler)
        with pytest.raises(LedgerUnavailable, match="getSignatureStatuses"):
            await rpc.get_signature_statuses(["a"])
        await rpc.close()
