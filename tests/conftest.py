"""Shared test fixtures: Ed25519 wallets, an in-memory ledger, scripted signers."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from decimal import Decimal

import pytest
from ecdsa import Ed25519, SigningKey

from sponsor_transfer.chain.metakeep.models import SignTransactionResponse
from sponsor_transfer.chain.rpc.models import (
    AccountInfo,
    LatestBlockhash,
    SignatureStatus,
    TokenAccountBalance,
)
from sponsor_transfer.config.settings import AppConfig, TokenConfig, TransferConfig
from sponsor_transfer.errors.transfer_errors import LedgerUnavailable, TransactionRejected
from sponsor_transfer.solana.address import Address
from sponsor_transfer.solana.codec import base58_encode
from sponsor_transfer.solana.instructions import (
    ASSOCIATED_TOKEN_PROGRAM_ID,
    TOKEN_PROGRAM_ID,
    get_associated_token_address,
)
from sponsor_transfer.solana.transaction import Transaction

USDC_MINT = Address.from_string("4zMMC9srt5Ri5X14GAgXhaHii3GnPAEERYPJgZJDncDU")
BLOCKHASH = base58_encode(bytes(range(1, 33)))

# ---------------------------------------------------------------------------
# Wallets
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Wallet:
    """A deterministic Ed25519 keypair."""

    key: SigningKey

    @classmethod
    def from_seed(cls, seed: int) -> Wallet:
        return cls(SigningKey.from_string(bytes([seed]) * 32, curve=Ed25519))

    @property
    def address(self) -> Address:
        return Address(bytes(self.key.get_verifying_key().to_string()))

    def sign(self, message: bytes) -> bytes:
        return self.key.sign(message)


@pytest.fixture
def usdc_mint() -> Address:
    return USDC_MINT


@pytest.fixture
def blockhash() -> str:
    return BLOCKHASH


@pytest.fixture
def sender() -> Wallet:
    return Wallet.from_seed(1)


@pytest.fixture
def recipient() -> Wallet:
    return Wallet.from_seed(2)


@pytest.fixture
def sponsor() -> Wallet:
    return Wallet.from_seed(3)


# ---------------------------------------------------------------------------
# In-memory ledger
# ---------------------------------------------------------------------------


class FakeLedger:
    """Ledger double: accounts, token balances, submissions and statuses.

    Submitted create-account transactions make the account exist, so a
    follow-up transfer sees the recipient's token account.
    """

    def __init__(self) -> None:
        self.existing: set[Address] = set()
        self.token_accounts: dict[Address, list[TokenAccountBalance]] = {}
        self.native: dict[Address, int] = {}
        self.blockhash = BLOCKHASH
        self.calls: list[str] = []
        self.sent: list[Transaction] = []
        self.account_info_error: bool = False
        self.balance_error: bool = False
        self.send_rejection: str | None = None
        self.status_error: object = None
        self.confirm: bool = True

    def give_tokens(self, owner: Address, amount: int, mint: Address = USDC_MINT) -> Address:
        """Credit a token account of *owner*; returns its address."""
        accounts = self.token_accounts.setdefault(owner, [])
        pubkey = get_associated_token_address(owner, mint) if not accounts else Address(
            bytes([len(accounts)]) * 32
        )
        accounts.append(
            TokenAccountBalance(
                pubkey=str(pubkey),
                mint=str(mint),
                owner=str(owner),
                amount=amount,
                decimals=6,
            )
        )
        self.existing.add(pubkey)
        return pubkey

    async def get_account_info(self, address: Address) -> AccountInfo | None:
        self.calls.append("getAccountInfo")
        if self.account_info_error:
            raise LedgerUnavailable("node unreachable")
        if address in self.existing:
            return AccountInfo(lamports=2039280, owner=str(TOKEN_PROGRAM_ID), space=165)
        return None

    async def get_latest_blockhash(self) -> LatestBlockhash:
        self.calls.append("getLatestBlockhash")
        return LatestBlockhash(blockhash=self.blockhash, last_valid_block_height=100)

    async def get_balance(self, address: Address) -> int:
        self.calls.append("getBalance")
        if self.balance_error:
            raise LedgerUnavailable("node unreachable")
        return self.native.get(address, 0)

    async def get_token_accounts_by_owner(
        self, owner: Address, mint: Address
    ) -> list[TokenAccountBalance]:
        self.calls.append("getTokenAccountsByOwner")
        if self.balance_error:
            raise LedgerUnavailable("node unreachable")
        return [a for a in self.token_accounts.get(owner, []) if a.mint == str(mint)]

    async def send_raw_transaction(self, raw_tx: bytes) -> str:
        self.calls.append("sendTransaction")
        if self.send_rejection is not None:
            raise TransactionRejected(self.send_rejection)
        tx = Transaction.from_bytes(raw_tx)
        self.sent.append(tx)
        keys = tx.message.account_keys
        for ix in tx.message.instructions:
            if keys[ix.program_id_index] == ASSOCIATED_TOKEN_PROGRAM_ID:
                self.existing.add(keys[ix.account_indices[1]])
        return tx.transaction_id

    async def get_signature_statuses(self, signatures: list[str]) -> list[SignatureStatus | None]:
        self.calls.append("getSignatureStatuses")
        if self.status_error is not None:
            return [SignatureStatus(slot=5, err=self.status_error, confirmation_status="processed")]
        if not self.confirm:
            return [None for _ in signatures]
        return [SignatureStatus(slot=5, confirmation_status="confirmed") for _ in signatures]


@pytest.fixture
def ledger() -> FakeLedger:
    return FakeLedger()


# ---------------------------------------------------------------------------
# Scripted signers
# ---------------------------------------------------------------------------


@dataclass
class FakeSigner:
    """External signer double that records what it was asked to sign."""

    wallet: Wallet
    status: str = "SUCCESS"
    delay: float = 0.0
    signature_override: str | None = None
    requests: list[tuple[bytes, str]] = field(default_factory=list)

    async def sign(self, message: bytes, memo: str) -> SignTransactionResponse:
        self.requests.append((message, memo))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.status != "SUCCESS":
            return SignTransactionResponse(status=self.status, message=f"signer said {self.status}")
        signature = self.signature_override
        if signature is None:
            signature = "0x" + self.wallet.sign(message).hex()
        return SignTransactionResponse(status="SUCCESS", signature=signature)


@pytest.fixture
def sender_signer(sender: Wallet) -> FakeSigner:
    return FakeSigner(sender)


@pytest.fixture
def sponsor_signer(sponsor: Wallet) -> FakeSigner:
    return FakeSigner(sponsor)


# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------


@pytest.fixture
def app_config() -> AppConfig:
    """A config with short bounds so timeout paths finish quickly."""
    return AppConfig(
        token=TokenConfig(mint=str(USDC_MINT), decimals=6, symbol="USDC"),
        transfer=TransferConfig(
            default_amount=Decimal("0.01"),
            signer_timeout=0.5,
            confirmation_timeout=0.2,
            poll_interval=0.01,
        ),
    )
