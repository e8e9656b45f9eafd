"""Solana RPC — account state, blockhashes, submission and status polling."""

from sponsor_transfer.chain.rpc.models import (
    AccountInfo,
    LatestBlockhash,
    SignatureStatus,
    TokenAccountBalance,
)
from sponsor_transfer.chain.rpc.service import SolanaRPCService

__all__ = [
    "AccountInfo",
    "LatestBlockhash",
    "SignatureStatus",
    "SolanaRPCService",
    "TokenAccountBalance",
]
