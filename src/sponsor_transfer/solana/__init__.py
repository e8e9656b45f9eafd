"""Solana primitives — codec, addresses, instructions, transactions."""
