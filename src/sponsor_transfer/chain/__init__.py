"""Chain collaborators — Solana JSON-RPC and MetaKeep signing."""
