"""Application settings loaded from environment variables and config files.

Configuration is loaded from (highest priority first):
1. Environment variables (prefix: ``SPONSOR_``, nested via ``__``)
2. YAML config file (``config_path`` or ``SPONSOR_CONFIG_PATH`` env var)
3. Defaults defined here

Every settings model is frozen: an :class:`AppConfig` is captured once and
handed to the orchestrator, so tests inject fixtures without touching the
process environment.
"""

from __future__ import annotations

import enum
from decimal import Decimal
from pathlib import Path
from typing import Any, Self

import yaml
from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# ---------------------------------------------------------------------------
# Enums for validated choices
# ---------------------------------------------------------------------------


class Commitment(enum.StrEnum):
    """Ledger commitment level used for reads and confirmation."""

    PROCESSED = "processed"
    CONFIRMED = "confirmed"
    FINALIZED = "finalized"


# ---------------------------------------------------------------------------
# Sub-config models
# ---------------------------------------------------------------------------


class ServerConfig(BaseSettings):
    """HTTP glue server settings."""

    model_config = SettingsConfigDict(
        env_prefix="SPONSOR_SERVER__",
        case_sensitive=False,
        frozen=True,
    )

    host: str = "0.0.0.0"  # noqa: S104
    port: int = 3000


class RPCConfig(BaseSettings):
    """Solana JSON-RPC settings."""

    model_config = SettingsConfigDict(
        env_prefix="SPONSOR_RPC__",
        case_sensitive=False,
        frozen=True,
    )

    url: str = "https://api.devnet.solana.com"
    commitment: Commitment = Commitment.CONFIRMED
    timeout: float = 30.0
    skip_preflight: bool = False


class TokenConfig(BaseSettings):
    """The SPL token being transferred."""

    model_config = SettingsConfigDict(
        env_prefix="SPONSOR_TOKEN__",
        case_sensitive=False,
        frozen=True,
    )

    mint: str = "4zMMC9srt5Ri5X14GAgXhaHii3GnPAEERYPJgZJDncDU"
    decimals: int = Field(default=6, ge=0, le=18)
    symbol: str = "USDC"


class MetaKeepConfig(BaseSettings):
    """MetaKeep developer-wallet API settings."""

    model_config = SettingsConfigDict(
        env_prefix="SPONSOR_METAKEEP__",
        case_sensitive=False,
        frozen=True,
    )

    url: str = "https://api.metakeep.xyz"
    api_key: SecretStr = SecretStr("")
    wallet_id: str = "master"
    sponsorship_reason: str = "Developer gas sponsorship for USDC transfer"
    timeout: float = 30.0


class TransferConfig(BaseSettings):
    """Transfer attempt bounds and defaults."""

    model_config = SettingsConfigDict(
        env_prefix="SPONSOR_TRANSFER__",
        case_sensitive=False,
        frozen=True,
    )

    default_amount: Decimal = Decimal("0.01")
    signer_timeout: float = Field(default=120.0, gt=0)
    confirmation_timeout: float = Field(default=60.0, gt=0)
    poll_interval: float = Field(default=1.0, gt=0)
    verify_signatures: bool = True


# ---------------------------------------------------------------------------
# Top-level config
# ---------------------------------------------------------------------------


def _load_yaml(path: str | Path) -> dict[str, Any]:
    """Load a YAML configuration file and return its contents as a dict.

    Returns an empty dict if the file doesn't exist or is empty.
    """
    p = Path(path)
    if not p.exists():
        return {}
    text = p.read_text(encoding="utf-8")
    data = yaml.safe_load(text)
    return data if isinstance(data, dict) else {}


class AppConfig(BaseSettings):
    """Top-level application configuration.

    Loads settings from environment variables (``SPONSOR_`` prefix),
    an optional YAML file, and built-in defaults.
    """

    model_config = SettingsConfigDict(
        env_prefix="SPONSOR_",
        env_nested_delimiter="__",
        case_sensitive=False,
        frozen=True,
    )

    debug: bool = False
    config_path: str = ""

    server: ServerConfig = Field(default_factory=ServerConfig)
    rpc: RPCConfig = Field(default_factory=RPCConfig)
    token: TokenConfig = Field(default_factory=TokenConfig)
    metakeep: MetaKeepConfig = Field(default_factory=MetaKeepConfig)
    transfer: TransferConfig = Field(default_factory=TransferConfig)

    @model_validator(mode="before")
    @classmethod
    def _merge_yaml(cls, values: dict[str, Any]) -> dict[str, Any]:
        """Merge YAML config file contents under the env var overrides."""
        config_path = values.get("config_path", "")
        if not config_path:
            return values
        yaml_data = _load_yaml(config_path)
        # YAML values serve as defaults; env vars (already in *values*) win.
        for key, val in yaml_data.items():
            if key not in values or values[key] is None:
                values[key] = val
            elif isinstance(val, dict) and isinstance(values.get(key), dict):
                values[key] = {**val, **values[key]}
        return values

    @classmethod
    def from_yaml(cls, path: str | Path) -> Self:
        """Construct ``AppConfig`` loading defaults from a YAML file.

        Environment variables still override YAML values.
        """
        return cls(config_path=str(path))
