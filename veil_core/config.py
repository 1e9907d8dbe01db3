"""
TOML-based configuration for Veil clients.

Loads settings from a TOML file and/or environment variables.
Environment variables take precedence over file values.

Usage:
    from veil_core.config import load_config
    cfg = load_config("veil.toml")
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from veil_core.elgamal import DEFAULT_MAX_AMOUNT, MAX_AMOUNT_CAP
from veil_core.precision import BALANCE_SCALE


@dataclass
class CipherConfig:
    """Decryption search bounds."""
    default_max_amount: int = DEFAULT_MAX_AMOUNT
    # Hard ceiling on any bound; the BSGS table grows with its square root.
    max_amount_cap: int = MAX_AMOUNT_CAP


@dataclass
class WalletConfig:
    """Client wallet settings.

    ``nonce_counter_start`` seeds the nullifier counter when no persisted
    counter is available.  ``balance_scale`` is the number of wei per
    encrypted balance unit and must match every other client of the pool.
    """
    nonce_counter_start: int = 0
    balance_scale: int = BALANCE_SCALE


@dataclass
class LedgerConfig:
    """Pool contract and the JSON-RPC node used for read-only calls."""
    rpc_url: str = ""
    contract_address: str = ""   # hex felt
    timeout: float = 30.0


@dataclass
class LoggingConfig:
    """Logging settings."""
    level: str = "INFO"
    format: str = "human"   # "human" or "json"
    file: str | None = None


@dataclass
class VeilConfig:
    """Top-level configuration container."""
    cipher: CipherConfig = field(default_factory=CipherConfig)
    wallet: WalletConfig = field(default_factory=WalletConfig)
    ledger: LedgerConfig = field(default_factory=LedgerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def validate(self) -> None:
        if self.cipher.max_amount_cap < 0:
            raise ValueError("cipher.max_amount_cap must be non-negative")
        if not 0 <= self.cipher.default_max_amount <= self.cipher.max_amount_cap:
            raise ValueError(
                "cipher.default_max_amount must lie in [0, cipher.max_amount_cap]"
            )
        if self.wallet.nonce_counter_start < 0:
            raise ValueError("wallet.nonce_counter_start must be non-negative")
        if self.wallet.balance_scale <= 0:
            raise ValueError("wallet.balance_scale must be positive")
        if self.ledger.timeout <= 0:
            raise ValueError("ledger.timeout must be positive")


def _merge(dc: Any, raw: dict[str, Any]) -> None:
    """Merge a raw dict into a dataclass instance (in-place)."""
    for key, value in raw.items():
        key_under = key.replace("-", "_")
        if hasattr(dc, key_under):
            setattr(dc, key_under, value)


def load_config(path: str | None = None) -> VeilConfig:
    """
    Load configuration from a TOML file, then overlay environment variables.

    Env-var mapping:
        VEIL_MAX_AMOUNT      -> cipher.default_max_amount
        VEIL_MAX_AMOUNT_CAP  -> cipher.max_amount_cap
        VEIL_NONCE_START     -> wallet.nonce_counter_start
        VEIL_RPC_URL         -> ledger.rpc_url
        VEIL_POOL_ADDRESS    -> ledger.contract_address
        VEIL_LOG_LEVEL       -> logging.level
        VEIL_LOG_FMT         -> logging.format
        VEIL_LOG_FILE        -> logging.file

    Raises ``ValueError`` if the merged settings are inconsistent.
    """
    cfg = VeilConfig()

    # ── TOML file ────────────────────────────────────────────────
    if path is not None:
        p = Path(path)
        if p.exists():
            with open(p, "rb") as f:
                data = tomllib.load(f)
            for section_name, section_dc in [
                ("cipher", cfg.cipher),
                ("wallet", cfg.wallet),
                ("ledger", cfg.ledger),
                ("logging", cfg.logging),
            ]:
                if section_name in data:
                    _merge(section_dc, data[section_name])

    # ── Environment variable overrides ───────────────────────────
    if v := os.environ.get("VEIL_MAX_AMOUNT"):
        cfg.cipher.default_max_amount = int(v)
    if v := os.environ.get("VEIL_MAX_AMOUNT_CAP"):
        cfg.cipher.max_amount_cap = int(v)
    if v := os.environ.get("VEIL_NONCE_START"):
        cfg.wallet.nonce_counter_start = int(v)
    if v := os.environ.get("VEIL_RPC_URL"):
        cfg.ledger.rpc_url = v
    if v := os.environ.get("VEIL_POOL_ADDRESS"):
        cfg.ledger.contract_address = v
    if v := os.environ.get("VEIL_LOG_LEVEL"):
        cfg.logging.level = v.upper()
    if v := os.environ.get("VEIL_LOG_FMT"):
        cfg.logging.format = v
    if v := os.environ.get("VEIL_LOG_FILE"):
        cfg.logging.file = v

    cfg.validate()
    return cfg
