"""
Read-only JSON-RPC client for the shielded-pool ledger.

Wraps the view entry points of the pool contract behind ``starknet_call``
on a Starknet JSON-RPC node:

  - ``get_encrypted_balance(pk_x, pk_y)`` -> four felts
  - ``is_registered(pk_x, pk_y)``         -> bool
  - ``is_nullifier_spent(nullifier)``     -> bool
  - ``get_total_value_locked()``          -> u256

State-changing calls (register / deposit / transfer / withdraw) need an
account signature and are submitted by the wallet, not by this client;
``veil_core.calldata`` builds their argument lists.

Usage:
    async with LedgerClient("http://localhost:5050/rpc", pool_address) as ledger:
        wire = await ledger.get_balance(wallet.public_key_wire)
"""

from __future__ import annotations

import asyncio
import itertools
import logging
from typing import Any, Optional

import aiohttp
from Crypto.Hash import keccak

from veil_core.calldata import PublicKeyWire, balance_from_calldata, register_calldata, to_felt_hex
from veil_core.config import LedgerConfig
from veil_core.errors import LedgerRPCError
from veil_core.serialization import SerializedCiphertext

logger = logging.getLogger("veil.rpc")

_MASK_250 = (1 << 250) - 1


def entry_point_selector(name: str) -> int:
    """Starknet selector: Keccak-256 of the ASCII name, masked to 250 bits."""
    h = keccak.new(digest_bits=256)
    h.update(name.encode("ascii"))
    return int.from_bytes(h.digest(), "big") & _MASK_250


def _felt(value: Any) -> int:
    return int(value, 16) if isinstance(value, str) else int(value)


class LedgerClient:
    """Async view-only client; one ``aiohttp.ClientSession`` per instance."""

    def __init__(
        self,
        rpc_url: str,
        contract_address: int,
        timeout: float = 30.0,
        block_id: str = "latest",
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.rpc_url = rpc_url
        self.contract_address = contract_address
        self.timeout = timeout
        self.block_id = block_id
        self._session = session
        self._owns_session = session is None
        self._ids = itertools.count(1)

    @classmethod
    def from_config(cls, cfg: LedgerConfig) -> LedgerClient:
        if not cfg.rpc_url or not cfg.contract_address:
            raise ValueError("ledger.rpc_url and ledger.contract_address are required")
        return cls(cfg.rpc_url, _felt(cfg.contract_address), timeout=cfg.timeout)

    async def __aenter__(self) -> LedgerClient:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    async def close(self) -> None:
        if self._session is not None and self._owns_session:
            await self._session.close()
        self._session = None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            )
            self._owns_session = True
        return self._session

    # ── transport ────────────────────────────────────────────────

    async def _rpc(self, method: str, params: dict[str, Any]) -> Any:
        payload = {"jsonrpc": "2.0", "method": method, "params": params, "id": next(self._ids)}
        session = self._get_session()
        try:
            async with session.post(self.rpc_url, json=payload) as resp:
                if resp.status != 200:
                    raise LedgerRPCError(f"{method}: HTTP {resp.status}")
                body = await resp.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as exc:
            raise LedgerRPCError(f"{method}: {exc}") from exc

        if not isinstance(body, dict):
            raise LedgerRPCError(f"{method}: malformed response")
        if "error" in body:
            err = body["error"] if isinstance(body["error"], dict) else {}
            raise LedgerRPCError(
                f"{method}: {err.get('message', 'unknown error')}", code=err.get("code")
            )
        if "result" not in body:
            raise LedgerRPCError(f"{method}: response has no result")
        return body["result"]

    async def call(self, entry_point: str, calldata: list[str]) -> list[int]:
        """``starknet_call`` against the pool contract; returns the felts."""
        params = {
            "request": {
                "contract_address": to_felt_hex(self.contract_address),
                "entry_point_selector": hex(entry_point_selector(entry_point)),
                "calldata": calldata,
            },
            "block_id": self.block_id,
        }
        result = await self._rpc("starknet_call", params)
        if not isinstance(result, list):
            raise LedgerRPCError(f"{entry_point}: malformed result")
        try:
            felts = [_felt(v) for v in result]
        except (TypeError, ValueError) as exc:
            raise LedgerRPCError(f"{entry_point}: malformed result") from exc
        logger.debug("starknet_call %s -> %d felts", entry_point, len(felts))
        return felts

    # ── views ────────────────────────────────────────────────────

    async def get_balance(self, public_key: PublicKeyWire) -> SerializedCiphertext:
        felts = await self.call("get_encrypted_balance", register_calldata(public_key))
        try:
            return balance_from_calldata(felts)
        except ValueError as exc:
            raise LedgerRPCError("get_encrypted_balance: malformed result") from exc

    async def is_registered(self, public_key: PublicKeyWire) -> bool:
        felts = await self.call("is_registered", register_calldata(public_key))
        return bool(felts and felts[0])

    async def is_nullifier_spent(self, nullifier: int) -> bool:
        felts = await self.call("is_nullifier_spent", [to_felt_hex(nullifier)])
        return bool(felts and felts[0])

    async def get_total_value_locked(self) -> int:
        felts = await self.call("get_total_value_locked", [])
        if len(felts) != 2:
            raise LedgerRPCError(f"Expected a u256 (2 felts), got {len(felts)}")
        low, high = felts
        return low + (high << 128)
