"""
Shielded wallet for the Veil pool.

A ``ShieldedWallet`` wraps an ElGamal keypair and a nullifier counter and
turns the pure recipes of this package into ready-to-submit requests:

  - deposit:  new encrypted balance + public wei amount
  - transfer: both updated balances + commitment + transfer nullifier
  - withdraw: updated balance + commitment + withdraw nullifier

Amounts handed to the wallet are in encrypted balance units; the wei
amount the ledger moves is ``units * balance_scale``.

The nonce counter lives in memory only.  Callers persist
``wallet.nonce_counter`` after each submitted request and pass it back in
on the next start.  One instance is not meant to be shared across threads.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional, Sequence

from veil_core.config import VeilConfig
from veil_core.curve import GroupElement, RandomSource
from veil_core.elgamal import DEFAULT_MAX_AMOUNT, MAX_AMOUNT_CAP, decrypt
from veil_core.errors import BalanceUnavailableError
from veil_core.homomorphic import (
    compute_deposit_balance,
    compute_transfer_balances,
    compute_withdraw_balance,
)
from veil_core.keys import KeyPair, generate_keypair
from veil_core.nullifier import NullifierDomain, generate_domain_nullifier, nonce_from_counter
from veil_core.precision import BALANCE_SCALE, from_balance_units
from veil_core.proof import TransferProof, WithdrawProof, generate_transfer_proof, generate_withdraw_proof
from veil_core.serialization import (
    SerializedCiphertext,
    deserialize_ciphertext,
    deserialize_public_key,
    serialize_public_key,
)

logger = logging.getLogger("veil.wallet")


@dataclass(frozen=True)
class DepositRequest:
    amount: int  # wei
    new_balance: SerializedCiphertext

    def to_dict(self) -> dict[str, Any]:
        return {"amount": self.amount, "new_balance": self.new_balance.to_dict()}


@dataclass(frozen=True)
class TransferRequest:
    recipient_public_key: tuple[int, int]
    proof: TransferProof

    def to_dict(self) -> dict[str, Any]:
        x, y = self.recipient_public_key
        return {
            "recipient_public_key": {"x": hex(x), "y": hex(y)},
            **self.proof.to_dict(),
        }


@dataclass(frozen=True)
class WithdrawRequest:
    amount: int  # wei
    proof: WithdrawProof

    def to_dict(self) -> dict[str, Any]:
        return {"amount": self.amount, **self.proof.to_dict()}


def _as_point(public_key: Any) -> GroupElement:
    """Accept a curve point or an ``(x, y)`` wire pair (tuple or JSON list)."""
    if isinstance(public_key, Sequence) and not isinstance(public_key, (str, bytes)):
        if len(public_key) != 2:
            raise ValueError("A public key wire pair has exactly two coordinates")
        x, y = public_key
        return deserialize_public_key(int(x), int(y))
    return public_key


class ShieldedWallet:
    """Client-side view of one shielded account."""

    def __init__(
        self,
        keypair: KeyPair,
        nonce_counter: int = 0,
        rng: Optional[RandomSource] = None,
        max_amount: int = DEFAULT_MAX_AMOUNT,
        max_amount_cap: int = MAX_AMOUNT_CAP,
        balance_scale: int = BALANCE_SCALE,
    ):
        self.keypair = keypair
        self.nonce_counter = nonce_from_counter(nonce_counter)
        self.rng = rng
        self.max_amount = max_amount
        self.max_amount_cap = max_amount_cap
        self.balance_scale = balance_scale

    # ── constructors ─────────────────────────────────────────────

    @classmethod
    def create(cls, rng: Optional[RandomSource] = None, **kwargs: Any) -> ShieldedWallet:
        """Generate a fresh keypair and wrap it."""
        return cls(generate_keypair(rng), rng=rng, **kwargs)

    @classmethod
    def from_config(
        cls,
        cfg: VeilConfig,
        keypair: KeyPair,
        rng: Optional[RandomSource] = None,
    ) -> ShieldedWallet:
        return cls(
            keypair,
            nonce_counter=cfg.wallet.nonce_counter_start,
            rng=rng,
            max_amount=cfg.cipher.default_max_amount,
            max_amount_cap=cfg.cipher.max_amount_cap,
            balance_scale=cfg.wallet.balance_scale,
        )

    # ── properties ───────────────────────────────────────────────

    @property
    def public_key(self) -> GroupElement:
        return self.keypair.public_key

    @property
    def public_key_wire(self) -> tuple[int, int]:
        return serialize_public_key(self.keypair.public_key)

    # ── reads ────────────────────────────────────────────────────

    def read_balance(self, wire: Sequence[int]) -> Optional[int]:
        """Decrypt this account's balance from its ledger form, or ``None``."""
        return decrypt(
            deserialize_ciphertext(wire),
            self.keypair.private_key,
            self.max_amount,
            self.max_amount_cap,
        )

    def _spendable(self, wire: Sequence[int], balance: Optional[int]) -> int:
        if balance is not None:
            return balance
        value = self.read_balance(wire)
        if value is None:
            raise BalanceUnavailableError(
                f"Balance did not decrypt within max_amount={self.max_amount}"
            )
        return value

    def _next_nullifier(self, domain: NullifierDomain) -> int:
        return generate_domain_nullifier(
            self.keypair.private_key, nonce_from_counter(self.nonce_counter), domain
        )

    # ── requests ─────────────────────────────────────────────────

    def prepare_deposit(self, current_wire: Sequence[int], amount: int) -> DepositRequest:
        update = compute_deposit_balance(
            deserialize_ciphertext(current_wire), amount, self.public_key, self.rng
        )
        logger.debug("Prepared deposit")
        return DepositRequest(
            amount=from_balance_units(amount, self.balance_scale),
            new_balance=update.serialized,
        )

    def prepare_transfer(
        self,
        current_wire: Sequence[int],
        balance: Optional[int],
        recipient_public_key: Any,
        recipient_wire: Sequence[int],
        amount: int,
    ) -> TransferRequest:
        """
        Build a transfer to *recipient_public_key*.

        *balance* is the plaintext balance asserted in the commitment; pass
        ``None`` to decrypt it from *current_wire*.  The nonce counter only
        advances once the proof has been produced.
        """
        spendable = self._spendable(current_wire, balance)
        recipient = _as_point(recipient_public_key)
        update = compute_transfer_balances(
            deserialize_ciphertext(current_wire),
            deserialize_ciphertext(recipient_wire),
            amount,
            self.public_key,
            recipient,
            self.rng,
        )
        proof = generate_transfer_proof(
            self.keypair.private_key,
            spendable,
            amount,
            self._next_nullifier(NullifierDomain.TRANSFER),
            update.new_sender_balance,
            update.new_recipient_balance,
        )
        self.nonce_counter += 1
        logger.debug("Prepared transfer, nonce counter now %d", self.nonce_counter)
        return TransferRequest(serialize_public_key(recipient), proof)

    def prepare_withdraw(
        self,
        current_wire: Sequence[int],
        balance: Optional[int],
        amount: int,
    ) -> WithdrawRequest:
        spendable = self._spendable(current_wire, balance)
        update = compute_withdraw_balance(
            deserialize_ciphertext(current_wire), amount, self.public_key, self.rng
        )
        proof = generate_withdraw_proof(
            self.keypair.private_key,
            spendable,
            amount,
            self._next_nullifier(NullifierDomain.WITHDRAW),
            update.new_balance,
        )
        self.nonce_counter += 1
        logger.debug("Prepared withdrawal, nonce counter now %d", self.nonce_counter)
        return WithdrawRequest(from_balance_units(amount, self.balance_scale), proof)

    def __repr__(self) -> str:
        return f"ShieldedWallet({self.keypair!r}, nonce_counter={self.nonce_counter})"
