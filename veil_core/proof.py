"""
Commitment builder for confidential transfers and withdrawals.

Each payload carries a hash commitment

    proof_hash = H(H(H(sk, balance), amount), nullifier)

binding the caller's key, the claimed plaintext balance, the amount and
the nullifier, together with the serialized updated ciphertext(s).

This is a commitment, not a zero-knowledge proof.  Nothing here links
``balance`` to the ciphertext actually stored on the ledger, so a caller
can assert any balance it likes.  Closing that gap needs a succinct
proof of "knows sk with decrypt(ct, sk) = balance and balance >= amount",
which is a separate component.

Both builders are all-or-nothing: either every precondition holds and a
payload is returned, or an exception is raised and nothing is emitted.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from veil_core.curve import compress
from veil_core.elgamal import Ciphertext
from veil_core.errors import AmountNotPositiveError, InsufficientBalanceError
from veil_core.keys import validate_private_key
from veil_core.serialization import SerializedCiphertext, serialize_ciphertext

logger = logging.getLogger("veil.proof")


@dataclass(frozen=True)
class TransferProof:
    proof_hash: int
    nullifier: int
    sender_new_balance: SerializedCiphertext
    recipient_new_balance: SerializedCiphertext

    def to_dict(self) -> dict[str, Any]:
        return {
            "proof_hash": hex(self.proof_hash),
            "nullifier": hex(self.nullifier),
            "sender_new_balance": self.sender_new_balance.to_dict(),
            "recipient_new_balance": self.recipient_new_balance.to_dict(),
        }


@dataclass(frozen=True)
class WithdrawProof:
    proof_hash: int
    nullifier: int
    new_balance: SerializedCiphertext

    def to_dict(self) -> dict[str, Any]:
        return {
            "proof_hash": hex(self.proof_hash),
            "nullifier": hex(self.nullifier),
            "new_balance": self.new_balance.to_dict(),
        }


def _check_spend(balance: int, amount: int) -> None:
    if amount <= 0:
        raise AmountNotPositiveError("Amount must be positive")
    if balance < amount:
        logger.debug("Spend rejected: asserted balance below amount")
        raise InsufficientBalanceError(balance, amount)


def compute_proof_hash(private_key: int, balance: int, amount: int, nullifier: int) -> int:
    h1 = compress(validate_private_key(private_key), balance)
    h2 = compress(h1, amount)
    return compress(h2, nullifier)


def generate_transfer_proof(
    sender_private_key: int,
    sender_balance: int,
    amount: int,
    nullifier: int,
    new_sender_balance: Ciphertext,
    new_recipient_balance: Ciphertext,
) -> TransferProof:
    """
    Authorise a transfer of *amount* out of a sender balance.

    ``sender_balance`` is the plaintext balance as asserted by the caller;
    it is not re-derived from any ciphertext.
    """
    _check_spend(sender_balance, amount)
    proof_hash = compute_proof_hash(sender_private_key, sender_balance, amount, nullifier)
    return TransferProof(
        proof_hash=proof_hash,
        nullifier=nullifier,
        sender_new_balance=serialize_ciphertext(new_sender_balance),
        recipient_new_balance=serialize_ciphertext(new_recipient_balance),
    )


def generate_withdraw_proof(
    private_key: int,
    balance: int,
    amount: int,
    nullifier: int,
    new_balance: Ciphertext,
) -> WithdrawProof:
    """One-party analogue of ``generate_transfer_proof``."""
    _check_spend(balance, amount)
    proof_hash = compute_proof_hash(private_key, balance, amount, nullifier)
    return WithdrawProof(
        proof_hash=proof_hash,
        nullifier=nullifier,
        new_balance=serialize_ciphertext(new_balance),
    )
