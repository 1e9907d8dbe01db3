"""
Homomorphic operations on ElGamal ciphertexts.

    Enc(a) + Enc(b) = (C1_a + C1_b, C2_a + C2_b) = Enc(a + b)
    Enc(a) - Enc(b) = (C1_a - C1_b, C2_a - C2_b) = Enc(a - b)

Both operands must be encrypted under the same public key.  The balance
recipes below never check sufficiency: a sender balance that goes
logically negative simply stops decrypting.  Enforcing ``balance >=
amount`` is the job of ``veil_core.proof``.
"""

from __future__ import annotations

from typing import NamedTuple, Optional

from veil_core.curve import GroupElement, RandomSource, add, sub
from veil_core.elgamal import Ciphertext, encrypt
from veil_core.serialization import SerializedCiphertext, serialize_ciphertext


class BalanceUpdate(NamedTuple):
    new_balance: Ciphertext
    serialized: SerializedCiphertext


class TransferUpdate(NamedTuple):
    new_sender_balance: Ciphertext
    new_recipient_balance: Ciphertext
    sender_serialized: SerializedCiphertext
    recipient_serialized: SerializedCiphertext


def add_ciphertexts(a: Ciphertext, b: Ciphertext) -> Ciphertext:
    return Ciphertext(add(a.c1, b.c1), add(a.c2, b.c2))


def subtract_ciphertexts(a: Ciphertext, b: Ciphertext) -> Ciphertext:
    return Ciphertext(sub(a.c1, b.c1), sub(a.c2, b.c2))


def compute_deposit_balance(
    current_balance: Ciphertext,
    amount: int,
    public_key: GroupElement,
    rng: Optional[RandomSource] = None,
) -> BalanceUpdate:
    """Credit *amount* to an encrypted balance."""
    encrypted_amount, _ = encrypt(amount, public_key, rng)
    new_balance = add_ciphertexts(current_balance, encrypted_amount)
    return BalanceUpdate(new_balance, serialize_ciphertext(new_balance))


def compute_transfer_balances(
    sender_balance: Ciphertext,
    recipient_balance: Ciphertext,
    amount: int,
    sender_public_key: GroupElement,
    recipient_public_key: GroupElement,
    rng: Optional[RandomSource] = None,
) -> TransferUpdate:
    """
    Move *amount* from the sender's to the recipient's encrypted balance.

    The amount is encrypted twice, independently, once under each key:
    a ciphertext under one key cannot be combined with a balance held
    under another.
    """
    enc_for_sender, _ = encrypt(amount, sender_public_key, rng)
    enc_for_recipient, _ = encrypt(amount, recipient_public_key, rng)

    new_sender = subtract_ciphertexts(sender_balance, enc_for_sender)
    new_recipient = add_ciphertexts(recipient_balance, enc_for_recipient)

    return TransferUpdate(
        new_sender,
        new_recipient,
        serialize_ciphertext(new_sender),
        serialize_ciphertext(new_recipient),
    )


def compute_withdraw_balance(
    current_balance: Ciphertext,
    amount: int,
    public_key: GroupElement,
    rng: Optional[RandomSource] = None,
) -> BalanceUpdate:
    """Debit *amount* from an encrypted balance."""
    encrypted_amount, _ = encrypt(amount, public_key, rng)
    new_balance = subtract_ciphertexts(current_balance, encrypted_amount)
    return BalanceUpdate(new_balance, serialize_ciphertext(new_balance))
