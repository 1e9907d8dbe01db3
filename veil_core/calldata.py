"""
Ledger interface and calldata encoding.

The shielded-pool ledger is an external collaborator.  ``ShieldedLedger``
describes the calls it exposes; the ``*_calldata`` helpers flatten the
payloads built by this package into the exact argument order the pool
contract expects, as ``0x``-prefixed felt strings.

u256 amounts travel as two 128-bit limbs ``(low, high)``.
"""

from __future__ import annotations

from typing import Any, Protocol, Sequence

from veil_core.curve import FIELD_PRIME
from veil_core.proof import TransferProof, WithdrawProof
from veil_core.serialization import SerializedCiphertext

PublicKeyWire = tuple[int, int]

_U128 = 1 << 128
_U256 = 1 << 256


class ShieldedLedger(Protocol):
    """
    The shielded-pool contract as seen from a client.

    The ledger alone stores ciphertexts, keeps the registered-key and
    spent-nullifier sets, and applies each update exactly once.
    """

    def register(self, public_key: PublicKeyWire) -> Any: ...

    def deposit(self, amount: int, new_balance: SerializedCiphertext) -> Any: ...

    def transfer(
        self,
        recipient_public_key: PublicKeyWire,
        new_sender_balance: SerializedCiphertext,
        new_recipient_balance: SerializedCiphertext,
        proof_hash: int,
        nullifier: int,
    ) -> Any: ...

    def withdraw(
        self,
        amount: int,
        new_balance: SerializedCiphertext,
        proof_hash: int,
        nullifier: int,
    ) -> Any: ...

    def get_balance(self, public_key: PublicKeyWire) -> Sequence[int]: ...

    def is_registered(self, public_key: PublicKeyWire) -> bool: ...

    def is_nullifier_spent(self, nullifier: int) -> bool: ...


def to_felt_hex(value: int) -> str:
    if not 0 <= value < FIELD_PRIME:
        raise ValueError(f"Value {value} is not a field element")
    return hex(value)


def split_u256(value: int) -> tuple[int, int]:
    """``(low, high)`` 128-bit limbs of a u256."""
    if not 0 <= value < _U256:
        raise ValueError(f"Value {value} does not fit in a u256")
    return value % _U128, value // _U128


def _u256_felts(value: int) -> list[str]:
    low, high = split_u256(value)
    return [hex(low), hex(high)]


def _ciphertext_felts(ct: SerializedCiphertext) -> list[str]:
    return [to_felt_hex(v) for v in ct]


def register_calldata(public_key: PublicKeyWire) -> list[str]:
    x, y = public_key
    return [to_felt_hex(x), to_felt_hex(y)]


def deposit_calldata(amount: int, new_balance: SerializedCiphertext) -> list[str]:
    return _u256_felts(amount) + _ciphertext_felts(new_balance)


def transfer_calldata(recipient_public_key: PublicKeyWire, proof: TransferProof) -> list[str]:
    return (
        register_calldata(recipient_public_key)
        + _ciphertext_felts(proof.sender_new_balance)
        + _ciphertext_felts(proof.recipient_new_balance)
        + [to_felt_hex(proof.proof_hash), to_felt_hex(proof.nullifier)]
    )


def withdraw_calldata(amount: int, proof: WithdrawProof) -> list[str]:
    return (
        _u256_felts(amount)
        + _ciphertext_felts(proof.new_balance)
        + [to_felt_hex(proof.proof_hash), to_felt_hex(proof.nullifier)]
    )


def balance_from_calldata(felts: Sequence[Any]) -> SerializedCiphertext:
    """Parse a ``get_encrypted_balance`` result (hex strings or ints)."""
    if len(felts) != 4:
        raise ValueError(f"Expected 4 felts, got {len(felts)}")
    values = [int(f, 16) if isinstance(f, str) else int(f) for f in felts]
    for v in values:
        to_felt_hex(v)
    return SerializedCiphertext(*values)
