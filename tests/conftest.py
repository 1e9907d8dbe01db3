"""
Shared pytest fixtures for the Veil test suite.
"""

import random

import pytest

from veil_core.keys import KeyPair, generate_keypair
from veil_core.serialization import ZERO_WIRE, SerializedCiphertext
from veil_core.wallet import ShieldedWallet


class InMemoryLedger:
    """
    Ledger fake: one wire ciphertext per registered key, a spent-nullifier
    set and locked-value accounting.  ``caller`` stands in for the account
    that submits the next call.
    """

    def __init__(self):
        self.balances: dict[tuple[int, int], SerializedCiphertext] = {}
        self.spent: set[int] = set()
        self.locked = 0
        self.caller: tuple[int, int] | None = None

    def _require_caller(self) -> tuple[int, int]:
        if self.caller not in self.balances:
            raise ValueError("caller not registered")
        return self.caller

    def _spend(self, nullifier: int) -> None:
        if nullifier in self.spent:
            raise ValueError("nullifier already spent")
        self.spent.add(nullifier)

    def register(self, public_key):
        if public_key in self.balances:
            raise ValueError("already registered")
        self.balances[public_key] = ZERO_WIRE

    def deposit(self, amount, new_balance):
        caller = self._require_caller()
        self.balances[caller] = SerializedCiphertext(*new_balance)
        self.locked += amount

    def transfer(self, recipient_public_key, new_sender_balance, new_recipient_balance,
                 proof_hash, nullifier):
        caller = self._require_caller()
        if recipient_public_key not in self.balances:
            raise ValueError("recipient not registered")
        self._spend(nullifier)
        self.balances[caller] = SerializedCiphertext(*new_sender_balance)
        self.balances[recipient_public_key] = SerializedCiphertext(*new_recipient_balance)

    def withdraw(self, amount, new_balance, proof_hash, nullifier):
        caller = self._require_caller()
        if amount > self.locked:
            raise ValueError("insufficient locked value")
        self._spend(nullifier)
        self.balances[caller] = SerializedCiphertext(*new_balance)
        self.locked -= amount

    def get_balance(self, public_key):
        return self.balances.get(public_key, ZERO_WIRE)

    def is_registered(self, public_key):
        return public_key in self.balances

    def is_nullifier_spent(self, nullifier):
        return nullifier in self.spent


@pytest.fixture
def rng():
    """Seeded random source so encryptions are reproducible."""
    return random.Random(0xC0FFEE)


@pytest.fixture
def keypair():
    """Fresh keypair from the system random source."""
    return generate_keypair()


@pytest.fixture
def alice_keys():
    """Deterministic keypair for Alice."""
    return KeyPair.from_private_key(0xA11CE)


@pytest.fixture
def bob_keys():
    """Deterministic keypair for Bob."""
    return KeyPair.from_private_key(0xB0B)


@pytest.fixture
def alice_wallet(alice_keys, rng):
    """Alice's wallet with a small decryption bound for fast tests."""
    return ShieldedWallet(alice_keys, rng=rng, max_amount=1 << 16)


@pytest.fixture
def bob_wallet(bob_keys, rng):
    """Bob's wallet with a small decryption bound for fast tests."""
    return ShieldedWallet(bob_keys, rng=rng, max_amount=1 << 16)


@pytest.fixture
def ledger():
    """Empty in-memory shielded pool."""
    return InMemoryLedger()
