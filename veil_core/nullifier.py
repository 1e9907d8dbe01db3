"""
Nullifier generation for double-spend prevention.

A nullifier is a deterministic hash of the owner's private key and a
nonce.  Only the key owner can produce it, and once the ledger records it
as spent any replay of the same action is rejected.

Domain-separated nullifiers hash in a per-operation tag, so a single
monotonically increasing counter can be shared between transfers and
withdrawals without the two ever colliding.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Optional, Union

from veil_core.curve import RandomSource, SYSTEM_RANDOM, compress
from veil_core.keys import validate_private_key

# 31 bytes: comfortably below the 251-bit field, no modular wrap-around.
NONCE_BITS = 248


class NullifierDomain(IntEnum):
    TRANSFER = 1
    WITHDRAW = 2


def _resolve_domain(domain: Union[NullifierDomain, str, int]) -> NullifierDomain:
    if isinstance(domain, NullifierDomain):
        return domain
    if isinstance(domain, str):
        try:
            return NullifierDomain[domain.upper()]
        except KeyError:
            raise ValueError(f"Unknown nullifier domain: {domain!r}") from None
    return NullifierDomain(domain)


def generate_nullifier(private_key: int, nonce: int) -> int:
    """``H(sk, nonce)``."""
    return compress(validate_private_key(private_key), nonce)


def generate_domain_nullifier(
    private_key: int,
    nonce: int,
    domain: Union[NullifierDomain, str, int],
) -> int:
    """``H(H(sk, nonce), tag)`` with ``tag`` 1 for transfer, 2 for withdraw."""
    tag = _resolve_domain(domain)
    return compress(generate_nullifier(private_key, nonce), int(tag))


def nonce_from_counter(counter: int) -> int:
    """Nonce from a caller-managed counter; the caller persists the counter."""
    if counter < 0:
        raise ValueError("Nonce counter must be non-negative")
    return int(counter)


def random_nonce(rng: Optional[RandomSource] = None) -> int:
    source = rng if rng is not None else SYSTEM_RANDOM
    return source.getrandbits(NONCE_BITS)
