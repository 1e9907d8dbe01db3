"""
Exponential ElGamal over the Stark curve.

Scheme (additively homomorphic):

    KeyGen:      sk <- [1, n-1],  PK = sk * G
    Encrypt:     r  <- [1, n-1]
                 C1 = r * G
                 C2 = m * G + r * PK
    Decrypt:     M  = C2 - sk * C1          (= m * G)
                 m  = dlog_G(M)             (baby-step / giant-step, bounded)

The plaintext lives in the exponent, so decryption is only practical for
amounts below a caller-chosen bound.  There is no authentication: a wrong
key yields ``None`` or an unrelated integer, never an exception.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional

from veil_core.curve import (
    CURVE_ORDER,
    GENERATOR,
    IDENTITY,
    GroupElement,
    RandomSource,
    add,
    is_identity,
    mul,
    mul_g,
    neg,
    points_equal,
    random_scalar,
    sub,
)
from veil_core.errors import InvalidAmountError
from veil_core.keys import validate_private_key

logger = logging.getLogger("veil.elgamal")

# Default decryption bound and the hard ceiling on any caller-supplied bound.
# 2^40 keeps the baby-step table around 2^20 entries.
DEFAULT_MAX_AMOUNT: int = 1 << 32
MAX_AMOUNT_CAP: int = 1 << 40

# BSGS table key for the identity; no affine x-coordinate (< p < 2^252)
# can encode to 32 bytes of 0xff.
_IDENTITY_KEY = b"\xff" * 32


@dataclass(frozen=True, eq=False)
class Ciphertext:
    """``c1 = r * G``, ``c2 = m * G + r * PK``."""
    c1: GroupElement
    c2: GroupElement

    def is_zero(self) -> bool:
        """True only for the canonical (identity, identity) ciphertext."""
        return is_identity(self.c1) and is_identity(self.c2)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Ciphertext):
            return NotImplemented
        return points_equal(self.c1, other.c1) and points_equal(self.c2, other.c2)

    __hash__ = None  # type: ignore[assignment]


# ---------------------------------------------------------------------------
#  Encryption
# ---------------------------------------------------------------------------

def _check_amount(amount: int) -> None:
    if amount < 0:
        raise InvalidAmountError("Amount must be non-negative")
    if amount >= CURVE_ORDER:
        raise InvalidAmountError("Amount must be below the group order")


def encrypt_with_randomness(amount: int, public_key: GroupElement, r: int) -> Ciphertext:
    """
    Encrypt with caller-supplied randomness.

    Only for reproducible tests: reusing or predicting ``r`` breaks
    semantic security.
    """
    _check_amount(amount)
    if not 1 <= r < CURVE_ORDER:
        raise ValueError("Randomness must lie in [1, n-1]")
    c1 = mul_g(r)
    m_g = IDENTITY if amount == 0 else mul_g(amount)
    c2 = add(m_g, mul(public_key, r))
    return Ciphertext(c1, c2)


def encrypt(
    amount: int,
    public_key: GroupElement,
    rng: Optional[RandomSource] = None,
) -> tuple[Ciphertext, int]:
    """
    Encrypt *amount* under *public_key* with fresh randomness.

    Returns ``(ciphertext, r)``.  ``r`` is exposed for test and
    reproducibility paths only and must not be stored.
    """
    _check_amount(amount)
    r = random_scalar(rng)
    return encrypt_with_randomness(amount, public_key, r), r


# ---------------------------------------------------------------------------
#  Decryption
# ---------------------------------------------------------------------------

def decrypt(
    ct: Ciphertext,
    private_key: int,
    max_amount: int = DEFAULT_MAX_AMOUNT,
    max_amount_cap: int = MAX_AMOUNT_CAP,
) -> Optional[int]:
    """
    Recover the plaintext of *ct*, or ``None`` if it is not in
    ``[0, max_amount]``.

    ``None`` is the normal "not found" outcome: the amount exceeds the
    bound, the logical balance went negative, or the key is wrong.  It is
    never conflated with a plaintext of zero.
    """
    validate_private_key(private_key)
    if not 0 <= max_amount <= max_amount_cap:
        raise InvalidAmountError(
            f"max_amount must lie in [0, {max_amount_cap}], got {max_amount}"
        )

    target = sub(ct.c2, mul(ct.c1, private_key))
    if is_identity(target):
        return 0

    result = baby_step_giant_step(target, max_amount)
    if result is None:
        logger.debug("Discrete-log search exhausted (max_amount=%d)", max_amount)
    return result


def point_key(point: GroupElement) -> bytes:
    """Fixed-width lookup key: the 32-byte big-endian affine x-coordinate."""
    if is_identity(point):
        return _IDENTITY_KEY
    return point.x().to_bytes(32, "big")


def _step_size(max_amount: int) -> int:
    root = math.isqrt(max_amount)
    if root * root < max_amount:
        root += 1
    return root + 1


def baby_step_giant_step(target: GroupElement, max_amount: int) -> Optional[int]:
    """
    Smallest ``m`` in ``[0, max_amount]`` with ``m * G == target``.

    Baby steps store ``j * G`` for ``j < step`` keyed by x-coordinate,
    together with y so that ``-j * G`` (same x) is not mistaken for a hit.
    Giant steps walk ``target - i * step * G``.
    """
    step = _step_size(max_amount)

    table: dict[bytes, tuple[int, Optional[int]]] = {}
    point = IDENTITY
    for j in range(step):
        if is_identity(point):
            table.setdefault(_IDENTITY_KEY, (j, None))
        else:
            table.setdefault(point_key(point), (j, point.y()))
        point = add(point, GENERATOR)

    giant = neg(mul_g(step))
    gamma = target
    for i in range(step):
        hit = table.get(point_key(gamma))
        if hit is not None:
            j, y = hit
            if y is None or gamma.y() == y:
                m = i * step + j
                return m if m <= max_amount else None
        gamma = add(gamma, giant)
    return None
