"""
Stark curve group adapter.

Wraps the ``ecdsa`` package's Jacobian point arithmetic, parameterised
with the Stark curve used by Starknet:

    y^2 = x^3 + x + beta   over   p = 2^251 + 17 * 2^192 + 1

The rest of the package only talks to the group through the functions in
this module:

  - scalar reduction modulo the group order ``n``
  - point add / negate / subtract and the identity test
  - generator and arbitrary-point scalar multiplication
  - affine <-> projective conversion with on-curve validation
  - ``compress``: the deterministic two-input one-way function ``H``
  - ``random_scalar``: uniform scalars from an injectable random source

Points are ``ecdsa.ellipticcurve.PointJacobi`` instances; the identity is
``ecdsa.ellipticcurve.INFINITY``.  Every helper normalises results so a
point that collapsed to infinity is always returned as ``IDENTITY``.
"""

from __future__ import annotations

import secrets
from typing import Any, Optional, Union

from ecdsa.ellipticcurve import INFINITY, CurveFp, PointJacobi
from starknet_py.hash.utils import pedersen_hash

# ---------------------------------------------------------------------------
#  Curve parameters
# ---------------------------------------------------------------------------

FIELD_PRIME: int = 2**251 + 17 * 2**192 + 1
ALPHA: int = 1
BETA: int = 0x06F21413EFBE40DE150E596D72F7A8C5609AD26C15C915C1F4CDFCB99CEE9E89
CURVE_ORDER: int = 0x0800000000000010FFFFFFFFFFFFFFFFB781126DCAE7B2321E66A241ADC64D2F

GENERATOR_X: int = 0x01EF15C18599971B7BECED415A40F0C7DEACFD9B0D1819E03D723D8BC943CFCA
GENERATOR_Y: int = 0x005668060AA49730B7BE4801DF46EC62DE53ECD11ABE43A32873000C36E8DC1F

STARK_CURVE = CurveFp(FIELD_PRIME, ALPHA, BETA, 1)
GENERATOR = PointJacobi(STARK_CURVE, GENERATOR_X, GENERATOR_Y, 1, CURVE_ORDER, generator=True)
IDENTITY = INFINITY

# Anything implementing ``randrange`` / ``getrandbits``: ``secrets.SystemRandom``
# in production, a seeded ``random.Random`` in tests.
RandomSource = Any
SYSTEM_RANDOM = secrets.SystemRandom()

GroupElement = Union[PointJacobi, Any]


# ---------------------------------------------------------------------------
#  Scalars
# ---------------------------------------------------------------------------

def mod(k: int) -> int:
    """Reduce *k* into ``[0, n-1]``."""
    return k % CURVE_ORDER


def random_scalar(rng: Optional[RandomSource] = None) -> int:
    """Uniform scalar in ``[1, n-1]``."""
    source = rng if rng is not None else SYSTEM_RANDOM
    return source.randrange(1, CURVE_ORDER)


# ---------------------------------------------------------------------------
#  Points
# ---------------------------------------------------------------------------

def is_identity(point: GroupElement) -> bool:
    return point is INFINITY or point == INFINITY


def _normalise(point: GroupElement) -> GroupElement:
    return IDENTITY if is_identity(point) else point


def points_equal(p: GroupElement, q: GroupElement) -> bool:
    """Group equality that also holds across Jacobian representations."""
    p_zero, q_zero = is_identity(p), is_identity(q)
    if p_zero or q_zero:
        return p_zero and q_zero
    return p == q


def add(p: GroupElement, q: GroupElement) -> GroupElement:
    if is_identity(p):
        return q
    if is_identity(q):
        return p
    return _normalise(p + q)


def neg(point: GroupElement) -> GroupElement:
    if is_identity(point):
        return IDENTITY
    x, y = to_affine(point)
    return PointJacobi(STARK_CURVE, x, (-y) % FIELD_PRIME, 1, CURVE_ORDER)


def sub(p: GroupElement, q: GroupElement) -> GroupElement:
    return add(p, neg(q))


def mul_g(k: int) -> GroupElement:
    """``k * G``; the identity when ``k`` is a multiple of the order."""
    k = mod(k)
    if k == 0:
        return IDENTITY
    return _normalise(GENERATOR * k)


def mul(point: GroupElement, k: int) -> GroupElement:
    """``k * P`` for an arbitrary point."""
    k = mod(k)
    if k == 0 or is_identity(point):
        return IDENTITY
    return _normalise(point * k)


def to_affine(point: GroupElement) -> tuple[int, int]:
    """Affine ``(x, y)`` of a non-identity point."""
    if is_identity(point):
        raise ValueError("The identity element has no affine coordinates")
    return point.x(), point.y()


def is_on_curve(x: int, y: int) -> bool:
    if not (0 <= x < FIELD_PRIME and 0 <= y < FIELD_PRIME):
        return False
    return STARK_CURVE.contains_point(x, y)


def from_affine(x: int, y: int) -> GroupElement:
    """Build a point from affine coordinates, rejecting off-curve input."""
    if not is_on_curve(x, y):
        raise ValueError(f"Point ({x:#x}, {y:#x}) is not on the Stark curve")
    return PointJacobi(STARK_CURVE, x, y, 1, CURVE_ORDER)


# ---------------------------------------------------------------------------
#  Two-input compression function H
# ---------------------------------------------------------------------------

def compress(a: int, b: int) -> int:
    """
    Stark Pedersen hash of two field elements.

    This is the hash the pool contract applies when it recomputes
    nullifiers and commitment hashes, so both sides agree on every value.
    """
    for value in (a, b):
        if not 0 <= value < FIELD_PRIME:
            raise ValueError(f"Hash input is not a field element: {value}")
    return pedersen_hash(a, b)
