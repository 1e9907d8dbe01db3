"""
Ciphertext and public-key wire formats.

On the ledger a ciphertext is four field elements ``(c1_x, c1_y, c2_x,
c2_y)``.  The identity has no affine form, so it is written as ``(0, 0)``
(not a curve point, hence unambiguous).  The all-zero quadruple is the
canonical zero balance every account starts with.
"""

from __future__ import annotations

from typing import NamedTuple, Sequence

from veil_core.curve import (
    IDENTITY,
    GroupElement,
    from_affine,
    is_identity,
    to_affine,
)
from veil_core.elgamal import Ciphertext


class SerializedCiphertext(NamedTuple):
    c1_x: int
    c1_y: int
    c2_x: int
    c2_y: int

    def to_dict(self) -> dict[str, str]:
        return {name: hex(value) for name, value in self._asdict().items()}


ZERO_WIRE = SerializedCiphertext(0, 0, 0, 0)


def zero_ciphertext() -> Ciphertext:
    """
    The (identity, identity) ciphertext used as the initial balance.

    This is the specific degenerate pair, not a generic encryption of
    zero (which would carry non-zero randomness).
    """
    return Ciphertext(IDENTITY, IDENTITY)


def _point_to_wire(point: GroupElement) -> tuple[int, int]:
    if is_identity(point):
        return 0, 0
    return to_affine(point)


def _point_from_wire(x: int, y: int) -> GroupElement:
    if x == 0 and y == 0:
        return IDENTITY
    return from_affine(x, y)


def serialize_ciphertext(ct: Ciphertext) -> SerializedCiphertext:
    """Affine wire form; each identity component independently maps to (0, 0)."""
    if ct.is_zero():
        return ZERO_WIRE
    c1_x, c1_y = _point_to_wire(ct.c1)
    c2_x, c2_y = _point_to_wire(ct.c2)
    return SerializedCiphertext(c1_x, c1_y, c2_x, c2_y)


def deserialize_ciphertext(wire: Sequence[int]) -> Ciphertext:
    """
    Inverse of ``serialize_ciphertext``.

    Raises ``ValueError`` for a wrong arity or off-curve coordinates.
    """
    if len(wire) != 4:
        raise ValueError(f"A ciphertext has 4 coordinates, got {len(wire)}")
    c1_x, c1_y, c2_x, c2_y = (int(v) for v in wire)
    return Ciphertext(_point_from_wire(c1_x, c1_y), _point_from_wire(c2_x, c2_y))


def serialize_public_key(public_key: GroupElement) -> tuple[int, int]:
    if is_identity(public_key):
        raise ValueError("The identity is not a valid public key")
    return to_affine(public_key)


def deserialize_public_key(x: int, y: int) -> GroupElement:
    if x == 0 and y == 0:
        raise ValueError("The identity is not a valid public key")
    return from_affine(x, y)
