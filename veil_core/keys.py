"""
ElGamal key management.

A keypair is a private scalar ``sk`` in ``[1, n-1]`` and its public key
``PK = sk * G`` on the Stark curve.  Keys are generated client-side and
persisted by the caller; ``to_dict`` / ``from_dict`` produce and accept
the decimal-string layout used by the browser wallet storage.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from veil_core.curve import (
    CURVE_ORDER,
    GroupElement,
    RandomSource,
    from_affine,
    mul_g,
    points_equal,
    random_scalar,
    to_affine,
)
from veil_core.errors import KeyDomainError


def validate_private_key(private_key: int) -> int:
    """Return *private_key* unchanged, or raise ``KeyDomainError``."""
    if isinstance(private_key, bool) or not isinstance(private_key, int):
        raise KeyDomainError("Private key must be an integer")
    if not 1 <= private_key < CURVE_ORDER:
        raise KeyDomainError("Private key must lie in [1, n-1]")
    return private_key


def derive_public_key(private_key: int) -> GroupElement:
    """Derive the public key ``sk * G``."""
    return mul_g(validate_private_key(private_key))


@dataclass(frozen=True, eq=False)
class KeyPair:
    """An ElGamal keypair.  ``public_key`` is always ``private_key * G``."""
    private_key: int
    public_key: GroupElement

    @classmethod
    def from_private_key(cls, private_key: int) -> KeyPair:
        return cls(private_key, derive_public_key(private_key))

    @property
    def public_key_xy(self) -> tuple[int, int]:
        return to_affine(self.public_key)

    def to_dict(self) -> dict[str, str]:
        x, y = self.public_key_xy
        return {
            "private_key": str(self.private_key),
            "public_key_x": str(x),
            "public_key_y": str(y),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> KeyPair:
        """
        Rebuild a keypair from stored fields.

        Raises ``KeyDomainError`` when the stored public key does not
        belong to the stored private key, which indicates corrupt storage.
        """
        try:
            private_key = int(data["private_key"])
            x = int(data["public_key_x"])
            y = int(data["public_key_y"])
        except (KeyError, TypeError, ValueError) as exc:
            raise KeyDomainError(f"Malformed key data: {exc}") from exc
        kp = cls.from_private_key(private_key)
        try:
            stored = from_affine(x, y)
        except ValueError as exc:
            raise KeyDomainError("Stored public key is not a curve point") from exc
        if not points_equal(stored, kp.public_key):
            raise KeyDomainError("Stored public key does not match the private key")
        return kp

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, KeyPair):
            return NotImplemented
        return self.private_key == other.private_key

    def __hash__(self) -> int:
        return hash(self.public_key_xy)

    def __repr__(self) -> str:
        x, _ = self.public_key_xy
        return f"KeyPair(pk_x={x:#x})"


def generate_keypair(rng: Optional[RandomSource] = None) -> KeyPair:
    """Draw a uniform private key in ``[1, n-1]`` and derive its public key."""
    private_key = random_scalar(rng)
    return KeyPair(private_key, mul_g(private_key))
