"""
Token precision helpers.

The pooled token has 18 decimals (1 STRK = 10**18 wei).  Balances are
encrypted in coarser units of ``BALANCE_SCALE`` wei (gwei), which keeps
plaintexts small enough for the bounded discrete-log search:

    2**32 balance units * 10**9 = ~4.29 STRK decryptable by default

Wei amounts handed to the ledger must be whole multiples of the scale.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation, localcontext

from veil_core.errors import InvalidAmountError

TOKEN_DECIMALS: int = 18
WEI_PER_TOKEN: int = 10 ** TOKEN_DECIMALS

# 1 encrypted balance unit = 10**9 wei.
BALANCE_SCALE: int = 10 ** 9


def to_balance_units(wei: int, scale: int = BALANCE_SCALE) -> int:
    """Convert a wei amount to encrypted balance units."""
    if wei < 0:
        raise InvalidAmountError("Amount must be non-negative")
    units, dust = divmod(wei, scale)
    if dust:
        raise InvalidAmountError(f"Amount {wei} is not a multiple of {scale} wei")
    return units


def from_balance_units(units: int, scale: int = BALANCE_SCALE) -> int:
    """Convert encrypted balance units back to wei."""
    if units < 0:
        raise InvalidAmountError("Amount must be non-negative")
    return units * scale


def parse_amount(text: str) -> int:
    """
    Parse a decimal token string into wei.

    >>> parse_amount("1.5")
    1500000000000000000
    """
    with localcontext() as ctx:
        ctx.prec = 80
        try:
            value = Decimal(text.strip())
        except InvalidOperation as exc:
            raise InvalidAmountError(f"Not a number: {text!r}") from exc
        if not value.is_finite() or value < 0:
            raise InvalidAmountError(f"Invalid amount: {text!r}")
        wei = value * WEI_PER_TOKEN
        if wei != wei.to_integral_value():
            raise InvalidAmountError(f"More than {TOKEN_DECIMALS} decimals: {text!r}")
        return int(wei)


def format_amount(wei: int, currency: str = "STRK", places: int = 4) -> str:
    """Human-readable amount truncated to *places* decimals."""
    whole, frac = divmod(wei, WEI_PER_TOKEN)
    digits = str(frac).zfill(TOKEN_DECIMALS)[:places]
    return f"{whole}.{digits} {currency}"
