"""
Exception taxonomy for the Veil confidential-balance core.

Every error is also a ``ValueError`` so callers that only guard against
bad input keep working.  A failed discrete-log search is *not* an error:
``elgamal.decrypt`` returns ``None`` for that case.
"""

from __future__ import annotations


class VeilError(Exception):
    """Base class for all errors raised by ``veil_core``."""


class InvalidAmountError(VeilError, ValueError):
    """An amount (or search bound) is negative or otherwise unusable."""


class AmountNotPositiveError(InvalidAmountError):
    """A transfer or withdrawal amount is zero or negative."""


class InsufficientBalanceError(VeilError, ValueError):
    """The caller-asserted balance is below the requested amount."""

    def __init__(self, balance: int, amount: int):
        super().__init__("Insufficient balance")
        self.balance = balance
        self.amount = amount


class KeyDomainError(VeilError, ValueError):
    """A private key lies outside [1, n-1] or does not match its public key."""


class BalanceUnavailableError(VeilError, ValueError):
    """The wallet's own balance ciphertext did not decrypt within the bound."""


class LedgerRPCError(VeilError):
    """A ledger node returned an error or could not be reached."""

    def __init__(self, message: str, code: int | None = None):
        super().__init__(message)
        self.code = code
