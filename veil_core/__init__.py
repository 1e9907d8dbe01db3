"""
Veil - confidential balances on a shielded pool.

Key features:
- Exponential ElGamal over the Stark curve (additively homomorphic)
- Bounded baby-step / giant-step balance decryption
- Deposit / transfer / withdraw balance updates without decryption
- Domain-separated nullifiers for replay protection
- Hash commitments binding each spend before submission
"""

__version__ = "0.1.0"
__all__ = [
    "curve",
    "keys",
    "elgamal",
    "homomorphic",
    "serialization",
    "nullifier",
    "proof",
    "calldata",
    "precision",
    "wallet",
    "rpc",
    "config",
    "logging_config",
    "errors",
]
