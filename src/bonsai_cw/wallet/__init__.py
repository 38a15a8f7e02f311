"""
Wallet - signing identity and its encrypted on-disk record.

Uses eth-account for BIP-39/BIP-32 derivation, eth-keys for secp256k1
signatures, and argon2-cffi + cryptography for the password envelope.
"""

from .identity import AccountData, SigningIdentity, address_prefix, pubkey_to_address
from .keystore import KeyStore

__all__ = [
    "AccountData",
    "KeyStore",
    "SigningIdentity",
    "address_prefix",
    "pubkey_to_address",
]
