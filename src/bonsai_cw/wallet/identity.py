"""
secp256k1 signing identity for Cosmos-SDK ledgers.

Keys come from a BIP-39 mnemonic through BIP-32 derivation (eth-account's HD
wallet support).  Addresses are bech32(prefix, RIPEMD160(SHA256(pubkey)))
over the 33-byte compressed public key; signatures are 64-byte compact
r||s over the SHA-256 of the sign bytes, low-S as the ledger requires.

The mnemonic stays in memory only.  Persisting it is the KeyStore's job and
always goes through the password envelope.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import bech32
from Crypto.Hash import RIPEMD160
from eth_account import Account
from eth_keys import keys
from eth_keys.exceptions import BadSignature, ValidationError

from ..config import COSMOS_HD_PATH
from ..utils import base64_encode, sha256_digest

# 12 words = 128 bits of entropy
MNEMONIC_WORDS = 12

PUBKEY_TYPE = "tendermint/PubKeySecp256k1"

Account.enable_unaudited_hdwallet_features()


def pubkey_to_address(compressed_pubkey: bytes, prefix: str) -> str:
    """Derive the bech32 account address for a compressed secp256k1 public key."""
    if len(compressed_pubkey) != 33:
        raise ValueError("Expected a 33-byte compressed public key")
    raw = RIPEMD160.new(sha256_digest(compressed_pubkey)).digest()
    words = bech32.convertbits(raw, 8, 5)
    return bech32.bech32_encode(prefix, words)


def address_prefix(address: str) -> str | None:
    """Return the human-readable part of a valid bech32 address, else None."""
    hrp, data = bech32.bech32_decode(address)
    if hrp is None or data is None:
        return None
    return hrp


@dataclass(frozen=True)
class AccountData:
    address: str
    pubkey: bytes
    algo: str = "secp256k1"


@dataclass(frozen=True)
class SigningIdentity:
    mnemonic: str = field(repr=False)
    hd_path: str
    prefix: str
    _private_key: keys.PrivateKey = field(repr=False, compare=False)

    @classmethod
    def from_mnemonic(cls, mnemonic: str, prefix: str, hd_path: str = COSMOS_HD_PATH) -> "SigningIdentity":
        """
        Derive an identity from a recovery phrase.

        Raises:
            ValueError: Invalid mnemonic (bad word or checksum) or derivation path
        """
        normalized = " ".join(mnemonic.split())
        try:
            account = Account.from_mnemonic(normalized, account_path=hd_path)
        except Exception as exc:
            raise ValueError(f"Invalid mnemonic or derivation path: {exc}") from exc
        return cls(
            mnemonic=normalized,
            hd_path=hd_path,
            prefix=prefix,
            _private_key=keys.PrivateKey(bytes(account.key)),
        )

    @classmethod
    def generate(cls, prefix: str, hd_path: str = COSMOS_HD_PATH) -> "SigningIdentity":
        """Create a fresh identity from a new 12-word mnemonic."""
        _, mnemonic = Account.create_with_mnemonic(num_words=MNEMONIC_WORDS, account_path=hd_path)
        return cls.from_mnemonic(mnemonic, prefix=prefix, hd_path=hd_path)

    @property
    def pubkey(self) -> bytes:
        return self._private_key.public_key.to_compressed_bytes()

    @property
    def address(self) -> str:
        return pubkey_to_address(self.pubkey, self.prefix)

    def get_accounts(self) -> list[AccountData]:
        return [AccountData(address=self.address, pubkey=self.pubkey)]

    def sign(self, sign_bytes: bytes) -> bytes:
        """Sign ``sign_bytes`` (hashed with SHA-256 first); returns 64-byte r||s."""
        signature = self._private_key.sign_msg_hash(sha256_digest(sign_bytes))
        return signature.to_bytes()[:64]

    def verify(self, sign_bytes: bytes, signature: bytes) -> bool:
        if len(signature) != 64:
            return False
        r = int.from_bytes(signature[:32], "big")
        s = int.from_bytes(signature[32:], "big")
        try:
            candidate = keys.Signature(vrs=(0, r, s))
            return self._private_key.public_key.verify_msg_hash(sha256_digest(sign_bytes), candidate)
        except (BadSignature, ValidationError):
            return False

    def amino_signature(self, sign_bytes: bytes) -> dict:
        """Sign and wrap the result in the amino ``StdSignature`` JSON shape."""
        return {
            "pub_key": {"type": PUBKEY_TYPE, "value": base64_encode(self.pubkey)},
            "signature": base64_encode(self.sign(sign_bytes)),
        }
